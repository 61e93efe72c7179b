"""
Tests for slash command interactions.
"""
import json
import pytest
from datetime import datetime
from nacl.encoding import HexEncoder
from nacl.signing import SigningKey

from expensebot.core.config import settings
from expensebot.services.command_service import command_definitions

USERS = {
    "1": {"id": "1", "username": "alice"},
    "2": {"id": "2", "username": "bob"},
    "3": {"id": "3", "username": "carol"},
}


def command(name, options=None, user="alice"):
    """Build an application command payload as the platform sends it."""
    return {
        "type": 2,
        "member": {"user": {"username": user}},
        "data": {
            "name": name,
            "options": [{"name": k, "value": v} for k, v in (options or {}).items()],
            "resolved": {"users": USERS},
        },
    }


SIGNING_KEY = SigningKey.generate()
TIMESTAMP = "1760788800"


@pytest.fixture(autouse=True)
def public_key(monkeypatch):
    monkeypatch.setattr(settings, "DISCORD_PUBLIC_KEY", SIGNING_KEY.verify_key.encode(encoder=HexEncoder).decode())


def signed_headers(body, key=SIGNING_KEY, timestamp=TIMESTAMP):
    signature = key.sign(timestamp.encode() + body).signature.hex()
    return {
        "Content-Type": "application/json",
        "X-Signature-Ed25519": signature,
        "X-Signature-Timestamp": timestamp,
    }


def interact(client, payload, headers=None):
    """POST a payload signed the way the platform signs it."""
    body = json.dumps(payload).encode()
    return client.post("/api/interactions", content=body, headers=headers or signed_headers(body))


def embed_of(response):
    assert response["type"] == 4
    return response["data"]["embeds"][0]


def fields_of(embed):
    return {f["name"]: f["value"] for f in embed.get("fields", [])}


def test_ping(client):
    assert interact(client, {"type": 1}).json() == {"type": 1}


def test_addexpense(client, store):
    response = interact(
        client,
        command("addexpense", {"amount": 12.5, "category": "Food", "description": "lunch"})
    ).json()

    embed = embed_of(response)
    assert embed["title"] == "Expense Added"
    assert fields_of(embed)["Amount"] == "$12.50"
    assert fields_of(embed)["Added By"] == "alice"
    assert store.worksheets[settings.EXPENSE_WORKSHEET][-1][1] == "alice"


def test_addexpense_rejects_zero_amount(client, store):
    response = interact(
        client,
        command("addexpense", {"amount": 0, "category": "Food", "description": "free"})
    ).json()

    assert response["data"]["content"] == "Amount must be greater than 0."
    assert len(store.worksheets[settings.EXPENSE_WORKSHEET]) == 1


def test_addexpense_with_budget_alert(client):
    interact(client, command("setbudget", {"amount": 10}))

    response = interact(
        client,
        command("addexpense", {"amount": 15, "category": "Food", "description": "dinner"})
    ).json()

    fields = fields_of(embed_of(response))
    assert "⚠️ Budget Alert" in fields
    assert "Current spending: $15.00" in fields["⚠️ Budget Alert"]


def test_listexpenses_empty(client):
    response = interact(client, command("listexpenses")).json()

    assert response["data"]["content"] == "No expenses found matching your criteria."


def test_listexpenses_by_user(client, store):
    store.worksheets[settings.EXPENSE_WORKSHEET].extend([
        ["2026-10-01 10:00:00", "alice", 5, "Food", "bagel"],
        ["2026-10-02 10:00:00", "bob", 7, "Food", "soup"],
    ])

    response = interact(client, command("listexpenses", {"user": "2"})).json()

    embed = embed_of(response)
    assert embed["description"] == "Showing 1 expense by bob"
    assert fields_of(embed)["Total"] == "$7.00"


def test_summary_no_data(client):
    response = interact(client, command("summary", {"period": "week"})).json()

    assert response["data"]["content"] == "No expenses found for this week."


def test_summary_breakdowns(client, store):
    stamp = datetime.now().strftime(settings.DATE_FORMAT)
    store.worksheets[settings.EXPENSE_WORKSHEET].extend([
        [stamp, "alice", 10, "Food", "x"],
        [stamp, "bob", 25, "Rent", "y"],
    ])

    response = interact(client, command("summary", {"period": "month"})).json()

    embed = embed_of(response)
    fields = fields_of(embed)
    assert embed["title"] == "Expense Summary: This Month"
    assert fields["Total Expenses"] == "$35.00"
    assert fields["Category Breakdown"] == "Rent: $25.00\nFood: $10.00"
    assert fields["User Breakdown"] == "bob: $25.00\nalice: $10.00"


def test_splitexpense(client, store):
    response = interact(
        client,
        command("splitexpense", {"amount": 90, "description": "Cab", "user1": "1", "user2": "2", "user3": "3"})
    ).json()

    fields = fields_of(embed_of(response))
    assert fields["Split Amount"] == "$30.00 per person"
    assert fields["Split Between"] == "alice, bob, carol"
    assert len(store.worksheets[settings.EXPENSE_WORKSHEET]) == 4


def test_splitexpense_same_user_twice(client):
    response = interact(
        client,
        command("splitexpense", {"amount": 90, "description": "Cab", "user1": "1", "user2": "1"})
    ).json()

    assert response["data"]["content"] == "You need at least 2 different users to split an expense."


def test_setbudget_category_keeps_monthly_total(client, store):
    interact(client, command("setbudget", {"amount": 400}))
    interact(client, command("setbudget", {"amount": 80, "category": "Food"}))

    rows = store.worksheets[settings.BUDGET_WORKSHEET]
    assert rows[1] == ["alice", 400.0, '{"Food": 80}']


def test_budget_without_budget(client):
    response = interact(client, command("budget")).json()

    assert "not set a budget" in response["data"]["content"]


def test_store_failure_gives_generic_reply(client, store):
    store.fail_with = "quota"

    response = interact(client, command("listexpenses")).json()

    assert response["data"]["content"] == "There was an error fetching the expense list. Please try again later."


def test_unknown_command(client):
    response = interact(client, command("dance")).json()

    assert response["data"]["flags"] == 64


def test_command_definitions_cover_handlers():
    names = [definition["name"] for definition in command_definitions()]

    assert names == ["addexpense", "listexpenses", "summary", "splitexpense", "setbudget", "budget"]


def test_unsigned_interaction_is_rejected(client, store):
    body = json.dumps(command("setbudget", {"amount": 10}, user="victim")).encode()
    headers = {"Content-Type": "application/json", "X-Signature-Ed25519": "00", "X-Signature-Timestamp": TIMESTAMP}

    response = client.post("/api/interactions", content=body, headers=headers)
    assert response.status_code == 401

    response = client.post("/api/interactions", content=body, headers={"Content-Type": "application/json"})
    assert response.status_code == 401
    assert settings.BUDGET_WORKSHEET not in store.worksheets


def test_interaction_signed_by_another_key_is_rejected(client):
    body = json.dumps({"type": 1}).encode()

    response = client.post("/api/interactions", content=body, headers=signed_headers(body, key=SigningKey.generate()))

    assert response.status_code == 401


def test_signature_covers_the_timestamp(client):
    body = json.dumps({"type": 1}).encode()
    headers = signed_headers(body)
    headers["X-Signature-Timestamp"] = "1760788801"

    assert client.post("/api/interactions", content=body, headers=headers).status_code == 401


def test_interactions_rejected_without_public_key(client, monkeypatch):
    monkeypatch.setattr(settings, "DISCORD_PUBLIC_KEY", "")

    assert interact(client, {"type": 1}).status_code == 401
