"""
Slash command handling for chat interactions.

Interaction payloads follow the Discord HTTP interactions format: the
command name and options arrive in `data`, the invoking user in `member.user`
(guilds) or `user` (DMs), and user options are resolved in `data.resolved`.
Each handler returns the message payload sent back to the channel.
"""
import logging
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Callable, Dict, List, Optional

from expensebot.core.config import settings
from expensebot.core.dates import Period, parse_period, readable_date_range
from expensebot.core.exceptions import InsufficientParticipants, InvalidAmount, InvalidPeriod
from expensebot.core.utils import format_currency, truncate
from expensebot.models.budget import Budget
from expensebot.services.budget_service import BudgetRepository, check_budget
from expensebot.services.expense_service import (
    ExpenseFilter, ExpenseRepository, add_expense, list_recent_expenses
)
from expensebot.services.split_service import per_person_amount, split_expense, unique_participants
from expensebot.services.summary_service import get_summary

logger = logging.getLogger(__name__)

# Interaction types
PING = 1
APPLICATION_COMMAND = 2

# Response types
PONG = 1
CHANNEL_MESSAGE = 4

EPHEMERAL = 1 << 6

# Option types
STRING = 3
INTEGER = 4
USER = 6
NUMBER = 10

MAX_SPLIT_USERS = 5
FOOTER = {"text": "ExpenseTracker Bot"}

COLORS = {
    "added": 0x4CAF50,
    "list": 0x3498DB,
    "summary": 0x9B59B6,
    "split": 0xF1C40F,
    "budget": 0xE67E22,
}


def _category_choices() -> List[Dict[str, str]]:
    return [{"name": category, "value": category} for category in settings.EXPENSE_CATEGORIES]


def command_definitions() -> List[Dict[str, Any]]:
    """Application command definitions for registration with the platform."""
    period_choices = [{"name": Period.WEEK.label, "value": "week"}, {"name": Period.MONTH.label, "value": "month"}]
    split_users = [
        {"type": USER, "name": f"user{i}", "description": f"User {i} to split with", "required": i <= 2}
        for i in range(1, MAX_SPLIT_USERS + 1)
    ]
    return [
        {
            "name": "addexpense",
            "description": "Add a new expense to the tracker",
            "options": [
                {"type": NUMBER, "name": "amount", "description": "The expense amount", "required": True},
                {"type": STRING, "name": "category", "description": "The expense category",
                 "required": True, "choices": _category_choices()},
                {"type": STRING, "name": "description", "description": "A short description of the expense",
                 "required": True},
            ],
        },
        {
            "name": "listexpenses",
            "description": "List recent expenses with optional filters",
            "options": [
                {"type": STRING, "name": "category", "description": "Filter by expense category",
                 "required": False, "choices": _category_choices()},
                {"type": USER, "name": "user", "description": "Filter by user", "required": False},
                {"type": INTEGER, "name": "limit", "description": "Number of expenses to show (default: 10)",
                 "required": False, "min_value": 1, "max_value": 25},
            ],
        },
        {
            "name": "summary",
            "description": "Get expense summaries by period",
            "options": [
                {"type": STRING, "name": "period", "description": "Time period for the summary",
                 "required": True, "choices": period_choices},
                {"type": STRING, "name": "category", "description": "Filter by expense category",
                 "required": False, "choices": _category_choices()},
                {"type": USER, "name": "user", "description": "Filter by user", "required": False},
            ],
        },
        {
            "name": "splitexpense",
            "description": "Split an expense between multiple users",
            "options": [
                {"type": NUMBER, "name": "amount", "description": "The total expense amount", "required": True},
                {"type": STRING, "name": "description", "description": "A short description of the expense",
                 "required": True},
                split_users[0],
                split_users[1],
                {"type": STRING, "name": "category", "description": "The expense category",
                 "required": False, "choices": _category_choices()},
                *split_users[2:],
            ],
        },
        {
            "name": "setbudget",
            "description": "Set your monthly budget, overall or for one category",
            "options": [
                {"type": NUMBER, "name": "amount", "description": "Monthly budget amount", "required": True,
                 "min_value": 0},
                {"type": STRING, "name": "category", "description": "Set the budget for this category only",
                 "required": False, "choices": _category_choices()},
            ],
        },
        {
            "name": "budget",
            "description": "Show your budget and this month's spending",
            "options": [],
        },
    ]


class Interaction:
    """Accessors over an application command payload."""

    def __init__(self, payload: Dict[str, Any]):
        self.payload = payload
        self.data = payload.get("data") or {}
        self.options = {option["name"]: option.get("value") for option in self.data.get("options", [])}
        self.resolved_users = (self.data.get("resolved") or {}).get("users") or {}

    @property
    def name(self) -> str:
        return self.data.get("name", "")

    @property
    def username(self) -> str:
        user = (self.payload.get("member") or {}).get("user") or self.payload.get("user") or {}
        return user.get("username", "")

    def get(self, name: str, default: Any = None) -> Any:
        value = self.options.get(name)
        return default if value is None else value

    def get_amount(self, name: str) -> Optional[Decimal]:
        value = self.options.get(name)
        return None if value is None else Decimal(str(value))

    def get_user(self, name: str) -> Optional[str]:
        """Username of a user option, resolved from its id."""
        user_id = self.options.get(name)
        if user_id is None:
            return None
        user = self.resolved_users.get(str(user_id)) or {}
        return user.get("username")


def message(content: str, ephemeral: bool = False) -> Dict[str, Any]:
    data: Dict[str, Any] = {"content": content}
    if ephemeral:
        data["flags"] = EPHEMERAL
    return {"type": CHANNEL_MESSAGE, "data": data}


def embed_message(embed: Dict[str, Any]) -> Dict[str, Any]:
    embed.setdefault("timestamp", datetime.now(timezone.utc).isoformat())
    return {"type": CHANNEL_MESSAGE, "data": {"embeds": [embed]}}


def field(name: str, value: Any, inline: bool = False) -> Dict[str, Any]:
    return {"name": name, "value": str(value), "inline": inline}


def _filter_suffix(category: Optional[str], username: Optional[str]) -> str:
    suffix = f' in category "{category}"' if category else ""
    if username:
        suffix += f" by {username}"
    return suffix


class CommandService:
    """Dispatches application commands to the expense services."""

    def __init__(self, expenses: ExpenseRepository, budgets: BudgetRepository):
        self.expenses = expenses
        self.budgets = budgets
        self.handlers: Dict[str, Callable] = {
            "addexpense": self.add_expense,
            "listexpenses": self.list_expenses,
            "summary": self.summary,
            "splitexpense": self.split_expense,
            "setbudget": self.set_budget,
            "budget": self.show_budget,
        }
        self.failure_messages = {
            "addexpense": "There was an error adding your expense. Please try again later.",
            "listexpenses": "There was an error fetching the expense list. Please try again later.",
            "summary": "There was an error generating the expense summary. Please try again later.",
            "splitexpense": "There was an error splitting the expense. Please try again later.",
            "setbudget": "There was an error saving your budget. Please try again later.",
            "budget": "There was an error fetching your budget. Please try again later.",
        }

    async def handle(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        """Answer one interaction payload."""
        if payload.get("type") == PING:
            return {"type": PONG}

        interaction = Interaction(payload)
        handler = self.handlers.get(interaction.name)
        if handler is None:
            logger.error(f"No command matching {interaction.name!r} was found.")
            return message("There was an error executing this command!", ephemeral=True)

        try:
            return await handler(interaction)
        except (InvalidAmount, InsufficientParticipants, InvalidPeriod) as e:
            return message(str(e))
        except Exception as e:
            logger.error(f"Error in {interaction.name} command: {e}", exc_info=True)
            return message(self.failure_messages[interaction.name])

    async def add_expense(self, interaction: Interaction) -> Dict[str, Any]:
        username = interaction.username
        category = interaction.get("category")
        description = interaction.get("description", "")
        record = await add_expense(
            self.expenses, username, interaction.get_amount("amount"), category, description
        )

        embed = {
            "color": COLORS["added"],
            "title": "Expense Added",
            "description": "Your expense has been recorded successfully.",
            "fields": [
                field("Amount", format_currency(record.amount), inline=True),
                field("Category", category, inline=True),
                field("Description", description or "-"),
                field("Added By", username, inline=True),
                field("Timestamp", record.timestamp, inline=True),
            ],
        }

        if settings.ENABLE_BUDGET_ALERTS:
            _, _, alerts = await check_budget(self.expenses, self.budgets, username)
            embed["fields"].extend(field(alert.title, alert.message) for alert in alerts)

        return embed_message(embed)

    async def list_expenses(self, interaction: Interaction) -> Dict[str, Any]:
        category = interaction.get("category")
        username = interaction.get_user("user")
        limit = int(interaction.get("limit", 10))

        expenses = await list_recent_expenses(
            self.expenses, ExpenseFilter(category=category, username=username), limit
        )
        if not expenses:
            return message("No expenses found matching your criteria.")

        noun = "expense" if len(expenses) == 1 else "expenses"
        fields = [
            field(
                f"{index}. {format_currency(expense.amount)} - {expense.category}",
                f"{truncate(expense.description, 100) or '-'}\nBy: {expense.username} • Date: {expense.timestamp}"
            )
            for index, expense in enumerate(expenses, start=1)
        ]
        fields.append(field("Total", format_currency(sum((e.amount for e in expenses), Decimal(0)))))
        return embed_message({
            "color": COLORS["list"],
            "title": "Recent Expenses",
            "description": f"Showing {len(expenses)} {noun}{_filter_suffix(category, username)}",
            "fields": fields,
        })

    async def summary(self, interaction: Interaction) -> Dict[str, Any]:
        period = parse_period(interaction.get("period", ""))
        category = interaction.get("category")
        username = interaction.get_user("user")

        result = await get_summary(self.expenses, period, ExpenseFilter(category=category, username=username))
        suffix = _filter_suffix(category, username)
        if result.expense_count == 0:
            return message(f"No expenses found for {period.label.lower()}{suffix}.")

        fields = [
            field("Total Expenses", format_currency(result.total_amount), inline=True),
            field("Number of Expenses", result.expense_count, inline=True),
        ]
        if not category and result.category_totals:
            breakdown = "\n".join(f"{name}: {format_currency(total)}" for name, total in result.sorted_categories())
            fields.append(field("Category Breakdown", breakdown))
        if not username and len(result.user_totals) > 1:
            breakdown = "\n".join(f"{name}: {format_currency(total)}" for name, total in result.sorted_users())
            fields.append(field("User Breakdown", breakdown))

        return embed_message({
            "color": COLORS["summary"],
            "title": f"Expense Summary: {period.label}",
            "description": f"Expense summary for {readable_date_range(period)}{suffix}.",
            "fields": fields,
            "footer": FOOTER,
        })

    async def split_expense(self, interaction: Interaction) -> Dict[str, Any]:
        amount = interaction.get_amount("amount")
        description = interaction.get("description", "")
        category = interaction.get("category")
        users = unique_participants(
            interaction.get_user(f"user{i}") for i in range(1, MAX_SPLIT_USERS + 1)
        )

        records = await split_expense(self.expenses, amount, description, users, category)
        return embed_message({
            "color": COLORS["split"],
            "title": "Expense Split",
            "description": f"The expense has been split between {len(users)} users.",
            "fields": [
                field("Total Amount", format_currency(amount), inline=True),
                field("Split Amount", f"{format_currency(per_person_amount(amount, len(users)))} per person",
                      inline=True),
                field("Category", records[0].category, inline=True),
                field("Description", description),
                field("Timestamp", records[0].timestamp, inline=True),
                field("Split Between", ", ".join(users)),
            ],
        })

    async def set_budget(self, interaction: Interaction) -> Dict[str, Any]:
        username = interaction.username
        amount = interaction.get_amount("amount")
        category = interaction.get("category")
        if amount < 0:
            raise InvalidAmount("Budget cannot be negative.")

        budget = await self.budgets.get(username) or Budget(username=username, monthly_budget=Decimal(0))
        if category:
            budget.categories[category] = amount
            scope = f"{category} budget"
        else:
            budget.monthly_budget = amount
            scope = "monthly budget"
        await self.budgets.set(budget)

        return embed_message({
            "color": COLORS["budget"],
            "title": "Budget Updated",
            "description": f"Your {scope} is now {format_currency(amount)}.",
            "footer": FOOTER,
        })

    async def show_budget(self, interaction: Interaction) -> Dict[str, Any]:
        username = interaction.username
        budget, month_summary, alerts = await check_budget(self.expenses, self.budgets, username)
        if budget is None:
            return message("You have not set a budget yet. Use /setbudget to create one.")

        fields = [
            field("Monthly Budget", format_currency(budget.monthly_budget), inline=True),
            field("Spent This Month", format_currency(month_summary.total_amount), inline=True),
            field("Remaining", format_currency(budget.monthly_budget - month_summary.total_amount), inline=True),
        ]
        if budget.categories:
            lines = [
                f"{name}: {format_currency(month_summary.category_totals.get(name, Decimal(0)))}"
                f" / {format_currency(limit)}"
                for name, limit in budget.categories.items()
            ]
            fields.append(field("Category Budgets", "\n".join(lines)))
        fields.extend(field(alert.title, alert.message) for alert in alerts)

        return embed_message({
            "color": COLORS["budget"],
            "title": f"Budget: {Period.MONTH.label}",
            "description": f"Spending for {readable_date_range(Period.MONTH)} by {username}.",
            "fields": fields,
            "footer": FOOTER,
        })
