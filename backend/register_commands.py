"""
Register the bot's slash commands with the chat platform.
"""
import sys
import os

# Add the backend directory to Python path
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

import httpx
from expensebot.core.config import settings
from expensebot.services.command_service import command_definitions


def register():
    """Overwrite the global application commands with the current definitions."""
    if not settings.DISCORD_APPLICATION_ID or not settings.DISCORD_BOT_TOKEN:
        raise ValueError("DISCORD_APPLICATION_ID and DISCORD_BOT_TOKEN are required")

    url = f"{settings.DISCORD_API_URL}/applications/{settings.DISCORD_APPLICATION_ID}/commands"
    commands = command_definitions()
    print("Started refreshing application (/) commands.")
    try:
        response = httpx.put(
            url,
            json=commands,
            headers={"Authorization": f"Bot {settings.DISCORD_BOT_TOKEN}"},
            timeout=10.0
        )
        response.raise_for_status()
    except httpx.HTTPStatusError as e:
        print(f"Registration failed: {e.response.status_code} - {e.response.text}")
        raise
    print(f"Successfully reloaded {len(commands)} application (/) commands.")


if __name__ == "__main__":
    register()
