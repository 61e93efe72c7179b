"""
Chat platform interactions endpoint.
"""
from fastapi import APIRouter, Body, Depends
from typing import Any, Dict

from expensebot.api.dependencies import get_command_service
from expensebot.core.security import verify_interaction
from expensebot.services.command_service import CommandService

router = APIRouter(prefix="/interactions", tags=["interactions"])


@router.post("", dependencies=[Depends(verify_interaction)])
async def handle_interaction(
    payload: Dict[str, Any] = Body(...),
    commands: CommandService = Depends(get_command_service)
):
    """Answer a slash command (or PING) posted by the chat platform, once its signature checks out."""
    return await commands.handle(payload)
