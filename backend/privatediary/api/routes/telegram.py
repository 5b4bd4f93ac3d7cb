import logging

from fastapi import APIRouter, Depends, Request

from privatediary.auth.dependencies import get_node
from privatediary.node import DiaryNode

logger = logging.getLogger(__name__)

router = APIRouter(tags=["telegram"])


@router.post("/telegram-webhook")
async def telegram_webhook(request: Request, node: DiaryNode = Depends(get_node)):
    """Telegram bot webhook; only slash commands get a reply"""
    try:
        update = await request.json()
    except ValueError:
        logger.warning("Ignoring Telegram update with an invalid JSON body")
        return {"ok": True}

    await node.chat_commands.handle_update(update)
    return {"ok": True}
