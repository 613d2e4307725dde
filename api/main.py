"""
FastAPI Application — HTTP host for the multi-turn prompts bot.

Provides:
- POST /api/messages  run one inbound activity as a turn, return the replies
- GET  /health        liveness and configuration summary
"""
from __future__ import annotations

import structlog

# Load .env before any config is read
from dotenv import load_dotenv
load_dotenv()

from fastapi import FastAPI, HTTPException

from config.settings import get_settings
from channels.adapter import BotAdapter
from context.state import ConversationState, UserState
from core.main_dialog import MainDialog
from database.store_factory import create_store
from models.schemas import Activity

logger = structlog.get_logger()

# ──────────────────────────────────────────────────────────────
#  Bootstrap
# ──────────────────────────────────────────────────────────────

settings = get_settings()

state_store = create_store({
    "store_backend": settings.storage.store_backend,
    "store_file_dir": settings.storage.store_file_dir,
})
conversation_state = ConversationState(state_store)
user_state = UserState(state_store)

bot = MainDialog(conversation_state, user_state, bot_name=settings.bot.name)
adapter = BotAdapter()

app = FastAPI(
    title=settings.app_name,
    description="Turn-based bot that collects a name and optional age",
    debug=settings.debug,
)


# ══════════════════════════════════════════════════════════════
#  HEALTH
# ══════════════════════════════════════════════════════════════

@app.get("/health")
async def health():
    return {
        "status": "ok",
        "app": settings.app_name,
        "store_backend": settings.storage.store_backend,
        "turns_processed": adapter.turn_count,
    }


# ══════════════════════════════════════════════════════════════
#  MESSAGES
# ══════════════════════════════════════════════════════════════

@app.post("/api/messages")
async def receive_activity(activity: Activity):
    if activity.conversation is None:
        raise HTTPException(status_code=400, detail="activity.conversation is required")
    if activity.is_message and (activity.from_ is None or not activity.from_.id):
        raise HTTPException(status_code=400, detail="activity.from.id is required")

    replies = await adapter.process_activity(activity, bot.on_turn)
    logger.info("activity_processed",
                conversation_id=activity.conversation.id,
                activity_type=activity.type,
                replies=len(replies))
    return {"activities": [r.to_wire() for r in replies]}


# ══════════════════════════════════════════════════════════════
#  Entry Point
# ══════════════════════════════════════════════════════════════

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host=settings.server.host, port=settings.server.port)
