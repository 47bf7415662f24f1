# companion_app/api/endpoints/chat.py

from typing import List
from fastapi import APIRouter, Depends, Request
from fastapi.responses import StreamingResponse
from langchain_core.language_models import BaseChatModel
from loguru import logger
from pydantic import ValidationError
import redis.asyncio as redis
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from companion_app.api.endpoints.body import read_json_body
from companion_app.core.database import get_db, get_session_factory
from companion_app.core.exceptions import BadRequest, InternalError, NotFound
from companion_app.core.llm_client import get_chat_llm
from companion_app.core.redis_client import get_redis_client
from companion_app.core.security import get_current_caller
from companion_app.models.caller import Caller
from companion_app.schemas.chat import ChatRequest, MessageRead
from companion_app.services.chat_memory import ChatMemoryService
from companion_app.services.chat_service import CompanionChatService
from companion_app.services.companion_service import CompanionService
from companion_app.services.message_service import MessageService

router = APIRouter()

# --- Dependencies for injecting services into endpoints ---

async def get_chat_memory() -> ChatMemoryService:
    try:
        redis_client: redis.Redis = await get_redis_client()
    except ConnectionError:
        raise InternalError("Chat memory is unavailable")
    return ChatMemoryService(redis_client=redis_client)


async def get_llm() -> BaseChatModel:
    try:
        return get_chat_llm()
    except ValueError:
        raise InternalError("Chat model is unavailable")


async def get_chat_service(
    memory: ChatMemoryService = Depends(get_chat_memory),
    session_factory: async_sessionmaker = Depends(get_session_factory),
    llm: BaseChatModel = Depends(get_llm),
) -> CompanionChatService:
    return CompanionChatService(memory=memory, session_factory=session_factory, llm=llm)


# --- API Endpoint Definitions ---

@router.post("/{companion_id}", response_class=StreamingResponse)
async def chat_with_companion(
    companion_id: str,
    request: Request,
    caller: Caller = Depends(get_current_caller),
    chat_service: CompanionChatService = Depends(get_chat_service),
):
    """
    Sends the caller's prompt to the companion and streams the reply back as
    plain text.
    """
    body = await read_json_body(request)
    # null reads as not filled in
    if body.get("prompt") is None:
        body.pop("prompt", None)
    try:
        chat_request = ChatRequest.model_validate(body)
    except ValidationError:
        raise BadRequest("Prompt must be text")
    if not chat_request.prompt.strip():
        raise BadRequest("Prompt is required")

    try:
        companion = await chat_service.get_companion(companion_id)
    except Exception as e:
        logger.error(f"[CHAT_POST] Failed to load companion {companion_id}: {e}")
        raise InternalError()
    if companion is None:
        raise NotFound("Companion not found")

    logger.info(f"Received chat message from user '{caller.id}' for companion {companion_id}")
    try:
        messages = await chat_service.start_turn(companion, caller, chat_request.prompt)
    except Exception as e:
        logger.error(f"[CHAT_POST] Failed to store message for companion {companion_id}: {e}")
        raise InternalError()

    return StreamingResponse(
        chat_service.stream_reply(companion, caller, messages),
        media_type="text/plain; charset=utf-8",
    )


@router.get("/{companion_id}", response_model=List[MessageRead])
async def get_chat_history(
    companion_id: str,
    caller: Caller = Depends(get_current_caller),
    db: AsyncSession = Depends(get_db),
):
    """The caller's stored conversation with a companion, oldest first."""
    await CompanionService(db).get_or_404(companion_id)
    messages = await MessageService(db).list_for(companion_id, caller.id)
    return [MessageRead.model_validate(m) for m in messages]
