# companion_app/services/chat_service.py

from typing import AsyncIterator, Dict, List, Optional
from loguru import logger
from langchain_core.messages import AIMessage, BaseMessage, HumanMessage, SystemMessage
from langchain_core.language_models import BaseChatModel
from sqlalchemy.ext.asyncio import async_sessionmaker

from companion_app.core.config import settings
from companion_app.core.llm_client import get_chat_llm
from companion_app.models.caller import Caller
from companion_app.models.companion import Companion
from companion_app.models.message import ROLE_SYSTEM, ROLE_USER
from companion_app.services.chat_memory import ChatMemoryService
from companion_app.services.message_service import MessageService

FALLBACK_REPLY = "I am sorry, but I encountered an error while processing your request."

class CompanionChatService:
    """
    Chats with a companion: the persona (instructions plus example
    conversation) goes into the system message, recent turns from chat
    memory follow, and the reply is streamed back chunk by chunk.
    Both sides of every turn are stored in the database and in chat memory.
    """

    def __init__(
        self,
        memory: ChatMemoryService,
        session_factory: async_sessionmaker,
        llm: Optional[BaseChatModel] = None,
    ):
        self.memory = memory
        self.session_factory = session_factory
        self.llm = llm if llm else get_chat_llm()

        self.system_prompt_template = (
            "ONLY generate plain sentences without prefix of who is speaking. "
            "DO NOT use {name}: prefix.\n\n"
            "You are {name}, {description}.\n\n"
            "{instructions}\n\n"
            "Below is an example conversation showing how {name} talks:\n\n"
            "{seed}"
        )

    def build_system_prompt(self, companion: Companion) -> str:
        return self.system_prompt_template.format(
            name=companion.name,
            description=companion.description,
            instructions=companion.instructions,
            seed=companion.seed,
        )

    def build_messages(self, companion: Companion, history: List[Dict[str, str]], prompt: str) -> List[BaseMessage]:
        messages: List[BaseMessage] = [SystemMessage(content=self.build_system_prompt(companion))]
        for turn in history:
            content = turn.get("content", "")
            if turn.get("role") == ROLE_USER:
                messages.append(HumanMessage(content=content))
            elif turn.get("role") == ROLE_SYSTEM:
                messages.append(AIMessage(content=content))
        messages.append(HumanMessage(content=prompt))
        return messages

    async def get_companion(self, companion_id: str) -> Optional[Companion]:
        async with self.session_factory() as db:
            return await db.get(Companion, companion_id)

    async def _store_message(self, companion_id: str, user_id: str, role: str, content: str) -> None:
        async with self.session_factory() as db:
            await MessageService(db).add(companion_id, user_id, role, content)
        await self.memory.add_message(companion_id, user_id, role, content)

    async def start_turn(self, companion: Companion, caller: Caller, prompt: str) -> List[BaseMessage]:
        """Stores the user's message and returns the messages to send to the model."""
        history = await self.memory.get_recent(companion.id, caller.id, limit=settings.CHAT_HISTORY_LIMIT)
        await self._store_message(companion.id, caller.id, ROLE_USER, prompt)
        logger.info(f"Stored user message for companion {companion.id} from user '{caller.id}' ({len(history)} turns of history).")
        return self.build_messages(companion, history, prompt)

    async def stream_reply(self, companion: Companion, caller: Caller, messages: List[BaseMessage]) -> AsyncIterator[str]:
        """Streams the model's reply, then stores it once complete."""
        chunks: List[str] = []
        try:
            async for chunk in self.llm.astream(messages):
                text = chunk.content if isinstance(chunk.content, str) else ""
                if text:
                    chunks.append(text)
                    yield text
        except Exception as e:
            logger.error(f"Error generating reply for companion {companion.id}: {e}")
            if not chunks:
                # shown to the caller, never stored
                yield FALLBACK_REPLY
                return

        reply = "".join(chunks).strip()
        if not reply:
            logger.warning(f"Empty reply from model for companion {companion.id}; nothing stored.")
            return
        try:
            await self._store_message(companion.id, caller.id, ROLE_SYSTEM, reply)
            logger.info(f"Stored reply of {len(reply)} characters for companion {companion.id}.")
        except Exception as e:
            logger.error(f"Failed to store reply for companion {companion.id}: {e}")
