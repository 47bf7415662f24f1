from typing import Dict, List, Optional
import redis.asyncio as redis
import json
from loguru import logger
from datetime import datetime, timezone

from companion_app.core.config import settings

class ChatMemoryService:
    """
    Recent chat turns per companion/user pair, kept as a bounded Redis list.
    LPUSH puts the newest turn at the head; reads reverse it back to
    chronological order.
    """
    REDIS_CHAT_MEMORY_KEY_PREFIX = "companion_chat:"

    def __init__(self, redis_client: redis.Redis, max_length: Optional[int] = None):
        self.redis_client = redis_client
        self.max_length = max_length or settings.CHAT_MEMORY_MAX_LENGTH

    def key_for(self, companion_id: str, user_id: str) -> str:
        return f"{self.REDIS_CHAT_MEMORY_KEY_PREFIX}{companion_id}:{user_id}"

    async def add_message(self, companion_id: str, user_id: str, role: str, content: str):
        """Adds one turn and trims the list to max_length."""
        key = self.key_for(companion_id, user_id)
        message_data = {
            "role": role,
            "content": content,
            "timestamp": datetime.now(timezone.utc).isoformat()
        }
        await self.redis_client.lpush(key, json.dumps(message_data))
        await self.redis_client.ltrim(key, 0, self.max_length - 1)
        logger.debug(f"Added {role} message to chat memory '{key}'")

    async def get_recent(self, companion_id: str, user_id: str, limit: Optional[int] = None) -> List[Dict[str, str]]:
        """Returns up to `limit` most recent turns, oldest first."""
        key = self.key_for(companion_id, user_id)
        raw_messages = await self.redis_client.lrange(key, 0, (limit - 1) if limit else -1)

        history = []
        for raw in reversed(raw_messages or []):
            try:
                history.append(json.loads(raw))
            except json.JSONDecodeError as e:
                logger.error(f"Failed to decode chat memory entry in '{key}': {raw!r}. Error: {e}")

        logger.debug(f"Retrieved {len(history)} messages from chat memory '{key}'")
        return history

