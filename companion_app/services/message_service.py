# companion_app/services/message_service.py

from typing import List
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from companion_app.models.message import Message

class MessageService:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def add(self, companion_id: str, user_id: str, role: str, content: str) -> Message:
        db_message = Message(companion_id=companion_id, user_id=user_id, role=role, content=content)
        self.db.add(db_message)
        await self.db.commit()
        return db_message

    async def list_for(self, companion_id: str, user_id: str) -> List[Message]:
        """A user's conversation with a companion, oldest first."""
        result = await self.db.execute(
            select(Message)
            .where(Message.companion_id == companion_id, Message.user_id == user_id)
            .order_by(Message.created_at)
        )
        return list(result.scalars().all())
