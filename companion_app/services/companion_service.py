# companion_app/services/companion_service.py

from typing import List, Optional
from loguru import logger
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from companion_app.core.exceptions import BadRequest, Forbidden, NotFound
from companion_app.models.caller import Caller
from companion_app.models.category import Category
from companion_app.models.companion import Companion
from companion_app.models.message import Message
from companion_app.schemas.companion import CompanionPayload

class CompanionService:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def _ensure_category(self, category_id: str) -> None:
        if await self.db.get(Category, category_id) is None:
            raise BadRequest("Category not found")

    async def get(self, companion_id: str) -> Optional[Companion]:
        """Retrieves a companion by its ID."""
        return await self.db.get(Companion, companion_id)

    async def get_or_404(self, companion_id: str) -> Companion:
        companion = await self.get(companion_id)
        if companion is None:
            raise NotFound("Companion not found")
        return companion

    async def list(self, category_id: Optional[str] = None, name: Optional[str] = None) -> List[Companion]:
        """Lists companions, newest first, optionally filtered by category and name."""
        query = select(Companion)
        if category_id:
            query = query.where(Companion.category_id == category_id)
        if name:
            query = query.where(func.lower(Companion.name).contains(name.lower()))
        result = await self.db.execute(query.order_by(Companion.created_at.desc()))
        return list(result.scalars().all())

    async def create(self, payload: CompanionPayload, caller: Caller) -> Companion:
        """Creates a companion owned by the caller."""
        await self._ensure_category(payload.category_id)
        db_companion = Companion(
            user_id=caller.id,
            user_name=caller.first_name,
            src=payload.src,
            name=payload.name,
            description=payload.description,
            instructions=payload.instructions,
            seed=payload.seed,
            category_id=payload.category_id,
        )
        self.db.add(db_companion)
        await self.db.commit()
        await self.db.refresh(db_companion)
        logger.info(f"Created companion: {db_companion.name} with ID: {db_companion.id} for user '{caller.id}'.")
        return db_companion

    async def update(self, companion_id: str, payload: CompanionPayload, caller: Caller) -> Companion:
        """
        Overwrites every editable field of a companion.
        Only the owner may edit; ownership never moves, but the owner's
        display name is refreshed from the current identity.
        """
        db_companion = await self.get_or_404(companion_id)
        if db_companion.user_id != caller.id:
            logger.warning(f"User '{caller.id}' tried to edit companion {companion_id} owned by '{db_companion.user_id}'.")
            raise Forbidden()
        await self._ensure_category(payload.category_id)

        db_companion.user_name = caller.first_name
        db_companion.src = payload.src
        db_companion.name = payload.name
        db_companion.description = payload.description
        db_companion.instructions = payload.instructions
        db_companion.seed = payload.seed
        db_companion.category_id = payload.category_id

        await self.db.commit()
        await self.db.refresh(db_companion)
        logger.info(f"Updated companion with ID: {companion_id}.")
        return db_companion

    async def delete(self, companion_id: str, caller: Caller) -> None:
        db_companion = await self.get_or_404(companion_id)
        if db_companion.user_id != caller.id:
            logger.warning(f"User '{caller.id}' tried to delete companion {companion_id} owned by '{db_companion.user_id}'.")
            raise Forbidden()
        await self.db.delete(db_companion)
        await self.db.commit()
        logger.info(f"Deleted companion with ID: {companion_id}.")

    async def count_messages(self, companion_id: str) -> int:
        result = await self.db.execute(
            select(func.count(Message.id)).where(Message.companion_id == companion_id)
        )
        return result.scalar_one()
