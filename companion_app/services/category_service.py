# companion_app/services/category_service.py

from typing import Iterable, List, Optional
from loguru import logger
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from companion_app.models.category import Category

class CategoryService:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def list(self) -> List[Category]:
        result = await self.db.execute(select(Category).order_by(Category.name))
        return list(result.scalars().all())

    async def get(self, category_id: str) -> Optional[Category]:
        return await self.db.get(Category, category_id)

    async def ensure(self, names: Iterable[str]) -> List[Category]:
        """
        Inserts the categories that don't exist yet and returns only the new rows.
        Running it again with the same names inserts nothing.
        """
        wanted = list(dict.fromkeys(name.strip() for name in names if name and name.strip()))
        if not wanted:
            return []

        result = await self.db.execute(select(Category.name).where(Category.name.in_(wanted)))
        existing = set(result.scalars().all())

        created = [Category(name=name) for name in wanted if name not in existing]
        if created:
            self.db.add_all(created)
            await self.db.commit()
            logger.info(f"Inserted {len(created)} categories: {[c.name for c in created]}")
        else:
            logger.info("All categories already present, nothing to insert.")
        return created
