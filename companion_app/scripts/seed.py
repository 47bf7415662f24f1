# companion_app/scripts/seed.py
"""
Inserts the default companion categories.

    companion-seed            # or: python -m companion_app.scripts.seed

Safe to run more than once: names that already exist are skipped.
"""
import asyncio
import sys
from typing import Iterable, List

from loguru import logger
from sqlalchemy.ext.asyncio import async_sessionmaker

from companion_app.core import database
from companion_app.core.config import settings
from companion_app.models.category import Category
from companion_app.services.category_service import CategoryService


async def seed_categories(session_factory: async_sessionmaker, names: Iterable[str]) -> List[Category]:
    async with session_factory() as db:
        return await CategoryService(db).ensure(names)


async def main() -> int:
    try:
        await database.init_db(max_retries=3, retry_delay=2)
        created = await seed_categories(database.get_session_factory(), settings.DEFAULT_CATEGORIES)
        logger.info(f"Seeding finished, {len(created)} new categories.")
        return 0
    except Exception as e:
        logger.error(f"Error seeding default categories: {e}")
        return 1
    finally:
        await database.dispose_db()


def run():
    sys.exit(asyncio.run(main()))


if __name__ == "__main__":
    run()
