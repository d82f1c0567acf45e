"""
Create every table of the schema (idempotent).

  python -m scolarix.db.init_db
"""
import asyncio

from sqlalchemy.ext.asyncio import AsyncEngine

import scolarix.core.models  # noqa: F401  registers every table on Base.metadata
from scolarix.core.config import settings
from scolarix.core.logging import setup_logging
from scolarix.db.session import Base, engine


async def create_schema(bind: AsyncEngine) -> None:
    async with bind.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def main() -> None:
    logger = setup_logging(settings.log_level)
    try:
        await create_schema(engine)
        logger.info("schema ready: %s", ", ".join(sorted(Base.metadata.tables)))
    finally:
        await engine.dispose()


if __name__ == "__main__":
    asyncio.run(main())
