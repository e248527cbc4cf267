"""
Create every table the app uses (idempotent). Run once against a fresh database:

  python -m app.db.init_db
"""
import asyncio

from sqlalchemy.ext.asyncio import AsyncEngine

import app.auth.models  # noqa: F401  (registers users on Base.metadata)
import app.core.models  # noqa: F401
from app.db.session import Base, engine


async def create_tables(bind: AsyncEngine) -> None:
    async with bind.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def main() -> None:
    await create_tables(engine)
    await engine.dispose()
    print("Tables created.")


if __name__ == "__main__":
    asyncio.run(main())
