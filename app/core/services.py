from typing import Any, List, Tuple

from sqlalchemy import Select, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.schemas import Pagination


async def paginate(db: AsyncSession, stmt: Select, page: int, limit: int) -> Tuple[List[Any], Pagination]:
    """Run a filtered+sorted select for one page and count the full result set."""
    count_stmt = select(func.count()).select_from(stmt.order_by(None).subquery())
    total_result = await db.execute(count_stmt)
    total = total_result.scalar() or 0

    offset = (page - 1) * limit
    result = await db.execute(stmt.offset(offset).limit(limit))
    rows = list(result.scalars().all())

    pages = (total + limit - 1) // limit if limit else 0
    return rows, Pagination(page=page, pages=pages, total=total)
