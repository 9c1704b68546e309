"""Offset pagination for list endpoints"""
import math
from typing import Any, Dict, Optional

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql import Select

from app.core.config import settings


def page_window(page: int, page_size: Optional[int]) -> tuple:
    """(page, page_size) normalised: page >= 1, size clamped to MAX_PAGE_SIZE"""
    return max(1, page), settings.clamp_page_size(page_size or settings.DEFAULT_PAGE_SIZE)


async def paginate(
    db: AsyncSession,
    query: Select,
    page: int = 1,
    page_size: Optional[int] = None,
) -> Dict[str, Any]:
    """
    Run `query` (already filtered and ordered) for one page.

    Returns items plus total, page, page_size, total_pages, has_next and
    has_previous. An empty result still reports one page.
    """
    page, page_size = page_window(page, page_size)

    total = await db.scalar(
        select(func.count()).select_from(query.order_by(None).subquery())
    ) or 0
    pages = max(1, math.ceil(total / page_size))

    rows = await db.scalars(query.limit(page_size).offset((page - 1) * page_size))

    return {
        "items": list(rows),
        "total": total,
        "page": page,
        "page_size": page_size,
        "total_pages": pages,
        "has_next": page < pages,
        "has_previous": page > 1,
    }
