"""
Pagination Utilities

Offset pagination for list endpoints: ``page`` is 1-based and responses
carry a ``meta`` block with the total row count.
"""

import logging
import math
from dataclasses import dataclass
from typing import Any

from fastapi import Query
from sqlalchemy import func
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 10
MAX_PAGE_SIZE = 100


@dataclass(frozen=True)
class PageParams:
    page: int = 1
    limit: int = DEFAULT_PAGE_SIZE
    search: str | None = None

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit


def page_params(
    page: int = Query(1, ge=1, description="1-based page number"),
    limit: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE, description="Items per page"),
    search: str | None = Query(None, max_length=255, description="Substring filter"),
) -> PageParams:
    """FastAPI dependency collecting pagination query parameters."""
    return PageParams(page=page, limit=limit, search=search or None)


async def paginate(db: AsyncSession, statement, params: PageParams) -> tuple[list[Any], int]:
    """
    Run ``statement`` for one page and count all matching rows.

    Returns:
        (items, total)
    """
    count_statement = select(func.count()).select_from(statement.order_by(None).subquery())
    total = (await db.execute(count_statement)).scalar_one()

    result = await db.execute(statement.offset(params.offset).limit(params.limit))
    return list(result.scalars().unique().all()), total


def page_meta(total: int, params: PageParams) -> dict[str, int]:
    return {
        "total": total,
        "page": params.page,
        "limit": params.limit,
        "total_pages": math.ceil(total / params.limit) if params.limit else 0,
    }
