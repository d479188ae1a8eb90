"""
Pagination Utility Module

Provides standardized pagination and ordering helpers for all listing endpoints.
"""
import enum
import math
from typing import Any, Dict, List, Optional, Tuple, Type

from fastapi import Query
from sqlalchemy import case, select, func
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql import Select

DEFAULT_LIMIT = 10
MAX_LIMIT = 100


class PaginationParams:
    """Standard page/limit query parameters, usable as a dependency"""

    def __init__(
        self,
        page: int = Query(1, ge=1, description="Page number (1-indexed)"),
        limit: int = Query(DEFAULT_LIMIT, ge=1, le=MAX_LIMIT, description="Items per page"),
    ):
        self.page = page
        self.limit = limit

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit


def enum_order(column, enum_cls: Type[enum.Enum]):
    """
    Sort key ranking ``column`` by the declaration order of ``enum_cls``
    (low < medium < high < urgent) instead of by the stored string.
    """
    return case(
        *[(column == member, rank) for rank, member in enumerate(enum_cls)],
        else_=len(enum_cls)
    )


def build_pagination(total: int, page: int, limit: int) -> Dict[str, Any]:
    """
    Pagination metadata for a listing.

    total_pages is ceil(total / limit), so an empty listing has zero pages.
    """
    total_pages = math.ceil(total / limit) if limit else 0
    return {
        "current_page": page,
        "total_pages": total_pages,
        "total": total,
        "limit": limit,
        "has_next": page < total_pages,
        "has_prev": page > 1,
    }


async def paginate(
    db: AsyncSession,
    query: Select,
    params: PaginationParams,
    count_query: Optional[Select] = None
) -> Tuple[List[Any], Dict[str, Any]]:
    """
    Apply pagination to a SQLAlchemy query.

    Args:
        db: Database session
        query: Filtered and ordered query
        params: Page and limit
        count_query: Optional custom count query (defaults to counting the
            rows of ``query``)

    Returns:
        Tuple of (items for the requested page, pagination metadata)
    """
    if count_query is None:
        count_query = select(func.count()).select_from(query.order_by(None).subquery())
    total = await db.scalar(count_query) or 0

    result = await db.execute(query.offset(params.offset).limit(params.limit))
    items = list(result.scalars().all())

    return items, build_pagination(total, params.page, params.limit)
