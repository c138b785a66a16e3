"""
Pagination utilities
"""

from pydantic import BaseModel, Field
from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql import Select


class PaginationParams(BaseModel):
    """Pagination parameters"""
    page: int = Field(1, ge=1, description="Page number")
    per_page: int = Field(20, ge=1, le=50, description="Page size")

    @property
    def offset(self) -> int:
        """Calculate offset"""
        return (self.page - 1) * self.per_page


def build_meta(total: int, page: int, per_page: int) -> dict:
    """Describe one page of a result set"""
    last_page = max((total + per_page - 1) // per_page, 1)
    return {
        "total": total,
        "current_page": page,
        "per_page": per_page,
        "last_page": last_page,
        "prev": page - 1 if page > 1 else None,
        "next": page + 1 if page < last_page else None,
    }


async def paginate(
    db: AsyncSession,
    query: Select,
    params: PaginationParams,
) -> dict:
    """
    Paginate query results

    Args:
        db: Database session
        query: SQLAlchemy query, already filtered and ordered
        params: Page number and size

    Returns:
        Dictionary with data and meta keys
    """
    # Get total count
    count_query = select(func.count()).select_from(query.order_by(None).subquery())
    total = await db.scalar(count_query) or 0

    # Apply pagination
    query = query.offset(params.offset).limit(params.per_page)

    # Execute query
    result = await db.execute(query)
    items = list(result.scalars().all())

    return {
        "data": items,
        "meta": build_meta(total, params.page, params.per_page),
    }
