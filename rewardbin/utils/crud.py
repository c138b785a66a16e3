"""
Shared CRUD helpers for resource routers
"""

from typing import Any, Dict, Sequence, Type, TypeVar
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func
import uuid

from rewardbin.core.exceptions import ConflictException, NotFoundException

ModelT = TypeVar("ModelT")


async def get_or_404(
    db: AsyncSession,
    model: Type[ModelT],
    obj_id: uuid.UUID,
    options: Sequence[Any] = (),
    name: str = None,
    populate_existing: bool = False,
) -> ModelT:
    """Fetch a row by primary key with optional loader options"""
    stmt = select(model).where(model.id == obj_id)
    if options:
        stmt = stmt.options(*options)
    if populate_existing:
        stmt = stmt.execution_options(populate_existing=True)
    result = await db.execute(stmt)
    instance = result.scalar_one_or_none()

    if instance is None:
        raise NotFoundException(f"{name or model.__name__} not found")
    return instance


async def ensure_exists(db: AsyncSession, model: Type[ModelT], obj_id: uuid.UUID, name: str = None) -> None:
    """Raise 404 for a dangling foreign key in a request body"""
    found = await db.scalar(select(func.count()).select_from(model).where(model.id == obj_id))
    if not found:
        raise NotFoundException(f"{name or model.__name__} not found")


def apply_updates(instance: Any, data: Dict[str, Any]) -> Any:
    """Copy the fields present in a partial update onto a model"""
    for field, value in data.items():
        setattr(instance, field, value)
    return instance


async def ensure_no_dependents(
    db: AsyncSession,
    checks: Sequence[tuple],
    resource: str,
) -> None:
    """
    Refuse a delete that would orphan rows

    Args:
        checks: (foreign key column, value, dependent label) tuples
        resource: Name of the resource being deleted
    """
    for column, value, label in checks:
        count = await db.scalar(select(func.count()).where(column == value))
        if count:
            raise ConflictException(
                f"Cannot delete {resource}: {count} {label} still reference it",
                error_code="HAS_DEPENDENTS",
            )
