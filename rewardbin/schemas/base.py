"""
Shared schema building blocks
Wire format is camelCase, Python attributes stay snake_case
"""

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel
from typing import Generic, List, Optional, TypeVar

T = TypeVar('T')


def reject_null(value):
    """Partial updates may omit a required column but never null it"""
    if value is None:
        raise ValueError("Field cannot be null")
    return value


class BaseSchema(BaseModel):
    """Base schema with camelCase aliases and ORM attribute loading"""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class PaginationMeta(BaseSchema):
    """Page description returned with every list"""
    total: int = Field(..., description="Total matching records")
    current_page: int
    per_page: int
    last_page: int
    prev: Optional[int] = None
    next: Optional[int] = None


class Page(BaseSchema, Generic[T]):
    """Generic paginated response"""
    data: List[T]
    meta: PaginationMeta


class MessageResponse(BaseSchema):
    """Plain acknowledgement"""
    message: str
