"""Schemas package initialization"""

from .base import BaseSchema, PaginationMeta, Page, MessageResponse

__all__ = [
    "BaseSchema",
    "PaginationMeta",
    "Page",
    "MessageResponse",
]
