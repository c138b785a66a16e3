"""Authentication module"""

from .dependencies import AuthSession, get_current_session, require_permission

__all__ = ["AuthSession", "get_current_session", "require_permission"]
