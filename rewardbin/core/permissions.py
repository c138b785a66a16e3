"""
Role based access control table
Maps each role to the actions it may perform on each resource
"""

from typing import Dict, FrozenSet, Iterable, Mapping, Optional

CRUD = ("create", "update", "delete", "list", "detail")
READ = ("list", "detail")

# Every resource and the actions that exist for it
STATEMENT: Dict[str, tuple] = {
    "user": ("create", "list", "detail", "update", "set-role", "ban", "delete"),
    "session": ("list", "revoke", "delete"),
    "organization": CRUD,
    "member": ("create", "update", "delete", "list"),
    "store": CRUD,
    "rewardRule": CRUD,
    "material": CRUD,
    "bin": CRUD,
    "coupon": CRUD,
    "favouriteCoupon": ("create", "delete", "list", "detail"),
    "recycleHistory": ("create", "list", "detail"),
    "redeemHistory": ("create", "list", "detail"),
    "userRecycleHistory": ("list",),
    "analytics": ("view",),
}

# Actions every signed-in role gets on its own records
_OWN_RECORDS = {
    "favouriteCoupon": ("create", "delete", "list", "detail"),
    "recycleHistory": ("create", "list", "detail"),
    "redeemHistory": ("create", "list", "detail"),
}

_CATALOG_READ = {
    "organization": READ,
    "store": READ,
    "rewardRule": READ,
    "material": READ,
    "bin": READ,
    "coupon": READ,
}

DEFAULT_ROLES: Dict[str, Dict[str, Iterable[str]]] = {
    "admin": dict(STATEMENT),
    "business_user": {
        **_CATALOG_READ,
        **_OWN_RECORDS,
        "store": CRUD,
        "rewardRule": ("create", "update", "list", "detail"),
        "material": CRUD,
        "bin": CRUD,
        "coupon": CRUD,
        "member": ("list",),
        "userRecycleHistory": ("list",),
    },
    "store_manager": {
        **_CATALOG_READ,
        **_OWN_RECORDS,
        "store": ("update", "list", "detail"),
        "bin": CRUD,
        "userRecycleHistory": ("list",),
    },
    "user": {
        **_CATALOG_READ,
        **_OWN_RECORDS,
    },
}


class AccessControl:
    """Static role -> resource -> actions table, evaluated per request"""

    def __init__(self, roles: Mapping[str, Mapping[str, Iterable[str]]]):
        self._roles: Dict[str, Dict[str, FrozenSet[str]]] = {}
        for role, grants in roles.items():
            for resource, actions in grants.items():
                unknown = set(actions) - set(STATEMENT.get(resource, ()))
                if unknown:
                    raise ValueError(f"Role '{role}' grants unknown actions on '{resource}': {sorted(unknown)}")
            self._roles[role] = {resource: frozenset(actions) for resource, actions in grants.items()}

    @classmethod
    def default(cls) -> "AccessControl":
        return cls(DEFAULT_ROLES)

    @property
    def roles(self) -> FrozenSet[str]:
        return frozenset(self._roles)

    def has_permission(self, role: Optional[str], permission: Mapping[str, Iterable[str]]) -> bool:
        """
        True when the role may perform every requested action

        Args:
            role: Caller role
            permission: Mapping of resource name to requested actions

        Returns:
            Whether all requested actions are granted
        """
        if not role or role not in self._roles:
            return False

        grants = self._roles[role]
        for resource, actions in permission.items():
            allowed = grants.get(resource, frozenset())
            if not set(actions) <= allowed:
                return False
        return True
