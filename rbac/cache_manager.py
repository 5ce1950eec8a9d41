"""
Request-scoped cache for merged principal permissions.

A cache lives for one request: the framework creates it when the request
starts and drops it afterwards. Entries are keyed by principal and locale
because manager roles differ per language.
"""

import threading
from typing import Dict, List, Optional, Tuple, Union

from loguru import logger

from rbac.config import get_settings
from rbac.models import Client, Manager
from rbac.permissions import MergedPermissions, merge_role_permissions
from rbac.registry import RoleRegistry

CacheKey = Tuple[str, str, Optional[str]]


def _copy_permissions(permissions: MergedPermissions) -> MergedPermissions:
    return {collection: list(operations) for collection, operations in permissions.items()}


def resolve_role_slugs(
    principal: Union[Manager, Client],
    locale: Optional[str] = None,
    default_locale: Optional[str] = None,
) -> List[str]:
    """
    Role slugs that apply to a principal.

    Managers: the roles assigned to `locale` (or the default locale).
    Clients: every role, locale is ignored.
    """
    if isinstance(principal, Client):
        return list(principal.roles)

    locale = locale or default_locale or get_settings().default_locale
    return principal.roles_for_locale(locale)


def compute_permissions(
    principal: Union[Manager, Client],
    locale: Optional[str] = None,
    registry: Optional[RoleRegistry] = None,
) -> MergedPermissions:
    """Merge the permissions of a principal's roles for a locale"""
    slugs = resolve_role_slugs(principal, locale)
    return merge_role_permissions(slugs, principal.collection, registry)


class PermissionCache:
    """In-memory permission cache for a single request"""

    def __init__(self):
        self.permissions_cache: Dict[CacheKey, MergedPermissions] = {}  # (collection, id, locale) -> permissions
        self.lock = threading.Lock()

    def __len__(self) -> int:
        return len(self.permissions_cache)

    def _key(self, principal: Union[Manager, Client], locale: Optional[str]) -> Optional[CacheKey]:
        if principal.id is None:
            return None
        if isinstance(principal, Client):
            # Client roles are global
            return (principal.collection, str(principal.id), None)
        return (principal.collection, str(principal.id), locale or get_settings().default_locale)

    def get_cached(self, principal: Union[Manager, Client], locale: Optional[str] = None) -> Optional[MergedPermissions]:
        """Get cached permissions, None when not computed yet"""
        key = self._key(principal, locale)
        if key is None:
            return None
        with self.lock:
            permissions = self.permissions_cache.get(key)
        return None if permissions is None else _copy_permissions(permissions)

    def get_or_compute(
        self,
        principal: Union[Manager, Client],
        locale: Optional[str] = None,
        registry: Optional[RoleRegistry] = None,
    ) -> MergedPermissions:
        """Get cached permissions, merging the principal's roles on a miss"""
        key = self._key(principal, locale)
        if key is None:
            return compute_permissions(principal, locale, registry)

        with self.lock:
            if key not in self.permissions_cache:
                self.permissions_cache[key] = compute_permissions(principal, locale, registry)
                logger.debug(f"[CACHE] Cached permissions for {key[0]}:{key[1]} (locale: {key[2]})")
            # Callers get their own copy; the cached entry stays intact
            return _copy_permissions(self.permissions_cache[key])

    def invalidate_principal(self, principal: Union[Manager, Client]) -> None:
        """Drop every cached locale of a principal (e.g. after a role change)"""
        if principal.id is None:
            return
        with self.lock:
            stale = [
                key for key in self.permissions_cache
                if key[0] == principal.collection and key[1] == str(principal.id)
            ]
            for key in stale:
                del self.permissions_cache[key]

    def clear(self) -> None:
        with self.lock:
            self.permissions_cache.clear()


# ==================== RECORD READ HOOK ====================

def populate_permissions(
    principal: Union[Manager, Client],
    locale: Optional[str] = None,
    cache: Optional[PermissionCache] = None,
    registry: Optional[RoleRegistry] = None,
) -> Union[Manager, Client]:
    """
    Fill in the virtual `permissions` field of a principal that was just read.

    Returns a copy; the given principal is left untouched. A principal that
    already carries permissions is returned as-is.
    """
    if principal.permissions is not None:
        return principal

    if cache is not None:
        permissions = cache.get_or_compute(principal, locale, registry)
    else:
        permissions = compute_permissions(principal, locale, registry)

    return principal.model_copy(update={"permissions": permissions})
