"""
Access control factories for collection and field configs.
Wraps the access manager into predicates keyed by operation.
"""

from dataclasses import dataclass
from typing import Any, Callable, Dict, Mapping, Optional, Union

from rbac.access_manager import AccessManager, UserLike, access_manager
from rbac.cache_manager import PermissionCache
from rbac.models import FieldContext

AccessPredicate = Callable[..., bool]


@dataclass
class AccessRequest:
    """Request context handed to access predicates"""
    user: UserLike = None
    locale: Optional[str] = None
    permission_cache: Optional[PermissionCache] = None


def role_based_access(
    collection: str,
    options: Optional[Mapping[str, Any]] = None,
    manager: Optional[AccessManager] = None,
) -> Dict[str, AccessPredicate]:
    """
    Role-based access control for a collection or global.

    Args:
        collection: Collection (or global) slug whose permissions apply
        options: `implicit_read` flag plus predicate overrides, e.g.
            {"delete": lambda req, id=None: False}
        manager: Access manager (defaults to the global one)

    Returns:
        Dict with read/create/update/delete predicates taking (req, id=None)
    """
    options = dict(options or {})
    manager = manager or access_manager

    implicit_read = options.pop("implicit_read", options.pop("implicitRead", True))
    overrides = {name: predicate for name, predicate in options.items() if callable(predicate)}

    def read(req: AccessRequest, id: Optional[Union[str, int]] = None) -> bool:
        has_access = manager.has_permission(
            req.user, collection, "read", locale=req.locale, cache=req.permission_cache
        )
        if not implicit_read or not has_access:
            return has_access
        return manager.create_locale_filter(req.user, collection, locale=req.locale, cache=req.permission_cache)

    def create(req: AccessRequest, id: Optional[Union[str, int]] = None) -> bool:
        return manager.has_permission(
            req.user, collection, "create", locale=req.locale, cache=req.permission_cache
        )

    def update(req: AccessRequest, id: Optional[Union[str, int]] = None) -> bool:
        # Collection-level or document-level grant
        doc_id = str(id) if id is not None else None
        has_access = manager.has_permission(
            req.user, collection, "update", locale=req.locale, doc_id=doc_id, cache=req.permission_cache
        )
        if not has_access:
            return False
        return manager.create_locale_filter(req.user, collection, locale=req.locale, cache=req.permission_cache)

    def delete(req: AccessRequest, id: Optional[Union[str, int]] = None) -> bool:
        return manager.has_permission(
            req.user, collection, "delete", locale=req.locale, cache=req.permission_cache
        )

    access = {"read": read, "create": create, "update": update, "delete": delete}
    access.update(overrides)
    return access


def create_field_access(
    collection: str,
    localized: bool,
    manager: Optional[AccessManager] = None,
) -> Dict[str, AccessPredicate]:
    """Field-level access; translators may only update localized fields"""
    manager = manager or access_manager
    field = FieldContext(localized=localized)

    def read(req: AccessRequest) -> bool:
        return manager.has_permission(
            req.user, collection, "read", field=field, locale=req.locale, cache=req.permission_cache
        )

    def create(req: AccessRequest) -> bool:
        return manager.has_permission(
            req.user, collection, "create", field=field, locale=req.locale, cache=req.permission_cache
        )

    def update(req: AccessRequest) -> bool:
        return manager.has_permission(
            req.user, collection, "update", field=field, locale=req.locale, cache=req.permission_cache
        )

    return {"read": read, "create": create, "update": update}
