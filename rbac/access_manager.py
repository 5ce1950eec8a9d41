"""
Access decision engine for CMS collections.

Every check returns a boolean; missing or malformed data is a denial,
never an exception.
"""

from typing import Any, Mapping, Optional, Union

from loguru import logger
from pydantic import ValidationError

from rbac.cache_manager import PermissionCache, compute_permissions
from rbac.config import AccessSettings, get_settings
from rbac.models import Client, FieldContext, Manager, PermissionLevel, parse_principal
from rbac.permissions import MergedPermissions
from rbac.registry import RoleRegistry, get_role_registry

UserLike = Union[Manager, Client, Mapping[str, Any], None]
FieldLike = Union[FieldContext, Mapping[str, Any], None]

_LEVELS = {level.value for level in PermissionLevel}


def coerce_principal(user: UserLike) -> Optional[Union[Manager, Client]]:
    """Accept models or raw user documents; unparsable documents become None"""
    if user is None or isinstance(user, (Manager, Client)):
        return user
    if isinstance(user, Mapping):
        try:
            return parse_principal(user)
        except ValidationError as e:
            logger.warning(f"[ACCESS] Unparsable user document, denying: {e.error_count()} errors")
            return None
    logger.warning(f"[ACCESS] Unsupported user type {type(user).__name__}, denying")
    return None


def _field_localized(field: FieldLike) -> bool:
    if isinstance(field, FieldContext):
        return field.localized
    if isinstance(field, Mapping):
        return field.get("localized") is True
    return getattr(field, "localized", False) is True


def _is_permission_map(permissions: Any) -> bool:
    return isinstance(permissions, dict)


def _has_any_roles(permissions: MergedPermissions) -> bool:
    return len(permissions) > 0


def is_api_client(user: UserLike) -> bool:
    """Check if the user is an API client"""
    principal = coerce_principal(user)
    return isinstance(principal, Client)


class AccessManager:
    """Role-based access decisions"""

    def __init__(self, registry: Optional[RoleRegistry] = None, settings: Optional[AccessSettings] = None):
        self._registry = registry
        self._settings = settings

    @property
    def registry(self) -> RoleRegistry:
        return self._registry or get_role_registry()

    @property
    def settings(self) -> AccessSettings:
        return self._settings or get_settings()

    # ==================== PERMISSION RESOLUTION ====================

    def resolve_permissions(
        self,
        principal: Union[Manager, Client],
        locale: Optional[str] = None,
        cache: Optional[PermissionCache] = None,
    ) -> Any:
        """
        Permissions of a principal for the given locale.

        A snapshot already on the principal wins; otherwise the request cache
        (if any) or a fresh merge supplies it. The principal is never modified.
        """
        if principal.permissions is not None:
            return principal.permissions

        locale = locale or self.settings.default_locale
        if cache is not None:
            return cache.get_or_compute(principal, locale, self.registry)
        return compute_permissions(principal, locale, self.registry)

    # ==================== DECISIONS ====================

    def has_permission(
        self,
        user: UserLike,
        collection: str,
        operation: str,
        field: FieldLike = None,
        locale: Optional[str] = None,
        doc_id: Optional[Union[str, int]] = None,
        cache: Optional[PermissionCache] = None,
    ) -> bool:
        """
        Check if a user may perform an operation on a collection.

        Args:
            user: Manager, Client, raw user document or None
            collection: Collection slug
            operation: 'read', 'create', 'update' or 'delete'
            field: Field context ({"localized": bool}) for field-level checks
            locale: Request locale (manager roles are assigned per locale)
            doc_id: Document id for document-level update grants
            cache: Request-scoped permission cache

        Returns:
            True if allowed
        """
        principal = coerce_principal(user)

        # Block missing or inactive users
        if principal is None or not principal.active:
            return False

        is_client = isinstance(principal, Client)

        if not is_client and principal.admin:
            return True

        if collection in self.settings.restricted_collections:
            logger.debug(f"[ACCESS] Restricted collection {collection} denied for {principal.collection}:{principal.id}")
            return False

        if operation not in _LEVELS:
            logger.debug(f"[ACCESS] Unknown operation {operation!r} denied")
            return False

        permissions = self.resolve_permissions(principal, locale, cache)

        # Document-level update grants (managers only)
        if not is_client and operation == "update" and doc_id is not None:
            for access in principal.custom_resource_access:
                if access.value is None:
                    continue
                if access.relation_to == collection and str(access.value) == str(doc_id):
                    logger.debug(f"[ACCESS] Document grant {collection}/{doc_id} for manager {principal.id}")
                    return True

        if not _is_permission_map(permissions):
            logger.debug(f"[ACCESS] Malformed permissions for {principal.collection}:{principal.id}, denying")
            return False

        collection_perms = permissions.get(collection)

        # Managers with any role can browse every non-restricted collection
        if not is_client and collection_perms is None and operation == "read":
            return _has_any_roles(permissions)

        if not isinstance(collection_perms, (list, tuple, set, frozenset)):
            return False

        if PermissionLevel.TRANSLATE.value in collection_perms:
            if field is not None:
                # Every field is readable, only localized ones are writable
                if operation == "read":
                    return True
                if operation == "update":
                    return _field_localized(field)
                return False
            return operation in ("read", "update")

        # API clients never delete, whatever their role says
        if is_client and operation == "delete":
            return False

        return operation in collection_perms

    def create_locale_filter(
        self,
        user: UserLike,
        collection: str,
        locale: Optional[str] = None,
        cache: Optional[PermissionCache] = None,
    ) -> bool:
        """
        Locale scoping for list and read queries.

        Locale separation is enforced by localized fields, so this never
        narrows results to specific documents; it only gates the query.
        Without a permissions snapshot the principal's roles are merged
        first, rather than allowing every manager outright.
        """
        principal = coerce_principal(user)
        if principal is None or not principal.active:
            return False

        is_client = isinstance(principal, Client)

        if not is_client and principal.admin:
            return True

        permissions = self.resolve_permissions(principal, locale, cache)
        if not _is_permission_map(permissions):
            return not is_client

        if permissions.get(collection) is None:
            return not is_client and _has_any_roles(permissions)

        return True


# Global instance
access_manager = AccessManager()


def has_permission(
    user: UserLike,
    collection: str,
    operation: str,
    field: FieldLike = None,
    locale: Optional[str] = None,
    doc_id: Optional[Union[str, int]] = None,
    cache: Optional[PermissionCache] = None,
) -> bool:
    """Check a permission with the global access manager"""
    return access_manager.has_permission(
        user, collection, operation, field=field, locale=locale, doc_id=doc_id, cache=cache
    )


def create_locale_filter(
    user: UserLike,
    collection: str,
    locale: Optional[str] = None,
    cache: Optional[PermissionCache] = None,
) -> bool:
    """Locale filter with the global access manager"""
    return access_manager.create_locale_filter(user, collection, locale=locale, cache=cache)
