"""
Merging of role grants into a per-collection permission map.

MergedPermissions example (manager with meditations-editor + translator):
    {
        "meditations": ["read", "create", "update"],
        "images": ["read", "create"],
        "files": ["read", "create"],
        "pages": ["read", "translate"],
        "music": ["read", "translate"],
    }
"""

from typing import Any, Dict, Iterable, List, Optional, Tuple

from loguru import logger

from rbac.models import Manager, collection_key
from rbac.projects import PROJECTS
from rbac.registry import RoleRegistry, get_role_registry

MergedPermissions = Dict[str, List[str]]


def merge_role_permissions(
    role_slugs: Optional[Iterable[str]],
    role_collection: str,
    registry: Optional[RoleRegistry] = None,
) -> MergedPermissions:
    """
    Union the grants of every role into one permission map.

    Unknown role slugs contribute nothing, so stale references left behind
    by a removed role are harmless.

    Args:
        role_slugs: Role slugs assigned to the principal
        role_collection: 'managers' or 'clients', selects the role table
        registry: Role registry (defaults to the process-wide one)

    Returns:
        Collection slug -> deduplicated operation list
    """
    if not role_slugs:
        return {}

    registry = registry or get_role_registry()
    role_collection = collection_key(role_collection)
    merged: MergedPermissions = {}

    for slug in role_slugs:
        role = registry.lookup_role(slug, role_collection)
        if role is None:
            logger.debug(f"[ROLES] Ignoring unknown {role_collection} role: {slug}")
            continue

        for collection, operations in role.permissions.items():
            granted = merged.setdefault(collection, [])
            for operation in operations:
                operation = collection_key(operation)
                if operation not in granted:
                    granted.append(operation)

    return merged


def has_role_permission(permissions: Any, collection: str, operation: str) -> bool:
    """Literal membership check on a merged permission map"""
    if not permissions or not isinstance(permissions, dict):
        return False

    granted = permissions.get(collection)
    if not granted:
        return False
    return collection_key(operation) in granted


def permission_rows(permissions: Any) -> List[Tuple[str, str, List[str]]]:
    """
    Permission table rows sorted by collection.

    Returns:
        (collection slug, display label, operations) tuples
    """
    return [
        (collection, collection.replace("-", " ").title(), operations)
        for collection, operations in sorted(well_formed_permissions(permissions).items())
    ]


def well_formed_permissions(permissions: Any) -> MergedPermissions:
    """
    Copy of a permission map without malformed entries.

    Entries whose operations are not a list are dropped, as are non-string
    operations, the same way the access checks ignore them.
    """
    if not isinstance(permissions, dict):
        return {}

    cleaned: MergedPermissions = {}
    for collection, operations in permissions.items():
        if not isinstance(collection, str) or not isinstance(operations, (list, tuple)):
            logger.debug(f"[RBAC] Dropping malformed permission entry for {collection!r}")
            continue
        cleaned[collection] = [op for op in operations if isinstance(op, str)]
    return cleaned


def manager_projects(manager: Manager, registry: Optional[RoleRegistry] = None) -> List[str]:
    """
    Projects a manager works on, across every locale.
    Used for grouping in the admin only, never for access decisions.
    """
    if manager.admin:
        return [p["value"] for p in PROJECTS]

    registry = registry or get_role_registry()
    projects: List[str] = []
    for slug in manager.all_role_slugs():
        role = registry.lookup_role(slug, "managers")
        if role is not None and role.project and role.project not in projects:
            projects.append(role.project)
    return projects
