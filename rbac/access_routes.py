"""
FastAPI endpoints describing roles and the caller's permissions.
"""

from typing import Dict, List, Optional, Union

from fastapi import APIRouter, Depends, HTTPException
from loguru import logger
from pydantic import BaseModel

from rbac.access_manager import access_manager
from rbac.cache_manager import PermissionCache
from rbac.models import Client, Manager
from rbac.permissions import manager_projects, permission_rows, well_formed_permissions
from rbac.projects import get_project_label
from rbac.rbac_dependencies import (
    get_permission_cache,
    get_request_locale,
    get_request_principal,
    require_admin,
)

router = APIRouter(prefix="/access", tags=["access"])

# ==================== RESPONSE MODELS ====================

class PermissionRow(BaseModel):
    collection: str
    label: str
    operations: List[str]


class PermissionsResponse(BaseModel):
    collection: str
    locale: Optional[str] = None
    admin: bool = False
    permissions: Dict[str, List[str]] = {}
    rows: List[PermissionRow] = []
    projects: List[str] = []


class RoleSummary(BaseModel):
    slug: str
    label: str
    description: str
    project: Optional[str] = None
    localized: bool
    permissions: Dict[str, List[str]]


class ProjectGroup(BaseModel):
    project: Optional[str] = None
    label: str
    roles: List[str]


class RolesResponse(BaseModel):
    managers: List[RoleSummary]
    clients: List[RoleSummary]
    projects: List[ProjectGroup]


# ==================== ENDPOINTS ====================

@router.get("/permissions", response_model=PermissionsResponse)
async def get_my_permissions(
    principal: Optional[Union[Manager, Client]] = Depends(get_request_principal),
    locale: Optional[str] = Depends(get_request_locale),
    cache: PermissionCache = Depends(get_permission_cache),
):
    """Merged permissions of the caller for the request locale"""
    if principal is None or not principal.active:
        raise HTTPException(status_code=401, detail="Authentication required")

    if isinstance(principal, Manager) and principal.admin:
        return PermissionsResponse(
            collection=principal.collection,
            locale=locale,
            admin=True,
            projects=manager_projects(principal, access_manager.registry),
        )

    permissions = access_manager.resolve_permissions(principal, locale, cache)
    if not isinstance(permissions, dict):
        logger.warning(f"[ACCESS] Malformed permissions on {principal.collection}:{principal.id}")
    permissions = well_formed_permissions(permissions)

    rows = [
        PermissionRow(collection=collection, label=label, operations=operations)
        for collection, label, operations in permission_rows(permissions)
    ]
    projects = manager_projects(principal, access_manager.registry) if isinstance(principal, Manager) else []

    return PermissionsResponse(
        collection=principal.collection,
        locale=locale,
        permissions=permissions,
        rows=rows,
        projects=projects,
    )


@router.get("/roles", response_model=RolesResponse)
async def list_roles(admin: Manager = Depends(require_admin)):
    """Every role definition, with manager roles grouped by project"""
    registry = access_manager.registry

    def summarize(role_collection: str) -> List[RoleSummary]:
        return [
            RoleSummary(
                slug=role.slug,
                label=role.label or role.slug,
                description=role.description,
                project=role.project,
                localized=role.localized,
                permissions={c: list(ops) for c, ops in role.permissions.items()},
            )
            for role in registry.roles_for(role_collection).values()
        ]

    groups = [
        ProjectGroup(project=project, label=get_project_label(project), roles=slugs)
        for project, slugs in registry.roles_by_project().items()
    ]

    return RolesResponse(
        managers=summarize("managers"),
        clients=summarize("clients"),
        projects=groups,
    )
