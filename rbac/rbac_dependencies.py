"""
Role-Based Access Control (RBAC) dependencies for FastAPI.
Provides reusable dependency functions to protect routes with collection access checks.

The authentication layer is expected to put the current user document on
`request.state.principal` before these dependencies run.
"""

from typing import Optional, Union

from fastapi import Depends, HTTPException, Request
from loguru import logger

from rbac.access_manager import coerce_principal, access_manager
from rbac.cache_manager import PermissionCache
from rbac.models import Client, Manager

# ==================== REQUEST CONTEXT ====================

def get_request_principal(request: Request) -> Optional[Union[Manager, Client]]:
    """
    Dependency: current principal, or None if the request is anonymous.
    """
    return coerce_principal(getattr(request.state, "principal", None))


def get_permission_cache(request: Request) -> PermissionCache:
    """
    Dependency: permission cache shared by every check in this request.
    """
    cache = getattr(request.state, "permission_cache", None)
    if cache is None:
        cache = PermissionCache()
        request.state.permission_cache = cache
    return cache


def get_request_locale(request: Request) -> Optional[str]:
    """
    Dependency: request locale from ?locale= or the Accept-Language header.
    """
    locale = request.query_params.get("locale")
    if locale:
        return locale

    accept_language = request.headers.get("accept-language")
    if not accept_language:
        return None

    # "cs-CZ,cs;q=0.9,en;q=0.8" -> "cs"
    primary = accept_language.split(",")[0].split(";")[0].strip()
    return primary.split("-")[0].lower() or None


# ==================== DEPENDENCY FACTORIES ====================

def require_access(collection: str, operation: str):
    """
    Dependency factory: require an operation on a collection.
    """
    async def _require_access(
        request: Request,
        principal: Optional[Union[Manager, Client]] = Depends(get_request_principal),
        locale: Optional[str] = Depends(get_request_locale),
        cache: PermissionCache = Depends(get_permission_cache),
    ) -> Union[Manager, Client]:
        if principal is None or not principal.active:
            raise HTTPException(status_code=401, detail="Authentication required")

        doc_id = request.path_params.get("doc_id")
        allowed = access_manager.has_permission(
            principal, collection, operation, locale=locale, doc_id=doc_id, cache=cache
        )

        if not allowed:
            logger.warning(
                f"{principal.collection} {principal.id} denied {operation} on {collection} "
                f"(locale: {locale})"
            )
            raise HTTPException(
                status_code=403,
                detail=f"Permission '{operation}' on '{collection}' required"
            )

        return principal

    return _require_access


async def require_admin(
    principal: Optional[Union[Manager, Client]] = Depends(get_request_principal),
) -> Manager:
    """
    Dependency: require an active admin manager.
    """
    if principal is None or not principal.active:
        raise HTTPException(status_code=401, detail="Authentication required")

    if not isinstance(principal, Manager) or not principal.admin:
        logger.warning(f"{principal.collection} {principal.id} attempted to access admin endpoint")
        raise HTTPException(status_code=403, detail="Admin access required")

    return principal
