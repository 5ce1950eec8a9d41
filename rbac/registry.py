from pathlib import Path
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional, Union

import yaml
from loguru import logger
from pydantic import ValidationError

from rbac.config import get_settings
from rbac.models import Role, RoleCollection, collection_key
from rbac.projects import is_valid_project
from rbac.role_config import CLIENT_ROLES, MANAGER_ROLES


def _build_roles(definitions: Mapping[str, Any], role_collection: RoleCollection) -> Dict[str, Role]:
    """Turn a slug -> definition table into Role models."""
    if not isinstance(definitions, Mapping):
        raise ValueError(f"Role table for '{role_collection.value}' must be a mapping")

    roles = {}
    for slug, definition in definitions.items():
        definition = dict(definition or {})
        try:
            role = Role(
                slug=slug,
                role_collection=role_collection,
                **{k: v for k, v in definition.items() if k not in ("slug", "role_collection")},
            )
        except ValidationError as e:
            raise ValueError(f"Invalid role '{slug}': {e}") from e

        if role_collection == RoleCollection.CLIENTS and role.project is not None:
            raise ValueError(f"Client role '{slug}' cannot belong to a project")
        if not is_valid_project(role.project):
            raise ValueError(f"Role '{slug}' has unknown project '{role.project}'")

        roles[slug] = role
    return roles


class RoleRegistry:
    """
    Read-only lookup of manager and client roles.

    Built once at startup and passed to the access checks; never mutated.
    """

    def __init__(self, manager_roles: Mapping[str, Any], client_roles: Mapping[str, Any]):
        self._roles = MappingProxyType({
            RoleCollection.MANAGERS.value: MappingProxyType(
                _build_roles(manager_roles, RoleCollection.MANAGERS)
            ),
            RoleCollection.CLIENTS.value: MappingProxyType(
                _build_roles(client_roles, RoleCollection.CLIENTS)
            ),
        })

    @classmethod
    def default(cls) -> "RoleRegistry":
        """Registry with the built-in role tables"""
        return cls(MANAGER_ROLES, CLIENT_ROLES)

    @classmethod
    def from_yaml(cls, path: Union[str, Path]) -> "RoleRegistry":
        """
        Load roles from a YAML file.

        Expected layout:
            managers:
              translator:
                label: Translator
                project: wemeditate-web
                permissions:
                  pages: [read, translate]
            clients:
              sahaj-atlas:
                permissions:
                  images: [read]
        """
        try:
            with open(path, "r") as f:
                data = yaml.safe_load(f) or {}
        except FileNotFoundError:
            logger.error(f"[ROLES] Role file not found: {path}")
            raise

        if not isinstance(data, Mapping):
            raise ValueError(f"Role file {path} must contain a mapping")

        registry = cls(data.get("managers") or {}, data.get("clients") or {})
        logger.info(
            f"[ROLES] Loaded {len(registry.roles_for('managers'))} manager roles and "
            f"{len(registry.roles_for('clients'))} client roles from {path}"
        )
        return registry

    def lookup_role(self, slug: str, role_collection: str) -> Optional[Role]:
        """Get a role by slug, None when unknown"""
        roles = self._roles.get(collection_key(role_collection))
        if roles is None:
            return None
        return roles.get(slug)

    def roles_for(self, role_collection: str) -> Mapping[str, Role]:
        """All roles of one principal type"""
        return self._roles.get(collection_key(role_collection), MappingProxyType({}))

    def role_options(self, role_collection: str) -> List[Dict[str, str]]:
        """Label/value pairs for role select inputs"""
        return [
            {"label": role.label or role.slug, "value": role.slug}
            for role in self.roles_for(role_collection).values()
        ]

    def roles_by_project(self) -> Dict[Optional[str], List[str]]:
        """Manager role slugs grouped by project"""
        grouped: Dict[Optional[str], List[str]] = {}
        for role in self.roles_for(RoleCollection.MANAGERS.value).values():
            grouped.setdefault(role.project, []).append(role.slug)
        return grouped


# Global registry instance
_registry: Optional[RoleRegistry] = None


def get_role_registry() -> RoleRegistry:
    """Get the process-wide registry, loading it on first use"""
    global _registry

    if _registry is None:
        settings = get_settings()
        if settings.roles_file:
            _registry = RoleRegistry.from_yaml(settings.roles_file)
        else:
            _registry = RoleRegistry.default()
    return _registry


def set_role_registry(registry: Optional[RoleRegistry]) -> None:
    """Replace the process-wide registry (None reloads on next use)"""
    global _registry
    _registry = registry
