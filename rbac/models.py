"""
Pydantic models for roles and principals.

Principals are the two kinds of authenticated actors the CMS knows about:
1. Managers - admin users, roles assigned per locale
2. Clients  - API consumers, roles global to every locale

Both are discriminated by the `collection` attribute the framework puts on
every user document.
"""

from enum import Enum
from typing import Annotated, Any, Dict, List, Literal, Mapping, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, field_validator


class PermissionLevel(str, Enum):
    """Operation levels a role can grant on a collection"""
    READ = "read"
    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"
    TRANSLATE = "translate"


class RoleCollection(str, Enum):
    """Principal type a role applies to"""
    MANAGERS = "managers"
    CLIENTS = "clients"


def collection_key(value: Union[str, Enum]) -> str:
    """Plain string slug for enum members or strings"""
    return value.value if isinstance(value, Enum) else value


# ==================== ROLES ====================

class Role(BaseModel):
    """
    Static role definition.

    Example:
        {
            "slug": "translator",
            "label": "Translator",
            "role_collection": "managers",
            "permissions": {"pages": ["read", "translate"]},
            "project": "wemeditate-web"
        }
    """
    model_config = ConfigDict(frozen=True, use_enum_values=True)

    slug: str = Field(..., min_length=1)
    label: str = ""
    description: str = ""
    role_collection: RoleCollection
    permissions: Dict[str, List[PermissionLevel]] = Field(default_factory=dict)
    project: Optional[str] = None

    @property
    def localized(self) -> bool:
        """Manager roles are assigned per language"""
        return self.role_collection == RoleCollection.MANAGERS.value


# ==================== PRINCIPALS ====================

class ResourceRef(BaseModel):
    """Polymorphic relationship value: a document in some collection"""
    model_config = ConfigDict(populate_by_name=True)

    relation_to: str = Field(..., alias="relationTo")
    # None when the related document was deleted
    value: Optional[Union[str, int]] = None

    @field_validator("value", mode="before")
    def populated_document_id(cls, v):
        # Populated relationships carry the whole document
        if isinstance(v, Mapping):
            return v.get("id")
        return v


class FieldContext(BaseModel):
    """Field being checked by field-level access"""
    localized: bool = False


class _PrincipalBase(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: Optional[Union[str, int]] = None
    active: bool = False
    # Cached merged permissions (virtual field). Left untyped so a malformed
    # value reaches the access checks and is denied there.
    permissions: Optional[Any] = None

    @field_validator("active", mode="before")
    def inactive_when_missing(cls, v):
        return False if v is None else v


class Manager(_PrincipalBase):
    """
    Admin user.

    `roles` maps locale code -> role slugs. A document read under a single
    locale comes back already localized, so a flat list of slugs is kept
    as-is and applies to whatever locale it was read with.
    """
    collection: Literal["managers"] = "managers"
    admin: bool = False
    roles: Union[Dict[str, List[str]], List[str]] = Field(default_factory=dict)
    custom_resource_access: List[ResourceRef] = Field(
        default_factory=list,
        alias="customResourceAccess",
    )

    @field_validator("admin", mode="before")
    def not_admin_when_missing(cls, v):
        return False if v is None else v

    @field_validator("roles", mode="before")
    def roles_per_locale(cls, v):
        if v is None:
            return {}
        if isinstance(v, Mapping):
            return {locale: slugs or [] for locale, slugs in v.items()}
        return v

    @field_validator("custom_resource_access", mode="before")
    def empty_when_missing(cls, v):
        return [] if v is None else v

    def roles_for_locale(self, locale: str) -> List[str]:
        if isinstance(self.roles, list):
            return list(self.roles)
        return list(self.roles.get(locale) or [])

    def all_role_slugs(self) -> List[str]:
        """Role slugs across every locale, first-seen order"""
        groups = [self.roles] if isinstance(self.roles, list) else self.roles.values()
        slugs: List[str] = []
        for group in groups:
            for slug in group:
                if slug not in slugs:
                    slugs.append(slug)
        return slugs


class Client(_PrincipalBase):
    """API client. `roles` is a flat list of role slugs."""
    collection: Literal["clients"] = "clients"
    roles: List[str] = Field(default_factory=list)

    @field_validator("roles", mode="before")
    def empty_when_missing(cls, v):
        return [] if v is None else v


Principal = Annotated[Union[Manager, Client], Field(discriminator="collection")]

_principal_adapter = TypeAdapter(Principal)


def parse_principal(data: Mapping[str, Any]) -> Union[Manager, Client]:
    """
    Build a principal from a user document.

    Raises:
        pydantic.ValidationError: if the document is not a manager or client
    """
    return _principal_adapter.validate_python(dict(data))
