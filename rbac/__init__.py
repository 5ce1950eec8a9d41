from rbac.access_control import (AccessRequest, create_field_access,
                                 role_based_access,)
from rbac.access_manager import (AccessManager, access_manager,
                                 create_locale_filter, has_permission,
                                 is_api_client,)
from rbac.cache_manager import PermissionCache, populate_permissions
from rbac.config import AccessSettings, get_settings
from rbac.models import (Client, FieldContext, Manager, PermissionLevel,
                         ResourceRef, Role, RoleCollection, parse_principal,)
from rbac.permissions import (MergedPermissions, has_role_permission,
                              merge_role_permissions,)
from rbac.registry import RoleRegistry, get_role_registry

__all__ = ['AccessManager', 'AccessRequest', 'AccessSettings', 'Client',
           'FieldContext', 'Manager', 'MergedPermissions', 'PermissionCache',
           'PermissionLevel', 'ResourceRef', 'Role', 'RoleCollection',
           'RoleRegistry', 'access_manager', 'create_field_access',
           'create_locale_filter', 'get_role_registry', 'get_settings',
           'has_permission', 'has_role_permission', 'is_api_client',
           'merge_role_permissions', 'parse_principal', 'populate_permissions',
           'role_based_access']
