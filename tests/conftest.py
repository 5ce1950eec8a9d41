import pytest

from rbac.access_manager import AccessManager
from rbac.config import AccessSettings, reset_settings
from rbac.models import Client, Manager
from rbac.registry import RoleRegistry, set_role_registry


@pytest.fixture(autouse=True)
def _isolated_globals(monkeypatch):
    """Keep process-wide settings and registry out of each other's way."""
    for name in ("RBAC_DEFAULT_LOCALE", "RBAC_RESTRICTED_COLLECTIONS", "RBAC_ROLES_FILE"):
        monkeypatch.delenv(name, raising=False)
    reset_settings()
    set_role_registry(None)
    yield
    reset_settings()
    set_role_registry(None)


@pytest.fixture
def registry():
    return RoleRegistry.default()


@pytest.fixture
def engine(registry):
    return AccessManager(registry=registry, settings=AccessSettings())


@pytest.fixture
def make_manager():
    def _make(roles=None, **kwargs):
        kwargs.setdefault("id", "m1")
        kwargs.setdefault("active", True)
        return Manager(roles=roles or {}, **kwargs)
    return _make


@pytest.fixture
def make_client():
    def _make(roles=None, **kwargs):
        kwargs.setdefault("id", "c1")
        kwargs.setdefault("active", True)
        return Client(roles=roles or [], **kwargs)
    return _make
