import pytest
from pydantic import ValidationError

from rbac.models import RoleCollection
from rbac.registry import RoleRegistry, get_role_registry

ROLES_YAML = """
managers:
  meditations-editor:
    label: Meditations Editor
    project: wemeditate-app
    permissions:
      meditations: [read, create, update]
      images: [read, create]
clients:
  kiosk:
    label: Kiosk
    permissions:
      meditations: [read]
"""


def test_lookup_role(registry):
    role = registry.lookup_role("translator", "managers")
    assert role is not None
    assert role.slug == "translator"
    assert role.permissions["pages"] == ["read", "translate"]
    assert role.project == "wemeditate-web"


def test_lookup_accepts_enum(registry):
    assert registry.lookup_role("sahaj-atlas", RoleCollection.CLIENTS) is not None


def test_lookup_unknown_role(registry):
    assert registry.lookup_role("retired-role", "managers") is None
    assert registry.lookup_role("translator", "clients") is None
    assert registry.lookup_role("translator", "robots") is None


def test_only_manager_roles_are_localized(registry):
    assert registry.lookup_role("translator", "managers").localized
    assert not registry.lookup_role("we-meditate-app", "clients").localized


def test_registry_is_read_only(registry):
    roles = registry.roles_for("managers")
    with pytest.raises(TypeError):
        roles["intruder"] = roles["translator"]
    with pytest.raises(ValidationError):
        roles["translator"].slug = "renamed"


def test_role_options(registry):
    options = registry.role_options("clients")
    assert {"label": "Sahaj Atlas", "value": "sahaj-atlas"} in options
    assert len(options) == 3


def test_roles_by_project(registry):
    grouped = registry.roles_by_project()
    assert grouped["wemeditate-app"] == ["meditations-editor", "path-editor"]
    assert grouped["wemeditate-web"] == ["translator"]


def test_from_yaml(tmp_path):
    path = tmp_path / "roles.yaml"
    path.write_text(ROLES_YAML)

    registry = RoleRegistry.from_yaml(path)
    assert registry.lookup_role("meditations-editor", "managers").permissions["images"] == ["read", "create"]
    assert registry.lookup_role("kiosk", "clients").label == "Kiosk"
    assert registry.lookup_role("translator", "managers") is None


def test_from_yaml_rejects_unknown_level(tmp_path):
    path = tmp_path / "roles.yaml"
    path.write_text("managers:\n  publisher:\n    permissions:\n      pages: [publish]\n")
    with pytest.raises(ValueError):
        RoleRegistry.from_yaml(path)


def test_from_yaml_rejects_non_mapping(tmp_path):
    path = tmp_path / "roles.yaml"
    path.write_text("- managers\n- clients\n")
    with pytest.raises(ValueError):
        RoleRegistry.from_yaml(path)


def test_from_yaml_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        RoleRegistry.from_yaml(tmp_path / "missing.yaml")


def test_client_roles_have_no_project():
    with pytest.raises(ValueError):
        RoleRegistry({}, {"kiosk": {"project": "sahaj-atlas", "permissions": {}}})


def test_unknown_project_rejected():
    with pytest.raises(ValueError):
        RoleRegistry({"editor": {"project": "elsewhere", "permissions": {}}}, {})


def test_global_registry_defaults_to_builtin_roles():
    assert get_role_registry().lookup_role("path-editor", "managers") is not None
    assert get_role_registry() is get_role_registry()


def test_global_registry_from_roles_file(tmp_path, monkeypatch):
    path = tmp_path / "roles.yaml"
    path.write_text(ROLES_YAML)
    monkeypatch.setenv("RBAC_ROLES_FILE", str(path))

    registry = get_role_registry()
    assert registry.lookup_role("kiosk", "clients") is not None
    assert registry.lookup_role("path-editor", "managers") is None
