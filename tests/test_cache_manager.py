from rbac.cache_manager import (PermissionCache, compute_permissions,
                                populate_permissions, resolve_role_slugs)


def test_resolve_role_slugs_for_manager(make_manager):
    manager = make_manager({"en": ["meditations-editor"], "cs": ["translator"]})

    assert resolve_role_slugs(manager, "cs") == ["translator"]
    assert resolve_role_slugs(manager, "en") == ["meditations-editor"]
    assert resolve_role_slugs(manager) == ["meditations-editor"]
    assert resolve_role_slugs(manager, default_locale="cs") == ["translator"]
    assert resolve_role_slugs(manager, "de") == []


def test_resolve_role_slugs_for_client(make_client):
    client = make_client(["we-meditate-web", "sahaj-atlas"])
    assert resolve_role_slugs(client, "cs") == ["we-meditate-web", "sahaj-atlas"]


def test_compute_permissions(registry, make_manager, make_client):
    manager = make_manager({"cs": ["translator"]})
    assert set(compute_permissions(manager, "cs", registry)) == {"pages", "music"}
    assert compute_permissions(manager, "en", registry) == {}

    client = make_client(["sahaj-atlas"])
    assert set(compute_permissions(client, None, registry)) == {"sahaj-atlas-settings", "images", "files"}


def test_cache_computes_once_per_locale(registry, make_manager):
    manager = make_manager({"en": ["meditations-editor"], "cs": ["translator"]})
    cache = PermissionCache()

    assert cache.get_cached(manager, "en") is None
    first = cache.get_or_compute(manager, "en", registry)
    assert cache.get_or_compute(manager, "en", registry) == first
    assert cache.get_cached(manager, "en") == first
    # No locale means the default locale
    assert cache.get_or_compute(manager, None, registry) == first

    czech = cache.get_or_compute(manager, "cs", registry)
    assert set(czech) == {"pages", "music"}
    assert len(cache) == 2


def test_cache_ignores_locale_for_clients(registry, make_client):
    client = make_client(["we-meditate-app"])
    cache = PermissionCache()

    english = cache.get_or_compute(client, "en", registry)
    assert cache.get_or_compute(client, "cs", registry) == english
    assert len(cache) == 1


def test_cache_keys_by_principal_kind(registry, make_manager, make_client):
    cache = PermissionCache()
    cache.get_or_compute(make_manager({"en": ["translator"]}, id="1"), "en", registry)
    cache.get_or_compute(make_client(["sahaj-atlas"], id="1"), "en", registry)
    assert len(cache) == 2


def test_principals_without_id_not_cached(registry, make_manager):
    manager = make_manager({"en": ["translator"]}, id=None)
    cache = PermissionCache()

    assert set(cache.get_or_compute(manager, "en", registry)) == {"pages", "music"}
    assert len(cache) == 0
    assert cache.get_cached(manager, "en") is None


def test_invalidate_principal(registry, make_manager):
    manager = make_manager({"en": ["meditations-editor"], "cs": ["translator"]})
    other = make_manager({"en": ["translator"]}, id="m2")
    cache = PermissionCache()
    cache.get_or_compute(manager, "en", registry)
    cache.get_or_compute(manager, "cs", registry)
    cache.get_or_compute(other, "en", registry)

    cache.invalidate_principal(manager)
    assert len(cache) == 1
    assert cache.get_cached(other, "en") is not None

    cache.clear()
    assert len(cache) == 0


def test_populate_permissions_returns_copy(registry, make_manager):
    manager = make_manager({"en": ["meditations-editor"], "cs": ["translator"]})

    populated = populate_permissions(manager, "cs", registry=registry)
    assert set(populated.permissions) == {"pages", "music"}
    assert manager.permissions is None
    assert populated.roles == manager.roles


def test_populate_permissions_keeps_existing_snapshot(registry, make_manager):
    manager = make_manager({"en": ["translator"]}, permissions={"lessons": ["read"]})
    assert populate_permissions(manager, "en", registry=registry) is manager


def test_populate_permissions_through_cache(registry, make_client):
    client = make_client(["we-meditate-web"])
    cache = PermissionCache()

    populated = populate_permissions(client, cache=cache, registry=registry)
    assert populated.permissions == cache.get_cached(client)
    assert populated.permissions["form-submissions"] == ["create"]


def test_cache_hands_out_copies(registry, make_manager):
    manager = make_manager({"en": ["meditations-editor"]})
    cache = PermissionCache()

    permissions = cache.get_or_compute(manager, "en", registry)
    permissions["meditations"].append("delete")
    permissions["sahaj-atlas-settings"] = ["update"]

    cached = cache.get_cached(manager, "en")
    assert cached["meditations"] == ["read", "create", "update"]
    assert "sahaj-atlas-settings" not in cached

    populated = populate_permissions(manager, "en", cache=cache, registry=registry)
    populated.permissions["images"].clear()
    assert cache.get_cached(manager, "en")["images"] == ["read", "create"]


def test_resolve_role_slugs_for_localized_manager(make_manager):
    manager = make_manager(["translator"])
    assert resolve_role_slugs(manager, "cs") == ["translator"]
    assert resolve_role_slugs(manager) == ["translator"]
