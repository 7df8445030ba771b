import pytest

from marketplace.data.models import SystemSettingModel
from marketplace.domain.errors import AuthorizationError, NotFoundError, ValidationError
from marketplace.domain.schemas import SettingUpdate
from marketplace.services.settings_cache import SettingsCache
from marketplace.services.settings_service import (
    SettingsService,
    parse_setting_value,
    serialize_setting_value,
    settings_loader,
)


class FakeClock:
    def __init__(self):
        self.now = 1000.0

    def __call__(self):
        return self.now


class CountingLoader:
    def __init__(self, values):
        self.values = values
        self.calls = 0

    def __call__(self):
        self.calls += 1
        return dict(self.values)


def test_cache_serves_snapshot_until_ttl():
    clock = FakeClock()
    loader = CountingLoader({"site_name": "Shop"})
    cache = SettingsCache(loader, ttl_seconds=300, clock=clock)

    assert cache.get("site_name") == "Shop"
    loader.values["site_name"] = "Renamed"
    clock.now += 299
    assert cache.get("site_name") == "Shop"
    assert loader.calls == 1

    clock.now += 1
    assert cache.get("site_name") == "Renamed"
    assert loader.calls == 2


def test_invalidate_forces_reload():
    loader = CountingLoader({"a": 1})
    cache = SettingsCache(loader, ttl_seconds=300, clock=FakeClock())

    cache.get_all()
    loader.values["a"] = 2
    cache.invalidate("a")

    assert cache.get("a") == 2
    assert loader.calls == 2


def test_get_all_returns_copy():
    cache = SettingsCache(CountingLoader({"a": 1}), ttl_seconds=300, clock=FakeClock())
    cache.get_all()["a"] = 99
    assert cache.get("a") == 1


def test_missing_key_default():
    cache = SettingsCache(CountingLoader({}), ttl_seconds=300, clock=FakeClock())
    assert cache.get("nope", "fallback") == "fallback"


@pytest.mark.parametrize(
    "raw,setting_type,expected",
    [
        ("42", "number", 42),
        ("2.5", "number", 2.5),
        ("true", "boolean", True),
        ("false", "boolean", False),
        ('{"a": [1, 2]}', "json", {"a": [1, 2]}),
        ("{broken", "json", "{broken"),
        ("hello", "string", "hello"),
    ],
)
def test_parse_setting_value(raw, setting_type, expected):
    assert parse_setting_value(raw, setting_type) == expected


def test_serialize_rejects_wrong_types():
    with pytest.raises(ValidationError):
        serialize_setting_value("abc", "number")
    with pytest.raises(ValidationError):
        serialize_setting_value(True, "number")
    with pytest.raises(ValidationError):
        serialize_setting_value("yes", "boolean")
    assert serialize_setting_value(True, "boolean") == "true"
    assert serialize_setting_value({"x": 1}, "json") == '{"x": 1}'


@pytest.mark.parametrize("value", ["NaN", "nan", "Infinity", "-inf", "1e999", float("inf"), float("nan"), 10 ** 400])
def test_serialize_rejects_non_finite_numbers(value):
    with pytest.raises(ValidationError):
        serialize_setting_value(value, "number")


def test_serialize_keeps_finite_numbers():
    assert serialize_setting_value(30, "number") == "30"
    assert serialize_setting_value("2.5", "number") == "2.5"
    assert serialize_setting_value(1e300, "number") == "1e+300"


@pytest.fixture
def settings_service(db, session_factory):
    cache = SettingsCache(settings_loader(session_factory), ttl_seconds=300, clock=FakeClock())
    return SettingsService(db, cache)


def test_update_is_visible_immediately(settings_service, admin):
    settings_service.update(admin, "orders_enabled", SettingUpdate(value=True, type="boolean"))
    assert settings_service.get("orders_enabled").value is True

    settings_service.update(admin, "orders_enabled", SettingUpdate(value=False, type="boolean"))
    assert settings_service.get("orders_enabled").value is False
    assert settings_service.get_all(admin) == {"orders_enabled": False}


def test_update_keeps_description(settings_service, admin, session_factory):
    settings_service.update(admin, "site_name", SettingUpdate(value="Shop", description="Nazwa"))
    settings_service.update(admin, "site_name", SettingUpdate(value="Shop 2"))

    session = session_factory()
    try:
        stored = session.get(SystemSettingModel, "site_name")
        assert stored.setting_value == "Shop 2"
        assert stored.description == "Nazwa"
    finally:
        session.close()


def test_unknown_setting(settings_service):
    with pytest.raises(NotFoundError):
        settings_service.get("missing")


def test_settings_are_admin_only(settings_service, provider):
    with pytest.raises(AuthorizationError):
        settings_service.get_all(provider)
    with pytest.raises(AuthorizationError):
        settings_service.update(provider, "site_name", SettingUpdate(value="x"))


def test_non_finite_number_is_not_stored(settings_service, admin):
    settings_service.update(admin, "max_items", SettingUpdate(value=30, type="number"))

    with pytest.raises(ValidationError):
        settings_service.update(admin, "max_items", SettingUpdate(value="Infinity", type="number"))

    assert settings_service.get("max_items").value == 30
