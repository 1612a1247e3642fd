import pytest

from navhome.settings import Settings


@pytest.mark.unit
def test_schema_marker_key_follows_schema_version(monkeypatch) -> None:
    monkeypatch.setenv("SCHEMA_VERSION", "v3")

    settings = Settings.load()

    assert settings.schema_marker_key == "schema_migrated_v3"
    assert settings.to_flask_config()["SCHEMA_MARKER_KEY"] == "schema_migrated_v3"


@pytest.mark.unit
def test_cache_type_maps_to_flask_caching_backend(monkeypatch) -> None:
    monkeypatch.setenv("CACHE_TYPE", "SIMPLE")

    config = Settings.load().to_flask_config()

    assert config["CACHE_TYPE"] == "SimpleCache"
    assert "CACHE_REDIS_URL" not in config


@pytest.mark.unit
def test_redis_cache_gets_default_url_outside_production(monkeypatch) -> None:
    monkeypatch.setenv("CACHE_TYPE", "redis")

    config = Settings.load().to_flask_config()

    assert config["CACHE_TYPE"] == "RedisCache"
    assert config["CACHE_REDIS_URL"] == "redis://localhost:6379/0"


@pytest.mark.unit
def test_home_cache_ttl_defaults_to_no_expiry() -> None:
    settings = Settings.load()

    assert settings.home_cache_ttl_seconds == 0
    assert settings.to_flask_config()["HOME_CACHE_TTL"] == 0


@pytest.mark.unit
def test_admin_credentials_must_be_set_together(monkeypatch) -> None:
    monkeypatch.setenv("ADMIN_USERNAME", "admin")

    with pytest.raises(ValueError, match="ADMIN_USERNAME 与 ADMIN_PASSWORD"):
        Settings.load()


@pytest.mark.unit
def test_validation_errors_are_joined_into_single_message(monkeypatch) -> None:
    monkeypatch.setenv("CACHE_TYPE", "memcached")
    monkeypatch.setenv("HOME_CACHE_TTL", "-1")

    with pytest.raises(ValueError) as excinfo:
        Settings.load()

    message = str(excinfo.value)
    assert "CACHE_TYPE 仅支持 simple/redis" in message
    assert "HOME_CACHE_TTL 不能为负数" in message


@pytest.mark.unit
def test_login_lockout_settings_must_be_positive(monkeypatch) -> None:
    monkeypatch.setenv("LOGIN_MAX_ATTEMPTS", "0")
    monkeypatch.setenv("LOGIN_LOCKOUT_SECONDS", "0")

    with pytest.raises(ValueError) as excinfo:
        Settings.load()

    message = str(excinfo.value)
    assert "LOGIN_MAX_ATTEMPTS 必须为正整数" in message
    assert "LOGIN_LOCKOUT_SECONDS 必须为正整数" in message


@pytest.mark.unit
def test_login_lockout_settings_reach_flask_config(monkeypatch) -> None:
    monkeypatch.setenv("LOGIN_MAX_ATTEMPTS", "3")

    config = Settings.load().to_flask_config()

    assert config["LOGIN_MAX_ATTEMPTS"] == 3
    assert config["LOGIN_LOCKOUT_SECONDS"] == 900


@pytest.mark.unit
def test_settings_are_frozen() -> None:
    settings = Settings.load()

    with pytest.raises(ValueError):
        settings.schema_version = "v9"  # type: ignore[misc]
