import pytest

from adminflow.settings import Settings


@pytest.mark.unit
def test_settings_defaults_for_testing_environment(monkeypatch) -> None:
    monkeypatch.setenv("SECRET_KEY", "test-secret-key")
    monkeypatch.setenv("ADMIN_URL_PREFIX", "backoffice/")
    monkeypatch.setenv("LOG_LEVEL", "debug")

    settings = Settings.load()

    assert settings.debug is False
    assert settings.admin_url_prefix == "/backoffice"
    assert settings.log_level == "DEBUG"
    config = settings.to_flask_config()
    assert config["SECRET_KEY"] == "test-secret-key"
    assert config["SQLALCHEMY_DATABASE_URI"] == "sqlite:///:memory:"
    assert config["ADMIN_TRANSLATION_LOCALE"] == "en"


@pytest.mark.unit
def test_development_environment_enables_debug(monkeypatch) -> None:
    monkeypatch.setenv("FLASK_ENV", "development")

    assert Settings.load().debug is True

    monkeypatch.setenv("FLASK_DEBUG", "false")
    assert Settings.load().debug is False


@pytest.mark.unit
def test_production_requires_secret_key(monkeypatch) -> None:
    monkeypatch.setenv("FLASK_ENV", "production")
    monkeypatch.setenv("SECRET_KEY", "")

    with pytest.raises(ValueError, match="SECRET_KEY"):
        Settings.load()


@pytest.mark.unit
def test_invalid_log_level_is_rejected(monkeypatch) -> None:
    monkeypatch.setenv("LOG_LEVEL", "verbose")

    with pytest.raises(ValueError, match="LOG_LEVEL"):
        Settings.load()


@pytest.mark.unit
def test_root_admin_prefix_is_empty(monkeypatch) -> None:
    monkeypatch.setenv("ADMIN_URL_PREFIX", "/")

    assert Settings.load().admin_url_prefix == ""
