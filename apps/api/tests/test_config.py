import pytest

from rtc_token.core.config import Settings
from rtc_token.core.errors import ConfigurationError


def test_settings_read_credentials_from_environment(monkeypatch):
    monkeypatch.setenv("AGORA_APP_ID", "A1")
    monkeypatch.setenv("AGORA_APP_CERTIFICATE", "s3cr3t")

    settings = Settings(_env_file=None)
    credential = settings.credential()

    assert credential.app_id == "A1"
    assert credential.app_certificate == "s3cr3t"
    assert "s3cr3t" not in repr(settings)


@pytest.mark.parametrize(("app_id", "certificate"), [("", "s3cr3t"), ("A1", ""), ("  ", "  ")])
def test_missing_credentials_are_a_configuration_error(monkeypatch, app_id, certificate):
    monkeypatch.setenv("AGORA_APP_ID", app_id)
    monkeypatch.setenv("AGORA_APP_CERTIFICATE", certificate)

    with pytest.raises(ConfigurationError):
        Settings(_env_file=None).credential()


def test_cors_origins_accept_comma_separated_values(monkeypatch):
    monkeypatch.setenv("CORS_ALLOW_ORIGINS", "https://a.test, https://b.test,")

    settings = Settings(_env_file=None)

    assert settings.cors_allow_origins == ["https://a.test", "https://b.test"]


def test_defaults(monkeypatch):
    for name in ("TOKEN_DEFAULT_TTL_SECONDS", "CORS_ALLOW_ORIGINS", "LOG_LEVEL"):
        monkeypatch.delenv(name, raising=False)

    settings = Settings(_env_file=None)

    assert settings.token_default_ttl_seconds == 3600
    assert settings.cors_allow_origins == ["*"]
    assert settings.log_level == "INFO"


def test_certificate_whitespace_is_kept(monkeypatch):
    monkeypatch.setenv("AGORA_APP_ID", "A1")
    monkeypatch.setenv("AGORA_APP_CERTIFICATE", " s3cr3t ")

    assert Settings(_env_file=None).credential().app_certificate == " s3cr3t "
