from sitepay.core.config import Settings


def test_cors_origins_split_on_commas():
    settings = Settings(cors_origins="http://localhost:3000, https://ops.example.com,")

    assert settings.cors_origin_list == ["http://localhost:3000", "https://ops.example.com"]


def test_settings_read_prefixed_environment(monkeypatch):
    monkeypatch.setenv("SITEPAY_LOG_LEVEL", "DEBUG")
    monkeypatch.setenv("SITEPAY_AUTO_CREATE_SCHEMA", "false")

    settings = Settings()

    assert settings.log_level == "DEBUG"
    assert settings.auto_create_schema is False
