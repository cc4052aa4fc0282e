import pytest
from pydantic import ValidationError

from tubemaster.config import Settings
from tubemaster.errors import ConfigurationError


def test_defaults(bare_settings):
    assert bare_settings.image_max_edge == 1024
    assert bare_settings.image_jpeg_quality == 70
    assert bare_settings.image_decode_timeout_seconds == 4.0
    assert bare_settings.request_timeout_seconds is None
    assert bare_settings.vision_model == "x-ai/grok-2-vision-1212"
    assert bare_settings.log_level == "INFO"


def test_keys_are_read_from_environment(monkeypatch):
    monkeypatch.setenv("GROQ_API_KEY", "gsk-from-env")
    monkeypatch.setenv("IMAGE_MAX_EDGE", "512")

    settings = Settings(_env_file=None)

    assert settings.groq_api_key == "gsk-from-env"
    assert settings.image_max_edge == 512


def test_blank_key_counts_as_missing():
    settings = Settings(_env_file=None, gemini_api_key="   ")

    assert settings.gemini_api_key is None
    with pytest.raises(ConfigurationError, match="GEMINI_API_KEY"):
        settings.require("gemini_api_key")


def test_require_returns_configured_secret(settings):
    assert settings.require("openrouter_api_key") == "test-openrouter-key"


def test_log_level_is_normalised_and_validated():
    assert Settings(_env_file=None, log_level="debug").log_level == "DEBUG"
    with pytest.raises(ValidationError):
        Settings(_env_file=None, log_level="chatty")


@pytest.mark.parametrize(
    "field, value",
    [("image_jpeg_quality", 0), ("image_max_edge", -1), ("image_decode_timeout_seconds", 0)],
)
def test_invalid_image_settings_are_rejected(field, value):
    with pytest.raises(ValidationError):
        Settings(_env_file=None, **{field: value})
