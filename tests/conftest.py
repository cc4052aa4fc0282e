import pytest

from tubemaster.config import Settings
from tubemaster.logging_config import reset_metrics


@pytest.fixture(autouse=True)
def clean_metrics():
    reset_metrics()
    yield
    reset_metrics()


@pytest.fixture
def settings() -> Settings:
    """Fully configured settings that never touch a real .env file."""
    return Settings(
        _env_file=None,
        openrouter_api_key="test-openrouter-key",
        groq_api_key="test-groq-key",
        gemini_api_key="test-gemini-key",
    )


@pytest.fixture
def bare_settings() -> Settings:
    """Settings with no credentials at all."""
    return Settings(
        _env_file=None,
        openrouter_api_key=None,
        groq_api_key=None,
        gemini_api_key=None,
    )
