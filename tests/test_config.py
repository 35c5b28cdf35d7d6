import logging
import os

import pytest

from questify.config import ClientSettings
from questify.constants.network_constants import DEFAULT_API_URL, REQUEST_TIMEOUT_SECONDS
from questify.utils.logging_config import configure_logging

ENV_KEYS = (
    "QUESTIFY_API_URL",
    "QUESTIFY_API_TOKEN",
    "QUESTIFY_REQUEST_TIMEOUT",
    "QUESTIFY_HOST",
    "QUESTIFY_PORT",
    "QUESTIFY_LOG_LEVEL",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch, tmp_path):
    for key in ENV_KEYS:
        monkeypatch.delenv(key, raising=False)
    monkeypatch.chdir(tmp_path)


def test_defaults_without_environment(tmp_path):
    settings = ClientSettings.from_env(str(tmp_path / "missing.env"))
    assert settings.api_url == DEFAULT_API_URL
    assert settings.token is None
    assert settings.request_timeout_seconds == REQUEST_TIMEOUT_SECONDS


def test_environment_overrides(monkeypatch, tmp_path):
    monkeypatch.setenv("QUESTIFY_API_URL", "https://quiz.example.com/api")
    monkeypatch.setenv("QUESTIFY_API_TOKEN", "secret")
    monkeypatch.setenv("QUESTIFY_REQUEST_TIMEOUT", "5.5")
    monkeypatch.setenv("QUESTIFY_PORT", "8080")
    settings = ClientSettings.from_env(str(tmp_path / "missing.env"))
    assert settings.api_url == "https://quiz.example.com/api"
    assert settings.token == "secret"
    assert settings.request_timeout_seconds == 5.5
    assert settings.port == 8080
    assert settings.log_level == "INFO"


def test_dotenv_file_is_loaded(tmp_path):
    env_file = tmp_path / "questify.env"
    env_file.write_text("QUESTIFY_API_URL=http://dotenv.test/api\nQUESTIFY_HOST=0.0.0.0\n")
    try:
        settings = ClientSettings.from_env(str(env_file))
    finally:
        os.environ.pop("QUESTIFY_API_URL", None)
        os.environ.pop("QUESTIFY_HOST", None)
    assert settings.api_url == "http://dotenv.test/api"
    assert settings.host == "0.0.0.0"


@pytest.mark.parametrize(("key", "value"), [("QUESTIFY_REQUEST_TIMEOUT", "soon"), ("QUESTIFY_REQUEST_TIMEOUT", "0"), ("QUESTIFY_PORT", "http")])
def test_invalid_numbers_are_rejected(monkeypatch, tmp_path, key, value):
    monkeypatch.setenv(key, value)
    with pytest.raises(ValueError):
        ClientSettings.from_env(str(tmp_path / "missing.env"))


def test_configure_logging_accepts_level_names():
    logger = configure_logging("debug")
    assert logger.name == "questify"
    assert logging.getLogger("httpx").level == logging.WARNING
    with pytest.raises(ValueError):
        configure_logging("chatty")
