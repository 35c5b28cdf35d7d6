"""Runtime configuration for the Questify client and development backend."""

from __future__ import annotations

from dataclasses import dataclass
import os

from dotenv import load_dotenv

from questify.constants.network_constants import (
    DEFAULT_API_URL,
    DEFAULT_HOST,
    DEFAULT_PORT,
    REQUEST_TIMEOUT_SECONDS,
)


@dataclass(slots=True, frozen=True)
class ClientSettings:
    """Explicit settings handed to each API client and server instance."""

    api_url: str = DEFAULT_API_URL
    token: str | None = None
    request_timeout_seconds: float = REQUEST_TIMEOUT_SECONDS
    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT
    log_level: str = "INFO"

    @classmethod
    def from_env(cls, dotenv_path: str | None = None) -> "ClientSettings":
        """Build settings from the environment, loading a ``.env`` file if present."""
        load_dotenv(dotenv_path)
        timeout_raw = os.getenv("QUESTIFY_REQUEST_TIMEOUT")
        port_raw = os.getenv("QUESTIFY_PORT")
        try:
            timeout = float(timeout_raw) if timeout_raw else REQUEST_TIMEOUT_SECONDS
            port = int(port_raw) if port_raw else DEFAULT_PORT
        except ValueError as exc:
            raise ValueError(f"Invalid numeric Questify setting: {exc}") from exc
        if timeout <= 0:
            raise ValueError("QUESTIFY_REQUEST_TIMEOUT must be a positive number of seconds.")
        return cls(
            api_url=os.getenv("QUESTIFY_API_URL") or DEFAULT_API_URL,
            token=os.getenv("QUESTIFY_API_TOKEN") or None,
            request_timeout_seconds=timeout,
            host=os.getenv("QUESTIFY_HOST") or DEFAULT_HOST,
            port=port,
            log_level=os.getenv("QUESTIFY_LOG_LEVEL") or "INFO",
        )
