"""
Environment-based configuration.

Reads settings from process environment variables, optionally seeded from
a ``.env`` file via python-dotenv.
"""
import os
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

from .base import BaseConfiguration, ConfigurationError

DEFAULT_API_BASE_URL = "http://localhost:8787"


class EnvConfiguration(BaseConfiguration):
    """Configuration sourced from ``SUBONE_*`` environment variables."""

    def __init__(self, env_file: Optional[Path] = None) -> None:
        if env_file is not None:
            load_dotenv(env_file)
        else:
            load_dotenv()

        self._api_base_url = os.getenv("SUBONE_API_BASE_URL", DEFAULT_API_BASE_URL).rstrip("/")
        self._username = os.getenv("SUBONE_USERNAME")
        self._password = os.getenv("SUBONE_PASSWORD")
        self._log_level = os.getenv("SUBONE_LOG_LEVEL", "INFO")

        raw_timeout = os.getenv("SUBONE_REQUEST_TIMEOUT", "15")
        try:
            self._request_timeout = float(raw_timeout)
        except ValueError:
            raise ConfigurationError(f"SUBONE_REQUEST_TIMEOUT must be a number: {raw_timeout!r}")

    @property
    def api_base_url(self) -> str:
        return self._api_base_url

    @property
    def username(self) -> Optional[str]:
        return self._username

    @property
    def password(self) -> Optional[str]:
        return self._password

    @property
    def request_timeout(self) -> float:
        return self._request_timeout

    @property
    def log_level(self) -> str:
        return self._log_level
