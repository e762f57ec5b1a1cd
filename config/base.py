"""
Abstract configuration interface.

Defines the settings every console front end needs (backend location,
credentials, request timeout and log level) and the validation shared by
all concrete configurations.
"""
import logging
from abc import ABC, abstractmethod
from typing import Optional

from core.data_models import is_http_url


class ConfigurationError(Exception):
    """Raised when configuration values are missing or invalid."""
    pass


class BaseConfiguration(ABC):
    """
    Base class for console configuration.

    Subclasses decide where values come from. ``validate()`` checks them
    before any component is built.
    """

    @property
    @abstractmethod
    def api_base_url(self) -> str:
        """Root URL of the Sub-One backend, e.g. ``https://sub.example.com``."""

    @property
    @abstractmethod
    def username(self) -> Optional[str]:
        """Admin username, None to skip login."""

    @property
    @abstractmethod
    def password(self) -> Optional[str]:
        """Admin password."""

    @property
    def request_timeout(self) -> float:
        """Seconds to wait for each backend request."""
        return 15.0

    @property
    def log_level(self) -> str:
        """Name of the root log level."""
        return "INFO"

    @property
    def has_credentials(self) -> bool:
        return bool(self.username and self.password)

    def validate(self) -> None:
        """
        Check configuration values.

        Raises:
            ConfigurationError: If a value is missing or invalid
        """
        if not self.api_base_url:
            raise ConfigurationError("API base URL is not set")
        if not is_http_url(self.api_base_url):
            raise ConfigurationError(f"API base URL must be http(s): {self.api_base_url}")
        if self.request_timeout <= 0:
            raise ConfigurationError(f"Request timeout must be positive: {self.request_timeout}")
        if not isinstance(logging.getLevelName(self.log_level.upper()), int):
            raise ConfigurationError(f"Unknown log level: {self.log_level}")
