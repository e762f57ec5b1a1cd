import logging
from typing import Dict, Optional

from config.base import BaseConfiguration
from core.api_client import SubOneAPIClient
from core.data_store import DataStore
from .list_view import BatchListView

logger = logging.getLogger(__name__)


def configure_logging(level: str = "INFO") -> None:
    # Configure default console logging if not already configured
    if not logging.getLogger().hasHandlers():
        logging.basicConfig(
            level=getattr(logging, level.upper(), logging.INFO),
            format="%(asctime)s %(name)s %(levelname)s: %(message)s",
        )


class ConsoleCoordinator:
    """Wires the API client, data store and one list view per list."""

    def __init__(self, config: BaseConfiguration, api_client: Optional[SubOneAPIClient] = None):
        self.config = config
        configure_logging(config.log_level)

        logger.info("Creating ConsoleCoordinator for %s", config.api_base_url)
        self.api_client = api_client or SubOneAPIClient(config.api_base_url, timeout=config.request_timeout)
        self.store = DataStore(self.api_client)
        self._is_authenticated = False

        self.views: Dict[str, BatchListView] = {
            "subscriptions": BatchListView(
                "subscriptions",
                self.store.subscription_snapshot,
                self.store.batch_delete_subscriptions,
            ),
            "nodes": BatchListView(
                "nodes",
                self.store.node_snapshot,
                self.store.batch_delete_nodes,
            ),
            "profiles": BatchListView(
                "profiles",
                self.store.profile_snapshot,
                self.store.batch_delete_profiles,
            ),
        }

    @property
    def is_authenticated(self) -> bool:
        return self._is_authenticated

    def start(self) -> bool:
        """Log in (when credentials are configured) and load all lists."""
        if self.config.has_credentials:
            self._is_authenticated = self.api_client.login(self.config.username, self.config.password)
            if not self._is_authenticated:
                logger.warning("Authentication failed during coordinator start")
                return False
        else:
            logger.warning("No credentials configured, using existing session")

        if not self.store.load():
            logger.error("Failed to load data from %s", self.config.api_base_url)
            return False
        return True

    def refresh(self) -> bool:
        """Reload lists. Existing selections are kept; stale IDs do no harm."""
        return self.store.load()

    def cleanup(self) -> None:
        logger.debug("Closing API client")
        self.api_client.close()
