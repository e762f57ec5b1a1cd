"""
In-memory store for subscriptions, manual nodes, profiles and settings.

Owns the lists shown by the console views. Views never hold the lists
themselves; they ask for a fresh snapshot each time they need one and hand
selected IDs back for bulk actions.
"""
import copy
import logging
import secrets
import string
import uuid
from typing import Any, Callable, Dict, Iterable, List, Optional, Tuple

from .api_client import SubOneAPIClient
from .data_models import AppConfig, ManualNode, Profile, Subscription, SubscriptionUserInfo, is_http_url

logger = logging.getLogger(__name__)

_SHORT_ID_ALPHABET = string.ascii_lowercase + string.digits


def generate_short_id(length: int = 8) -> str:
    return "".join(secrets.choice(_SHORT_ID_ALPHABET) for _ in range(length))


def _matches(query: Optional[str], *fields: Optional[str]) -> bool:
    if not query:
        return True
    needle = query.strip().lower()
    return any(needle in (value or "").lower() for value in fields)


def _index_of(items: List[Any], item_id: str) -> Optional[int]:
    for index, item in enumerate(items):
        if item.id == item_id:
            return index
    return None


class DataStore:
    """Owns the console's lists and persists them through the API client."""

    def __init__(self, api_client: Optional[SubOneAPIClient] = None) -> None:
        self.api_client = api_client
        self.subscriptions: List[Subscription] = []
        self.manual_nodes: List[ManualNode] = []
        self.profiles: List[Profile] = []
        self.config = AppConfig()

        self.is_initialized = False
        self.is_loading = False
        self.has_unsaved_changes = False
        self.last_save_error: Optional[str] = None

        self._listeners: List[Callable[[], None]] = []

    # ------------------------------------------------------------------
    def add_listener(self, callback: Callable[[], None]) -> None:
        if callback not in self._listeners:
            self._listeners.append(callback)

    def remove_listener(self, callback: Callable[[], None]) -> None:
        if callback in self._listeners:
            self._listeners.remove(callback)

    def _notify_listeners(self) -> None:
        for callback in list(self._listeners):
            try:
                callback()
            except Exception as exc:
                logger.error("Listener error: %s", exc)

    # ------------------------------------------------------------------
    def init_data(self, data: Optional[Dict[str, Any]]) -> None:
        """Populate the store from a ``{"subs", "profiles", "config"}`` payload.

        Entries of ``subs`` with an http(s) URL are subscriptions, every
        other entry is a manual node.
        """
        if not data:
            return

        all_subs = data.get("subs") or []
        self.subscriptions = [Subscription.from_dict(item) for item in all_subs if is_http_url(item.get("url"))]
        self.manual_nodes = [ManualNode.from_dict(item) for item in all_subs if not is_http_url(item.get("url"))]
        self.profiles = [Profile.from_dict(item) for item in data.get("profiles") or []]

        if data.get("config"):
            self.config.merge(data["config"])

        self.is_initialized = True
        logger.info(
            "Store initialized: %d subscriptions, %d manual nodes, %d profiles",
            len(self.subscriptions), len(self.manual_nodes), len(self.profiles),
        )
        self._notify_listeners()

    def load(self) -> bool:
        """Fetch all data from the backend."""
        if self.api_client is None:
            logger.warning("No API client configured, nothing to load")
            return False
        data = self.api_client.fetch_initial_data()
        if data is None:
            return False
        self.init_data(data)
        return True

    def save_data(self, reason: str = "Data changed") -> bool:
        """Persist every list and the settings in one call."""
        if self.is_loading:
            logger.warning("Save skipped, another save is in progress: %s", reason)
            self.has_unsaved_changes = True
            self.last_save_error = "Another save is in progress"
            return False

        self.has_unsaved_changes = True
        if self.api_client is None:
            logger.warning("No API client configured, changes kept locally: %s", reason)
            self.last_save_error = "No API client configured"
            return False

        subs = [s.to_dict() for s in self.subscriptions] + [n.to_dict() for n in self.manual_nodes]
        profiles = [p.to_dict() for p in self.profiles]

        self.is_loading = True
        try:
            logger.info("Saving: %s", reason)
            response = self.api_client.save_all_data(subs, profiles, self.config.to_dict())
        finally:
            self.is_loading = False

        if not response.success:
            logger.error("Save failed (%s): %s", reason, response.message)
            self.last_save_error = response.message or "Save failed"
            return False
        self.has_unsaved_changes = False
        self.last_save_error = None
        return True

    # ------------------------------------------------------------------
    # Snapshots

    def subscription_snapshot(self, query: Optional[str] = None) -> Tuple[Subscription, ...]:
        return tuple(s for s in self.subscriptions if _matches(query, s.name, s.url))

    def node_snapshot(self, query: Optional[str] = None) -> Tuple[ManualNode, ...]:
        return tuple(n for n in self.manual_nodes if _matches(query, n.name, n.url, n.server))

    def profile_snapshot(self, query: Optional[str] = None) -> Tuple[Profile, ...]:
        return tuple(p for p in self.profiles if _matches(query, p.name, p.custom_id))

    @property
    def active_subscriptions(self) -> List[Subscription]:
        return [s for s in self.subscriptions if s.enabled]

    @property
    def active_manual_nodes(self) -> List[ManualNode]:
        return [n for n in self.manual_nodes if n.enabled]

    @property
    def total_node_count(self) -> int:
        return len(self.manual_nodes) + sum(s.node_count or 0 for s in self.subscriptions)

    @property
    def active_node_count(self) -> int:
        return len(self.active_manual_nodes) + sum(s.node_count or 0 for s in self.active_subscriptions)

    # ------------------------------------------------------------------
    # Subscriptions

    def add_subscription(self, sub: Subscription) -> bool:
        self.subscriptions.insert(0, sub)
        self._notify_listeners()
        return self.save_data("Add subscription")

    def update_subscription(self, sub: Subscription) -> bool:
        """Replace the stored subscription with the same ID by a copy of ``sub``."""
        index = _index_of(self.subscriptions, sub.id)
        if index is None:
            return False
        self.subscriptions[index] = copy.deepcopy(sub)
        self._notify_listeners()
        return self.save_data("Update subscription")

    def delete_subscription(self, sub_id: str) -> bool:
        return self.batch_delete_subscriptions([sub_id]) > 0

    def delete_all_subscriptions(self) -> bool:
        self.subscriptions = []
        self._clear_profiles_field("subscriptions")
        self._notify_listeners()
        return self.save_data("Delete all subscriptions")

    def add_subscriptions_from_bulk(self, subs: Iterable[Subscription]) -> bool:
        new_subs = list(subs)
        if not new_subs:
            return False
        self.subscriptions.extend(new_subs)
        self._notify_listeners()
        return self.save_data("Bulk import subscriptions")

    def update_subscription_nodes(self, sub_id: str) -> bool:
        """Refresh node count and traffic info for a single subscription."""
        index = _index_of(self.subscriptions, sub_id)
        if index is None or self.api_client is None:
            return False
        sub = self.subscriptions[index]
        if not is_http_url(sub.url):
            return False

        sub.is_updating = True
        self._notify_listeners()
        try:
            result = self.api_client.fetch_node_count(sub.url)
            if result is None:
                sub.status = "error"
                sub.error_msg = "Update failed"
                return False
            sub.node_count = result["count"]
            if result.get("userInfo"):
                sub.user_info = SubscriptionUserInfo.from_dict(result["userInfo"])
            sub.status = "success"
            sub.error_msg = None
            return True
        finally:
            sub.is_updating = False
            self._notify_listeners()

    def batch_delete_subscriptions(self, ids: Iterable[str]) -> int:
        """Delete subscriptions by ID and drop them from every profile.

        Returns:
            Number of subscriptions removed
        """
        id_set = set(ids)
        before = len(self.subscriptions)
        self.subscriptions = [s for s in self.subscriptions if s.id not in id_set]
        removed = before - len(self.subscriptions)
        for profile in self.profiles:
            profile.subscriptions = [sid for sid in profile.subscriptions if sid not in id_set]
        logger.info("Deleted %d of %d requested subscriptions", removed, len(id_set))
        if removed:
            self._notify_listeners()
            self.save_data("Batch delete subscriptions")
        return removed

    def update_all_enabled_subscriptions(self) -> Dict[str, Any]:
        """Refresh node counts for every enabled http subscription."""
        enabled = [s for s in self.subscriptions if s.enabled and is_http_url(s.url)]
        if not enabled:
            return {"success": True, "count": 0, "message": "No enabled subscriptions"}
        if self.api_client is None:
            return {"success": False, "count": 0, "message": "No API client configured"}

        by_id = {s.id: s for s in enabled}
        for sub in enabled:
            sub.is_updating = True
        try:
            result = self.api_client.batch_update_nodes(list(by_id))
            if not result.success:
                return {"success": False, "count": 0, "message": result.message}

            success_count = 0
            for update in result.data or []:
                sub = by_id.get(update.get("id"))
                if sub is None:
                    continue
                if update.get("success"):
                    sub.node_count = update.get("nodeCount")
                    if update.get("userInfo"):
                        sub.user_info = SubscriptionUserInfo.from_dict(update["userInfo"])
                    sub.status = "success"
                    success_count += 1
                else:
                    sub.status = "error"
            return {"success": True, "count": success_count}
        finally:
            for sub in enabled:
                sub.is_updating = False
            self._notify_listeners()

    # ------------------------------------------------------------------
    # Manual nodes

    def add_node(self, node: ManualNode) -> bool:
        self.manual_nodes.insert(0, node)
        self._notify_listeners()
        return self.save_data("Add node")

    def update_node(self, node: ManualNode) -> bool:
        index = _index_of(self.manual_nodes, node.id)
        if index is None:
            return False
        self.manual_nodes[index] = copy.deepcopy(node)
        self._notify_listeners()
        return self.save_data("Update node")

    def delete_node(self, node_id: str) -> bool:
        return self.batch_delete_nodes([node_id]) > 0

    def delete_all_nodes(self) -> bool:
        self.manual_nodes = []
        self._clear_profiles_field("manual_nodes")
        self._notify_listeners()
        return self.save_data("Delete all nodes")

    def add_nodes_from_bulk(self, nodes: Iterable[ManualNode]) -> bool:
        new_nodes = list(nodes)
        if not new_nodes:
            return False
        self.manual_nodes[:0] = new_nodes
        self._notify_listeners()
        return self.save_data("Bulk import nodes")

    def deduplicate_nodes(self) -> int:
        """Drop manual nodes sharing a URL (or server/port/type when URL-less).

        The first node of each group is kept.

        Returns:
            Number of nodes removed
        """
        unique: Dict[str, ManualNode] = {}
        for node in self.manual_nodes:
            key = node.url or f"{node.server}|{node.port}|{node.type}"
            unique.setdefault(key, node)
        removed = len(self.manual_nodes) - len(unique)
        if removed:
            self.manual_nodes = list(unique.values())
            logger.info("Removed %d duplicate nodes", removed)
            self._notify_listeners()
            self.save_data("Deduplicate nodes")
        return removed

    def auto_sort_nodes(self) -> bool:
        self.manual_nodes.sort(key=lambda n: (n.name or "").casefold())
        self._notify_listeners()
        return self.save_data("Sort nodes")

    def batch_delete_nodes(self, ids: Iterable[str]) -> int:
        """Delete manual nodes by ID and drop them from every profile.

        Returns:
            Number of nodes removed
        """
        id_set = set(ids)
        before = len(self.manual_nodes)
        self.manual_nodes = [n for n in self.manual_nodes if n.id not in id_set]
        removed = before - len(self.manual_nodes)
        for profile in self.profiles:
            profile.manual_nodes = [nid for nid in profile.manual_nodes if nid not in id_set]
        logger.info("Deleted %d of %d requested nodes", removed, len(id_set))
        if removed:
            self._notify_listeners()
            self.save_data("Batch delete nodes")
        return removed

    # ------------------------------------------------------------------
    # Profiles

    def add_profile(self, profile: Profile) -> bool:
        """Add a profile, generating ``id``/``custom_id`` when missing.

        The store keeps its own copy; the caller's object is not modified.
        Returns False without adding if the custom ID is already taken.
        """
        profile = copy.deepcopy(profile)
        if not profile.id:
            profile.id = str(uuid.uuid4())
        if not (profile.custom_id or "").strip():
            profile.custom_id = generate_short_id(8)
        if any(p.custom_id == profile.custom_id for p in self.profiles):
            logger.warning("Custom ID already exists: %s", profile.custom_id)
            return False

        self.profiles.insert(0, profile)
        self._notify_listeners()
        return self.save_data("Add profile")

    def update_profile(self, profile: Profile) -> bool:
        """Replace the stored profile with the same ID by a copy of ``profile``.

        A changed custom ID must be non-empty and unused by other profiles.
        """
        index = _index_of(self.profiles, profile.id)
        if index is None:
            return False
        if profile.custom_id != self.profiles[index].custom_id:
            if not (profile.custom_id or "").strip():
                logger.warning("Custom ID cannot be empty")
                return False
            if any(p.id != profile.id and p.custom_id == profile.custom_id for p in self.profiles):
                logger.warning("Custom ID already exists: %s", profile.custom_id)
                return False

        self.profiles[index] = copy.deepcopy(profile)
        self._notify_listeners()
        return self.save_data("Update profile")

    def delete_profile(self, profile_id: str) -> bool:
        return self.batch_delete_profiles([profile_id]) > 0

    def delete_all_profiles(self) -> bool:
        self.profiles = []
        self._notify_listeners()
        return self.save_data("Delete all profiles")

    def batch_delete_profiles(self, ids: Iterable[str]) -> int:
        id_set = set(ids)
        before = len(self.profiles)
        self.profiles = [p for p in self.profiles if p.id not in id_set]
        removed = before - len(self.profiles)
        logger.info("Deleted %d of %d requested profiles", removed, len(id_set))
        if removed:
            self._notify_listeners()
            self.save_data("Batch delete profiles")
        return removed

    def toggle_profile(self, profile_id: str, enabled: bool) -> bool:
        for profile in self.profiles:
            if profile.id == profile_id:
                profile.enabled = enabled
                self._notify_listeners()
                self.save_data("Toggle profile")
                return True
        return False

    def _clear_profiles_field(self, field_name: str) -> None:
        for profile in self.profiles:
            setattr(profile, field_name, [])

    # ------------------------------------------------------------------
    # Settings

    def update_config(self, data: Dict[str, Any]) -> None:
        """Overlay settings already saved through ``save_settings``."""
        self.config.merge(data)
        self._notify_listeners()
