import logging
from typing import Any, Dict, List, Optional

import requests

from core.data_models import ApiResponse

logger = logging.getLogger(__name__)


class APIClientError(Exception):
    """Raised when the client itself is misconfigured."""
    pass


class SubOneAPIClient:
    """HTTP client for the Sub-One admin backend.

    Session cookies set by ``login`` are kept on the underlying
    ``requests.Session`` and sent with every later call.
    """

    def __init__(self, base_url: str, timeout: float = 15.0, session: Optional[requests.Session] = None):
        if not base_url:
            raise APIClientError("base_url is required")
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.update({"Content-Type": "application/json"})

    def _url(self, path: str) -> str:
        return f"{self.base_url}{path}"

    def _post(self, path: str, payload: Any) -> requests.Response:
        return self.session.post(self._url(path), json=payload, timeout=self.timeout)

    def _get(self, path: str) -> requests.Response:
        return self.session.get(self._url(path), timeout=self.timeout)

    @staticmethod
    def _error_message(response: requests.Response) -> str:
        try:
            error_data = response.json()
        except ValueError:
            error_data = {}
        if not isinstance(error_data, dict):
            error_data = {}
        return error_data.get("message") or error_data.get("error") or f"Server error ({response.status_code})"

    def _post_for_response(self, path: str, payload: Any, action: str) -> ApiResponse:
        try:
            response = self._post(path, payload)
            if not response.ok:
                message = self._error_message(response)
                logger.error(f"{action} failed: {response.status_code} - {message}")
                return ApiResponse(success=False, message=message)
            data = response.json()
            if not isinstance(data, dict):
                logger.error(f"{action} returned unexpected payload: {type(data).__name__}")
                return ApiResponse(success=False, message="Invalid server response")
            return ApiResponse.from_dict(data)
        except requests.RequestException as e:
            logger.error(f"{action} error: {e}")
            return ApiResponse(success=False, message=f"Network request failed: {e}")
        except ValueError as e:
            logger.error(f"{action} returned invalid JSON: {e}")
            return ApiResponse(success=False, message="Invalid server response")

    # ------------------------------------------------------------------
    # Authentication

    def check_system_status(self) -> bool:
        """Return True if the backend has no admin user yet."""
        try:
            response = self._get("/api/system/status")
            if not response.ok:
                return False
            return bool(response.json().get("needsSetup", False))
        except (requests.RequestException, ValueError, AttributeError) as e:
            logger.error(f"System status check error: {e}")
            return False

    def login(self, username: str, password: str) -> bool:
        try:
            response = self._post("/api/login", {"username": username, "password": password})
            if not response.ok:
                logger.error(f"Login failed: {response.status_code} - {self._error_message(response)}")
                return False
            logger.info("Login successful")
            return True
        except requests.RequestException as e:
            logger.error(f"Login error: {e}")
            return False

    def logout(self) -> bool:
        try:
            return self._post("/api/logout", {}).ok
        except requests.RequestException as e:
            logger.error(f"Logout error: {e}")
            return False

    # ------------------------------------------------------------------
    # Data

    def fetch_initial_data(self) -> Optional[Dict[str, Any]]:
        """Fetch ``{"subs", "profiles", "config"}`` or None on failure."""
        try:
            response = self._get("/api/data")
            if not response.ok:
                logger.error(f"Session invalid or API error: {response.status_code}")
                return None
            data = response.json()
            if not isinstance(data, dict):
                logger.error(f"Unexpected initial data payload: {type(data).__name__}")
                return None
            logger.info(f"Loaded {len(data.get('subs') or [])} subs and "
                        f"{len(data.get('profiles') or [])} profiles")
            return data
        except (requests.RequestException, ValueError) as e:
            logger.error(f"Fetch initial data error: {e}")
            return None

    def save_subs(self, subs: List[Dict[str, Any]], profiles: List[Dict[str, Any]]) -> ApiResponse:
        if not isinstance(subs, list) or not isinstance(profiles, list):
            return ApiResponse(success=False, message="subs and profiles must be lists")
        return self._post_for_response("/api/subs", {"subs": subs, "profiles": profiles}, "Save subs")

    def fetch_settings(self) -> Dict[str, Any]:
        try:
            response = self._get("/api/settings")
            if not response.ok:
                return {}
            data = response.json()
            if not isinstance(data, dict):
                logger.error(f"Unexpected settings payload: {type(data).__name__}")
                return {}
            return data
        except (requests.RequestException, ValueError) as e:
            logger.error(f"Fetch settings error: {e}")
            return {}

    def save_settings(self, settings: Dict[str, Any]) -> ApiResponse:
        return self._post_for_response("/api/settings", settings, "Save settings")

    def save_all_data(
        self,
        subs: List[Dict[str, Any]],
        profiles: List[Dict[str, Any]],
        config: Dict[str, Any],
    ) -> ApiResponse:
        """Save subs/profiles then settings, returning the first failure."""
        subs_result = self.save_subs(subs, profiles)
        if not subs_result.success:
            return subs_result
        settings_result = self.save_settings(config)
        if not settings_result.success:
            return settings_result
        return ApiResponse(success=True, message="Data saved")

    # ------------------------------------------------------------------
    # Nodes

    def fetch_node_count(self, sub_url: str) -> Optional[Dict[str, Any]]:
        """Return ``{"count", "userInfo"}`` for a subscription URL, None on failure."""
        try:
            response = self._post("/api/node_count", {"url": sub_url})
            if not response.ok:
                logger.error(f"Fetch node count failed: {response.status_code} - {self._error_message(response)}")
                return None
            data = response.json()
            if not isinstance(data, dict):
                logger.error(f"Unexpected node count payload: {type(data).__name__}")
                return None
            return {"count": int(data.get("count", 0)), "userInfo": data.get("userInfo")}
        except (requests.RequestException, ValueError, TypeError) as e:
            logger.error(f"Fetch node count error for {sub_url}: {e}")
            return None

    def batch_update_nodes(self, subscription_ids: List[str]) -> ApiResponse:
        return self._post_for_response(
            "/api/batch_update_nodes",
            {"subscriptionIds": list(subscription_ids)},
            "Batch update nodes",
        )

    def close(self) -> None:
        """Close HTTP session"""
        self.session.close()
