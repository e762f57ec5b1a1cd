"""Core data structures for the Sub-One console.

Contains the list item models, app configuration and API response wrapper
shared by the API client, data store and list views. Conversion helpers
map the backend's camelCase JSON onto snake_case attributes.
"""
import re
from dataclasses import dataclass, field
from typing import Any, ClassVar, Dict, List, Optional, Tuple

HTTP_REGEX = re.compile(r"^https?://", re.IGNORECASE)


def is_http_url(url: Optional[str]) -> bool:
    """True for http:// and https:// URLs."""
    return bool(url) and bool(HTTP_REGEX.match(url))


@dataclass
class SubscriptionUserInfo:
    """Traffic and expiry figures reported by a subscription provider."""
    upload: Optional[int] = None
    download: Optional[int] = None
    total: Optional[int] = None
    expire: Optional[int] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SubscriptionUserInfo":
        return cls(
            upload=data.get("upload"),
            download=data.get("download"),
            total=data.get("total"),
            expire=data.get("expire"),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {k: v for k, v in {
            "upload": self.upload,
            "download": self.download,
            "total": self.total,
            "expire": self.expire,
        }.items() if v is not None}


def _extra_keys(data: Dict[str, Any], known: Tuple[str, ...]) -> Dict[str, Any]:
    return {k: v for k, v in data.items() if k not in known}


@dataclass
class Subscription:
    """A remote subscription link that expands into many proxy nodes.

    Backend keys without a matching attribute are kept in ``extra`` and
    written back unchanged by ``to_dict``.
    """
    id: str
    name: str
    url: str
    enabled: bool = True
    node_count: Optional[int] = None
    user_info: Optional[SubscriptionUserInfo] = None
    status: str = "unchecked"  # "unchecked", "checking", "success", "error"
    error_msg: Optional[str] = None
    is_updating: bool = False
    exclude: Optional[str] = None
    ua: Optional[str] = None
    extra: Dict[str, Any] = field(default_factory=dict)

    KEYS: ClassVar[Tuple[str, ...]] = (
        "id", "name", "url", "enabled", "nodeCount", "userInfo",
        "status", "errorMsg", "isUpdating", "exclude", "ua",
    )

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Subscription":
        user_info = data.get("userInfo")
        return cls(
            id=str(data.get("id", "")),
            name=data.get("name", ""),
            url=data.get("url", ""),
            enabled=data.get("enabled", True),
            node_count=data.get("nodeCount"),
            user_info=SubscriptionUserInfo.from_dict(user_info) if user_info else None,
            status=data.get("status", "unchecked"),
            error_msg=data.get("errorMsg"),
            exclude=data.get("exclude"),
            ua=data.get("ua"),
            extra=_extra_keys(data, cls.KEYS),
        )

    def to_dict(self) -> Dict[str, Any]:
        data = dict(self.extra)
        data.update({
            "id": self.id,
            "name": self.name,
            "url": self.url,
            "enabled": self.enabled,
            "status": self.status,
        })
        if self.node_count is not None:
            data["nodeCount"] = self.node_count
        if self.user_info is not None:
            data["userInfo"] = self.user_info.to_dict()
        if self.error_msg:
            data["errorMsg"] = self.error_msg
        if self.exclude:
            data["exclude"] = self.exclude
        if self.ua:
            data["ua"] = self.ua
        return data


@dataclass
class ManualNode:
    """A single proxy node entered by hand (share link or raw config).

    Protocol settings (``password``, ``uuid``, ``cipher``, ``sni``,
    ``originalProxy`` ...) live in ``extra``.
    """
    id: str
    name: str
    url: str = ""
    enabled: bool = True
    server: Optional[str] = None
    port: Optional[int] = None
    type: Optional[str] = None
    group: Optional[str] = None
    extra: Dict[str, Any] = field(default_factory=dict)

    KEYS: ClassVar[Tuple[str, ...]] = ("id", "name", "url", "enabled", "server", "port", "type", "group")

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ManualNode":
        return cls(
            id=str(data.get("id", "")),
            name=data.get("name", ""),
            url=data.get("url") or "",
            enabled=data.get("enabled", True),
            server=data.get("server"),
            port=data.get("port"),
            type=data.get("type"),
            group=data.get("group"),
            extra=_extra_keys(data, cls.KEYS),
        )

    def to_dict(self) -> Dict[str, Any]:
        data = dict(self.extra)
        data.update({
            "id": self.id,
            "name": self.name,
            "url": self.url,
            "enabled": self.enabled,
        })
        for key in ("server", "port", "type", "group"):
            value = getattr(self, key)
            if value is not None:
                data[key] = value
        return data


@dataclass
class Profile:
    """A named group of subscriptions and manual nodes served under one link."""
    id: str
    name: str
    enabled: bool = True
    subscriptions: List[str] = field(default_factory=list)
    manual_nodes: List[str] = field(default_factory=list)
    custom_id: Optional[str] = None
    expires_at: Optional[str] = None
    type: Optional[str] = None
    extra: Dict[str, Any] = field(default_factory=dict)

    KEYS: ClassVar[Tuple[str, ...]] = (
        "id", "name", "enabled", "subscriptions", "manualNodes", "customId", "expiresAt", "type",
    )

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Profile":
        return cls(
            id=str(data.get("id", "")),
            name=data.get("name", ""),
            enabled=data.get("enabled", True),
            subscriptions=list(data.get("subscriptions") or []),
            manual_nodes=list(data.get("manualNodes") or []),
            custom_id=data.get("customId"),
            expires_at=data.get("expiresAt"),
            type=data.get("type"),
            extra=_extra_keys(data, cls.KEYS),
        )

    def to_dict(self) -> Dict[str, Any]:
        data = dict(self.extra)
        data.update({
            "id": self.id,
            "name": self.name,
            "enabled": self.enabled,
            "subscriptions": list(self.subscriptions),
            "manualNodes": list(self.manual_nodes),
        })
        if self.custom_id:
            data["customId"] = self.custom_id
        if self.expires_at:
            data["expiresAt"] = self.expires_at
        if self.type:
            data["type"] = self.type
        return data


_CONFIG_KEYS = {
    "mytoken": "mytoken",
    "profile_token": "profileToken",
    "file_name": "FileName",
    "udp": "udp",
    "skip_cert_verify": "skipCertVerify",
    "prepend_sub_name": "prependSubName",
    "dedupe": "dedupe",
    "notify_threshold_days": "NotifyThresholdDays",
    "notify_threshold_percent": "NotifyThresholdPercent",
}


@dataclass
class AppConfig:
    """Global console settings. Unknown backend keys are kept in ``extra``."""
    mytoken: str = "auto"
    profile_token: str = ""
    file_name: str = "Sub-One"
    udp: bool = False
    skip_cert_verify: bool = False
    prepend_sub_name: bool = False
    dedupe: bool = False
    notify_threshold_days: int = 3
    notify_threshold_percent: int = 90
    extra: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "AppConfig":
        config = cls()
        config.merge(data)
        return config

    def merge(self, data: Dict[str, Any]) -> None:
        """Overlay backend settings onto the current values."""
        known = {v: k for k, v in _CONFIG_KEYS.items()}
        for key, value in data.items():
            if key in known:
                setattr(self, known[key], value)
            else:
                self.extra[key] = value

    def to_dict(self) -> Dict[str, Any]:
        data = dict(self.extra)
        for attr, key in _CONFIG_KEYS.items():
            data[key] = getattr(self, attr)
        return data


@dataclass
class ApiResponse:
    """Uniform result of a backend call."""
    success: bool
    message: str = ""
    data: Any = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ApiResponse":
        return cls(
            success=bool(data.get("success", False)),
            message=data.get("message") or data.get("error") or "",
            data=data.get("data", data.get("results")),
        )
