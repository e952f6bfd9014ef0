"""Caching dispatcher in front of the Campaign Monitor capability clients.

``CampaignMonitor`` holds exactly one active capability client (the
"general" client right after construction) and routes every
``invoke(name, ...)`` either to one of its built-in operations or to that
client.  Client calls whose name is not excluded are served from, and
written to, the file cache.

By default the cache key is the method name alone, so the same method called
with different arguments, or against a different selected client, returns the
first cached result until it expires.  Pass ``key_scope="call"`` to key on the
capability, resource id and arguments instead.
"""
import hashlib
import json
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from core.config import DEFAULT_CAPABILITY_PATH, DEFAULT_EXCLUSIONS, Config, get_settings
from core.errors import CacheWriteError
from core.logging import get_logger
from core.metrics import CACHE_HITS, CACHE_MISSES, CACHE_WRITE_FAILURES, DISPATCHED_CALLS

from .cache import FileCache
from .capabilities import CapabilityClient, NullTransport, Transport, scheme_for
from .loader import CapabilityLoader
from .registry import CapabilityRegistry

__all__ = ["CampaignMonitor", "UNKNOWN_OPERATION", "BUILTIN_OPERATIONS", "KEY_SCOPES"]

logger = get_logger("dispatcher")

KEY_SCOPES = ("method", "call")

BUILTIN_OPERATIONS = (
    "general",
    "client",
    "lists",
    "campaign",
    "load_arbitrary",
    "get_api_key",
    "set_api_key",
    "get_base_path",
    "set_base_path",
    "set_cache_options",
    "get_cache_location",
    "set_cache_location",
    "get_cache_length",
    "set_cache_length",
    "add_cache_exclusion",
    "get_exclusions",
    "get_objects",
)


class _UnknownOperation:
    """Falsy result returned by invoke() for operations nobody exposes."""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "UNKNOWN_OPERATION"


UNKNOWN_OPERATION = _UnknownOperation()


class CampaignMonitor:
    """Uniform, cached call surface over the selected capability client."""

    def __init__(
        self,
        api_key: str,
        base_path: Optional[Union[str, Path]] = None,
        secure: bool = False,
        *,
        cache: Optional[FileCache] = None,
        transport: Optional[Transport] = None,
        registry: Optional[CapabilityRegistry] = None,
        exclusions: Optional[List[str]] = None,
        key_scope: str = "method",
    ) -> None:
        if key_scope not in KEY_SCOPES:
            raise ValueError(f"key_scope must be one of {KEY_SCOPES}, got {key_scope!r}")
        self._api_key = api_key
        self._loader = CapabilityLoader(base_path or DEFAULT_CAPABILITY_PATH, registry)
        self._cache = cache or FileCache()
        self._transport: Transport = transport or NullTransport()
        self._exclusions: List[str] = list(DEFAULT_EXCLUSIONS if exclusions is None else exclusions)
        self.key_scope = key_scope
        self._campaign: Optional[CapabilityClient] = None
        self._capability: Optional[str] = None
        self._builtins = {name: getattr(self, name) for name in BUILTIN_OPERATIONS}

        self.general(secure)

    @classmethod
    def from_settings(cls, settings: Optional[Config] = None, transport: Optional[Transport] = None) -> "CampaignMonitor":
        """Build a dispatcher from environment/.env/YAML configuration.

        Logging is left to the caller; entry points run ``setup_logging`` with
        ``settings.app.LOG_LEVEL`` and ``settings.app.LOG_DIR``.
        """
        settings = settings or get_settings()
        cache = FileCache(
            settings.cache_location,
            settings.cache_ttl,
            lock_timeout=settings.app.CM_CACHE_LOCK_TIMEOUT,
        )
        return cls(
            settings.app.CM_API_KEY,
            settings.base_path,
            settings.app.CM_SECURE,
            cache=cache,
            transport=transport,
            exclusions=settings.cache.exclusions,
            key_scope=settings.app.CM_CACHE_KEY_SCOPE,
        )

    # ------------------------------------------------------------------
    # Dispatch
    # ------------------------------------------------------------------
    def invoke(self, method_name: str, *args: Any, **kwargs: Any) -> Any:
        """
        Call *method_name*, serving it from the cache when possible.

        Built-in operations run directly and are never cached.  Any other
        name is looked up in the cache first (unless excluded), then
        dispatched to the active client, and the result is cached.

        Returns:
            The operation result, or UNKNOWN_OPERATION if neither the
            dispatcher nor the active client exposes *method_name*.

        Raises:
            CacheReadError: a live cache entry is corrupt.
            TransportError: the active client's transport failed.
        """
        builtin = self._builtins.get(method_name)
        if builtin is not None:
            return builtin(*args, **kwargs)

        cacheable = self._cache.enabled and method_name not in self._exclusions
        cache_key = self._cache_key(method_name, args, kwargs) if cacheable else None

        if cacheable:
            entry = self._cache.lookup(cache_key)
            if entry is not None:
                CACHE_HITS.labels(method=method_name).inc()
                logger.debug(f"Cache hit for '{method_name}'")
                return entry.payload
            CACHE_MISSES.labels(method=method_name).inc()

        active = self._campaign
        if active is None or not active.supports(method_name):
            logger.warning(f"Unknown operation '{method_name}' for capability '{self._capability}'")
            return UNKNOWN_OPERATION

        result = active.call(method_name, *args, **kwargs)
        DISPATCHED_CALLS.labels(capability=self._capability, operation=method_name).inc()

        if cacheable:
            try:
                self._cache.put(cache_key, result)
            except CacheWriteError as exc:
                CACHE_WRITE_FAILURES.labels(method=method_name).inc()
                logger.warning(f"Could not cache result of '{method_name}': {exc}")

        return result

    def supports(self, method_name: str) -> bool:
        """True if invoke(method_name) would reach a built-in or the active client."""
        if method_name in self._builtins:
            return True
        return self._campaign is not None and self._campaign.supports(method_name)

    def _cache_key(self, method_name: str, args: tuple, kwargs: Dict[str, Any]) -> str:
        if self.key_scope == "method":
            return method_name
        arguments = json.dumps([list(args), kwargs], sort_keys=True, default=repr)
        digest = hashlib.sha256(arguments.encode("utf-8")).hexdigest()
        resource_id = self._campaign.resource_id if self._campaign is not None else None
        return f"{self._capability}:{resource_id}:{method_name}:{digest}"

    # ------------------------------------------------------------------
    # Capability selection
    # ------------------------------------------------------------------
    def general(self, secure: bool = False) -> CapabilityClient:
        return self._select("general", "General", None, secure)

    def client(self, client_id: str, secure: bool = False) -> CapabilityClient:
        if client_id is None:
            raise ValueError("client_id is required")
        return self._select("clients", "Clients", client_id, secure)

    def lists(self, list_id: Optional[str] = None, secure: bool = False) -> CapabilityClient:
        return self._select("lists", "Lists", list_id, secure)

    def campaign(self, campaign_id: Optional[str] = None, secure: bool = False) -> CapabilityClient:
        return self._select("campaigns", "Campaigns", campaign_id, secure)

    def load_arbitrary(
        self,
        capability: str,
        implementation: Any,
        resource_id: Optional[str] = None,
        secure: bool = False,
    ) -> CapabilityClient:
        """Select any capability file under the base path, e.g. ("subscribers", "Subscribers", list_id)."""
        return self._select(capability, implementation, resource_id, secure)

    def _select(self, capability: str, implementation: Any, resource_id: Optional[str], secure: bool) -> CapabilityClient:
        # A failing load leaves the current client in place.
        instance = self._loader.load(
            capability,
            implementation,
            self._api_key,
            resource_id,
            scheme_for(secure),
            transport=self._transport,
        )
        self._campaign = instance
        self._capability = capability
        logger.info(f"Selected capability '{capability}' (resource_id={resource_id}, secure={secure})")
        return instance

    def get_objects(self) -> Optional[CapabilityClient]:
        """Return the active capability client."""
        return self._campaign

    @property
    def active_capability(self) -> Optional[str]:
        return self._capability

    # ------------------------------------------------------------------
    # Settings
    # ------------------------------------------------------------------
    def set_api_key(self, key: str) -> None:
        """Set the API key used by subsequent selections."""
        self._api_key = key

    def get_api_key(self) -> str:
        return self._api_key

    def set_base_path(self, path: Union[str, Path]) -> None:
        self._loader.base_path = path

    def get_base_path(self) -> Path:
        return self._loader.base_path

    def set_cache_options(self, location: Union[str, Path], length: int) -> None:
        self._cache.configure(location, length)

    def set_cache_location(self, directory: Union[str, Path]) -> None:
        self._cache.location = directory

    def get_cache_location(self) -> Optional[Path]:
        return self._cache.location

    def set_cache_length(self, length: int) -> None:
        self._cache.ttl = length

    def get_cache_length(self) -> int:
        return self._cache.ttl

    def add_cache_exclusion(self, method: str) -> None:
        if method not in self._exclusions:
            self._exclusions.append(method)

    def get_exclusions(self) -> List[str]:
        return list(self._exclusions)

    @property
    def cache(self) -> FileCache:
        return self._cache
