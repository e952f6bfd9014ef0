"""Caching dispatcher for the Campaign Monitor v3 API.

The sub-modules are layered leaves first: ``cache`` (file-backed TTL store),
``loader`` / ``registry`` (capability construction by name) and
``dispatcher`` (the ``CampaignMonitor`` call surface).
"""

from __future__ import annotations

from .cache import CacheEntry, FileCache
from .capabilities import CapabilityClient, NullTransport, Transport, operation
from .dispatcher import CampaignMonitor, UNKNOWN_OPERATION
from .loader import CapabilityLoader
from .registry import CapabilityRegistry, get_registry, register_capability

__all__ = [
    "CacheEntry",
    "FileCache",
    "CapabilityClient",
    "NullTransport",
    "Transport",
    "operation",
    "CampaignMonitor",
    "UNKNOWN_OPERATION",
    "CapabilityLoader",
    "CapabilityRegistry",
    "get_registry",
    "register_capability",
]
