from pathlib import Path
from typing import Any, Dict, Optional


class CMError(Exception):
    """Base exception class for the Campaign Monitor adapter."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

class ConfigError(CMError):
    """Raised when there is an error in a configuration file or setting."""
    pass

class CapabilityNotFoundError(CMError):
    """Raised when no implementation file exists for a capability."""

    def __init__(self, capability: str, expected_path: Path, message: Optional[str] = None):
        message = message or f"File {Path(expected_path).name} does not exist in {expected_path}"
        super().__init__(message, {"capability": capability, "expected_path": str(expected_path)})
        self.capability = capability
        self.expected_path = Path(expected_path)

class ImplementationNotFoundError(CapabilityNotFoundError):
    """Raised when a capability file exists but does not define the implementation."""

    def __init__(self, capability: str, implementation: str, expected_path: Path):
        super().__init__(
            capability,
            expected_path,
            f"Implementation '{implementation}' is not defined by {expected_path}",
        )
        self.implementation = implementation
        self.details["implementation"] = implementation

class UnknownOperationError(CMError):
    """Raised when a capability client is asked for an operation it does not expose."""
    pass

class CacheError(CMError):
    """Base class for cache store failures."""
    pass

class CacheReadError(CacheError):
    """Raised when a live cache entry cannot be deserialized."""
    pass

class CacheWriteError(CacheError):
    """Raised when a cache entry cannot be persisted."""
    pass

class CacheLockTimeout(CacheWriteError):
    """Raised when the write lock for a cache entry is not acquired in time."""
    pass

class TransportError(CMError):
    """Raised by a transport when the remote operation fails."""
    pass
