"""Factory registry for capability implementations."""
from typing import Any, Callable, Dict, List, Optional
from datetime import datetime
from pydantic import BaseModel, Field

from core.logging import get_logger

logger = get_logger("registry")


class RegisteredCapability(BaseModel):
    """A registered implementation factory with metadata."""
    capability: str
    implementation: str
    factory: Callable[..., Any]
    registered_at: datetime = Field(default_factory=datetime.now)
    description: Optional[str] = None


class CapabilityRegistry:
    """Registry mapping (capability, implementation) to a constructor."""

    def __init__(self):
        self._factories: Dict[str, Dict[str, RegisteredCapability]] = {}

    def register(
        self,
        capability: str,
        factory: Callable[..., Any],
        implementation: Optional[str] = None,
        description: Optional[str] = None,
    ) -> Callable[..., Any]:
        """
        Register a factory for a capability.

        Args:
            capability: Capability name, e.g. "campaigns"
            factory: Class or callable building the client
            implementation: Optional identifier (defaults to the factory's __name__)
            description: Optional description (defaults to the factory's docstring)

        Returns:
            The factory, unchanged
        """
        implementation = implementation or factory.__name__
        description = description or (factory.__doc__ or "").strip() or None

        implementations = self._factories.setdefault(capability, {})
        if implementation in implementations:
            logger.debug(f"Replaced implementation '{implementation}' for capability '{capability}'")
        else:
            logger.debug(f"Registered implementation '{implementation}' for capability '{capability}'")
        implementations[implementation] = RegisteredCapability(
            capability=capability,
            implementation=implementation,
            factory=factory,
            description=description,
        )
        return factory

    def get(self, capability: str, implementation: str) -> Optional[Callable[..., Any]]:
        """Get the factory for an implementation, or None if not registered."""
        registered = self._factories.get(capability, {}).get(implementation)
        return registered.factory if registered else None

    def has(self, capability: str, implementation: str) -> bool:
        return self.get(capability, implementation) is not None

    def list_capabilities(self) -> List[str]:
        """List all capabilities with at least one implementation."""
        return sorted(self._factories)

    def list_implementations(self, capability: str) -> List[str]:
        return sorted(self._factories.get(capability, {}))

    def get_info(self, capability: str) -> Optional[Dict[str, Any]]:
        """Get detailed information about a capability's implementations."""
        if capability not in self._factories:
            return None
        return {
            "capability": capability,
            "implementations": [
                {
                    "implementation": r.implementation,
                    "description": r.description,
                    "registered_at": r.registered_at.isoformat(),
                }
                for r in self._factories[capability].values()
            ],
        }


# Global registry instance
_registry = CapabilityRegistry()


def get_registry() -> CapabilityRegistry:
    """Get the global capability registry instance."""
    return _registry


def register_capability(capability: str, implementation: Optional[str] = None):
    """Class decorator registering an implementation in the global registry."""
    def decorator(factory):
        _registry.register(capability, factory, implementation)
        return factory
    return decorator
