"""Capability client base class and the transport protocol it delegates to."""
from abc import ABC
from typing import Any, Callable, ClassVar, FrozenSet, Optional, Protocol

from core.errors import TransportError, UnknownOperationError
from core.logging import get_logger

logger = get_logger("capabilities")

HTTP = "http"
HTTPS = "https"


def scheme_for(secure: bool) -> str:
    return HTTPS if secure else HTTP


class Transport(Protocol):
    """Performs one remote operation and returns its structured result.

    Implementations raise TransportError on failure.
    """

    def perform(
        self,
        operation: str,
        resource_id: Optional[str],
        api_key: str,
        scheme: str,
        payload: Optional[Any] = None,
    ) -> Any:
        ...


class NullTransport:
    """Transport used until a real one is supplied; every call fails."""

    def perform(self, operation, resource_id, api_key, scheme, payload=None):
        raise TransportError(
            f"No transport configured for operation '{operation}'",
            {"operation": operation, "resource_id": resource_id},
        )


def operation(func: Callable) -> Callable:
    """Marks a CapabilityClient method as a dispatchable operation."""
    func._cm_operation = True
    return func


class CapabilityClient(ABC):
    """Base class for one capability (campaigns, lists, ...) of the remote API.

    Subclasses declare their operations with ``@operation``; the collected
    names form the closed operation table the dispatcher routes against.
    """

    capability: ClassVar[str] = ""
    operations: ClassVar[FrozenSet[str]] = frozenset()

    def __init_subclass__(cls, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)
        names = set()
        for klass in reversed(cls.__mro__):
            for name, attr in vars(klass).items():
                if getattr(attr, "_cm_operation", False):
                    names.add(name)
        cls.operations = frozenset(names)

    def __init__(
        self,
        api_key: str,
        resource_id: Optional[str] = None,
        scheme: str = HTTP,
        transport: Optional[Transport] = None,
    ) -> None:
        self.api_key = api_key
        self.resource_id = resource_id
        self.scheme = scheme
        self.transport: Transport = transport or NullTransport()

    def __repr__(self) -> str:
        return f"{type(self).__name__}(resource_id={self.resource_id!r}, scheme={self.scheme!r})"

    def supports(self, name: str) -> bool:
        return name in self.operations

    def call(self, name: str, *args: Any, **kwargs: Any) -> Any:
        """Invoke operation *name*; raises UnknownOperationError if not exposed."""
        if name not in self.operations:
            raise UnknownOperationError(
                f"'{self.capability}' does not expose operation '{name}'",
                {"capability": self.capability, "operation": name},
            )
        return getattr(self, name)(*args, **kwargs)

    def perform(self, name: str, payload: Optional[Any] = None) -> Any:
        """Send ``<capability>.<name>`` through the transport."""
        qualified = f"{self.capability}.{name}"
        logger.debug(f"Performing {qualified} (resource_id={self.resource_id})")
        return self.transport.perform(qualified, self.resource_id, self.api_key, self.scheme, payload)
