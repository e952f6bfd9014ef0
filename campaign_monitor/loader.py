"""Loads capability implementations from ``csrest_<capability>.py`` files.

The base path plays the role of an API distribution directory: a capability is
available when its file exists there.  The file is imported once per loader;
implementations are resolved as attributes of that file and then through the
capability registry, which files populate with ``@register_capability``.
"""
import hashlib
import importlib.util
import sys
from pathlib import Path
from types import ModuleType
from typing import Any, Callable, Dict, Optional, Union

from core.errors import CapabilityNotFoundError, ImplementationNotFoundError
from core.logging import get_logger

from .registry import CapabilityRegistry, get_registry

__all__ = ["CapabilityLoader", "CAPABILITY_FILE_TEMPLATE"]

logger = get_logger("loader")

CAPABILITY_FILE_TEMPLATE = "csrest_{capability}.py"


class CapabilityLoader:
    """Builds fresh capability client instances by name."""

    def __init__(self, base_path: Union[str, Path], registry: Optional[CapabilityRegistry] = None):
        self.base_path = base_path
        self.registry = registry or get_registry()
        self._modules: Dict[Path, ModuleType] = {}

    @property
    def base_path(self) -> Path:
        return self._base_path

    @base_path.setter
    def base_path(self, value: Union[str, Path]) -> None:
        self._base_path = Path(value)

    def resolve_path(self, capability: str) -> Path:
        return self._base_path / CAPABILITY_FILE_TEMPLATE.format(capability=capability)

    def load(self, capability: str, implementation: Union[str, Callable[..., Any]], *args: Any, **kwargs: Any) -> Any:
        """
        Construct a new instance of *implementation* for *capability*.

        Args:
            capability: Capability name, e.g. "campaigns" for csrest_campaigns.py
            implementation: Registered identifier / attribute name, or the class itself
            *args, **kwargs: Forwarded to the constructor as given

        Raises:
            CapabilityNotFoundError: the capability file does not exist
            ImplementationNotFoundError: the file does not provide *implementation*
        """
        path = self.resolve_path(capability)
        if not path.is_file():
            raise CapabilityNotFoundError(capability, path)

        module = self._import(path)
        factory = self._resolve_factory(capability, implementation, module, path)

        if not args and not kwargs:
            return factory()
        return factory(*args, **kwargs)

    # ------------------------------------------------------------------
    def _import(self, path: Path) -> ModuleType:
        key = path.resolve()
        module = self._modules.get(key)
        if module is not None:
            return module

        digest = hashlib.md5(str(key).encode("utf-8")).hexdigest()[:8]
        module_name = f"_cm_capability_{path.stem}_{digest}"
        spec = importlib.util.spec_from_file_location(module_name, key)
        if spec is None or spec.loader is None:
            raise CapabilityNotFoundError(path.stem, path, f"Cannot import capability file {path}")
        module = importlib.util.module_from_spec(spec)
        sys.modules[module_name] = module
        try:
            spec.loader.exec_module(module)
        except Exception:
            sys.modules.pop(module_name, None)
            raise
        self._modules[key] = module
        logger.debug(f"Imported capability file {path}")
        return module

    def _resolve_factory(
        self,
        capability: str,
        implementation: Union[str, Callable[..., Any]],
        module: ModuleType,
        path: Path,
    ) -> Callable[..., Any]:
        if callable(implementation):
            return implementation

        # The file's own definition wins over aliases registered by other base paths.
        factory = getattr(module, implementation, None)
        if factory is None:
            factory = self.registry.get(capability, implementation)
        if factory is None or not callable(factory):
            raise ImplementationNotFoundError(capability, implementation, path)
        return factory
