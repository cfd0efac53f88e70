"""
Dependency Container

The app factory registers the lifecycle manager, share service and their
collaborators here once; API routes and Celery tasks look them up by type.
"""

import logging
import threading
from typing import Any, Dict, Type, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class DependencyNotFoundError(LookupError):
    """No instance is registered for the requested type."""


class DependencyContainer:
    """
    Type-keyed registry of shared instances.

    ``override`` swaps an instance for tests without touching the original
    registration; ``clear_overrides`` restores it.
    """

    def __init__(self):
        self._instances: Dict[Type, Any] = {}
        self._overrides: Dict[Type, Any] = {}
        self._lock = threading.Lock()

    def register_singleton(self, interface: Type[T], implementation: T) -> None:
        with self._lock:
            self._instances[interface] = implementation
        logger.debug(f"Registered {interface.__name__} -> {type(implementation).__name__}")

    def resolve(self, interface: Type[T]) -> T:
        """
        Look up the instance registered for ``interface``.

        Raises:
            DependencyNotFoundError: If nothing is registered for it
        """
        with self._lock:
            for registry in (self._overrides, self._instances):
                if interface in registry:
                    return registry[interface]
        raise DependencyNotFoundError(f"{interface.__name__} is not registered")

    def override(self, interface: Type[T], implementation: T) -> None:
        with self._lock:
            self._overrides[interface] = implementation

    def clear_overrides(self) -> None:
        with self._lock:
            self._overrides.clear()

    def is_registered(self, interface: Type) -> bool:
        with self._lock:
            return interface in self._overrides or interface in self._instances

    def __len__(self) -> int:
        with self._lock:
            return len(self._instances)
