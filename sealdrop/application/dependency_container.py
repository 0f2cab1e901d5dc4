"""
Dependency Injection Container

Manages service lifecycles and dependency resolution.
"""

import logging
import threading
from typing import Any, Dict, List, Optional, Type, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar('T')


class DependencyNotFoundError(Exception):
    """Raised when attempting to resolve an unregistered dependency."""
    pass


class DependencyContainer:
    """
    Dependency injection container for managing service lifecycles.

    Holds singleton registrations plus test overrides. Thread-safe for
    concurrent access.
    """

    def __init__(self):
        """Initialize the dependency container."""
        self._singletons: Dict[Type, Any] = {}
        self._overrides: Dict[Type, Any] = {}
        self._lock = threading.Lock()

        logger.debug("DependencyContainer initialized")

    def register_singleton(self, interface: Type[T], implementation: T) -> None:
        """
        Register a singleton service (single instance shared across all resolutions).

        Args:
            interface: The interface or class type to register
            implementation: The concrete instance to use

        Example:
            container.register_singleton(AccessGate, gate)
        """
        with self._lock:
            self._singletons[interface] = implementation
            logger.debug(f"Registered singleton: {interface.__name__}")

    def resolve(self, interface: Type[T]) -> T:
        """
        Resolve a registered service.

        Args:
            interface: The interface or class type to resolve

        Returns:
            The resolved service instance

        Raises:
            DependencyNotFoundError: If the interface is not registered

        Example:
            share_service = container.resolve(ShareService)
        """
        with self._lock:
            # Overrides win (used by tests)
            if interface in self._overrides:
                return self._overrides[interface]

            if interface in self._singletons:
                return self._singletons[interface]

            raise DependencyNotFoundError(
                f"No registration found for type: {interface.__name__}"
            )

    def override(self, interface: Type[T], implementation: T) -> None:
        """
        Override a registered service (primarily for testing).

        Overrides take precedence over singleton registrations.
        """
        with self._lock:
            self._overrides[interface] = implementation
            logger.debug(f"Overridden: {interface.__name__}")

    def clear_overrides(self) -> None:
        """Clear all overrides."""
        with self._lock:
            self._overrides.clear()
            logger.debug("Cleared all overrides")

    def is_registered(self, interface: Type) -> bool:
        """
        Check if an interface is registered.

        Returns:
            True if registered as a singleton or overridden
        """
        with self._lock:
            return (
                interface in self._singletons or
                interface in self._overrides
            )

    @property
    def singleton_count(self) -> int:
        with self._lock:
            return len(self._singletons)

    def setup_event_handlers(
        self, event_publisher, event_handler_classes: Optional[List[Type]] = None
    ) -> None:
        """
        Subscribe infrastructure event handlers to the event publisher.

        Args:
            event_publisher: EventPublisher instance to subscribe handlers to
            event_handler_classes: Handler classes to instantiate and register.
                                   If None, registers LoggingEventHandler.
        """
        from sealdrop.domain.events import DomainEvent
        from sealdrop.infrastructure.event_handlers.logging_handler import LoggingEventHandler

        if event_handler_classes is None:
            event_handler_classes = [LoggingEventHandler]

        for handler_class in event_handler_classes:
            try:
                if handler_class is LoggingEventHandler:
                    handler = handler_class(logging.getLogger("sealdrop.events"))
                else:
                    handler = handler_class()

                # handle() dispatches on the concrete event type
                event_publisher.subscribe(DomainEvent, handler.handle)
                logger.debug(f"Registered event handler: {handler_class.__name__}")
            except Exception as e:
                # Don't fail initialization if event handler setup fails
                logger.error(f"Failed to register event handler {handler_class.__name__}: {e}")
                continue
