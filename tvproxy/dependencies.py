"""
Dependency Injection Configuration

The lifespan handler registers the configured services here and route
handlers receive them through FastAPI dependencies, so tests can register
stub services without touching the network.
"""
import logging
from typing import Any, TypeVar

from fastapi import HTTPException

from tvproxy.config import CustomSettings
from tvproxy.services.proxy_service import ProxyService


logger = logging.getLogger(__name__)

T = TypeVar('T')


class ServiceLocator:
    """
    Simple service locator for managing application services.

    Provides a centralized place to access configured services throughout the application.
    """

    def __init__(self):
        """Initialize the service locator."""
        self._singletons: dict[type, Any] = {}

    def register_singleton(self, service_type: type[T], instance: T) -> None:
        """
        Register a singleton service instance.

        Args:
            service_type: The service interface/type
            instance: The concrete instance to use
        """
        self._singletons[service_type] = instance
        logger.debug(f"Registered singleton: {service_type.__name__}")

    def get(self, service_type: type[T]) -> T:
        """
        Get a service instance.

        Raises:
            KeyError: If service type is not registered
        """
        if service_type not in self._singletons:
            raise KeyError(f"Service {service_type.__name__} not registered in container")
        return self._singletons[service_type]

    def is_registered(self, service_type: type) -> bool:
        return service_type in self._singletons


# Global service locator instance
_service_locator: ServiceLocator | None = None


def get_service_locator() -> ServiceLocator:
    """
    Get the global service locator instance.

    Returns:
        The global ServiceLocator
    """
    global _service_locator
    if _service_locator is None:
        _service_locator = ServiceLocator()
    return _service_locator


def reset_service_locator() -> None:
    """
    Reset the service locator (mainly for testing).

    WARNING: Only use this in test environments!
    """
    global _service_locator
    _service_locator = None


def _require(service_type: type[T]) -> T:
    try:
        return get_service_locator().get(service_type)
    except KeyError:
        logger.error(f"{service_type.__name__} requested before startup completed")
        raise HTTPException(status_code=503, detail="Service is not ready")


def get_proxy_service() -> ProxyService:
    """FastAPI dependency returning the configured ProxyService."""
    return _require(ProxyService)


def get_app_settings() -> CustomSettings:
    """FastAPI dependency returning the loaded settings."""
    return _require(CustomSettings)
