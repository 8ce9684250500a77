"""
Lifecycle interfaces for long-lived components such as the notification
transport.

These interfaces give the application factory a consistent way to stop
components and report their health.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict


class IStoppable(ABC):
    """Interface for components that can be stopped."""

    @abstractmethod
    async def stop(self) -> None:
        """
        Stop the component gracefully.

        This method should release any resources held by the component,
        cancelling outstanding background work.
        """
        pass


class IHealthCheckable(ABC):
    """Interface for components that can report their health status."""

    @abstractmethod
    async def check_health(self) -> Dict[str, Any]:
        """
        Check the health status of the component.

        Returns:
            Dict containing health information with at least:
            - 'healthy': bool indicating if component is healthy
            - 'status': str describing current status
            - 'details': Dict with additional health details
        """
        pass
