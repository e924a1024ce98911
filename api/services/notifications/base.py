# api/services/notifications/base.py
"""
Notification capability interface.

The reminder scheduler only needs three things from whatever delivers
notifications: register a delivery for a future time, report deliveries
and taps back, and (optionally) withdraw a registration.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Callable, Dict

# callback(payload) with the payload given to schedule_at
DeliveryCallback = Callable[[Dict[str, Any]], None]


class NotificationRegistrationError(Exception):
    """Raised when a delivery cannot be registered."""
    pass


@dataclass
class NotificationContent:
    title: str
    body: str
    payload: Dict[str, Any] = field(default_factory=dict)


class NotificationCapability(ABC):

    @abstractmethod
    def schedule_at(self, when: datetime, content: NotificationContent) -> str:
        """
        Register a delivery at `when`.

        Returns:
            Registration id

        Raises:
            NotificationRegistrationError: delivery was refused
        """

    @abstractmethod
    def on_delivery_or_tap(self, callback: DeliveryCallback) -> Callable[[], None]:
        """
        Subscribe to deliveries and taps.

        Returns:
            Function that removes the subscription
        """

    @abstractmethod
    def withdraw(self, registration_id: str) -> bool:
        """Cancel a registered delivery that has not fired yet."""
