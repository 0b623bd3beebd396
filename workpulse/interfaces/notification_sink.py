"""
Notification sink interface.

Where breach notifications go (mail, chat, log) is outside the core.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from workpulse.models.kpi import ThresholdBreachNotification


class INotificationSink(ABC):
    """Receives threshold breach notification events."""

    @abstractmethod
    async def send(self, notification: ThresholdBreachNotification) -> None:
        """Deliver one notification. Raising leaves the value unnotified."""
        pass
