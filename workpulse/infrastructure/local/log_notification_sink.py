"""
Notification sink that writes breach notifications to the application log.
"""

from __future__ import annotations

from workpulse.core.logger import setup_logger
from workpulse.interfaces.notification_sink import INotificationSink
from workpulse.models.enums import BreachSeverity
from workpulse.models.kpi import ThresholdBreachNotification

notification_logger = setup_logger("workpulse.notifications")


class LoggingNotificationSink(INotificationSink):
    """Local sink: CRITICAL breaches log at error level, WARNING at warning level."""

    def __init__(self):
        self.sent_count = 0

    async def send(self, notification: ThresholdBreachNotification) -> None:
        unit = f" {notification.unit}" if notification.unit else ""
        message = (
            f"KPI threshold alert: {notification.severity.value} - "
            f"Project: {notification.project_name}, "
            f"KPI: {notification.metric_name} ({notification.metric_code}), "
            f"Value: {notification.value}{unit}, "
            f"Measured: {notification.measurement_date.isoformat()}"
        )
        if notification.severity == BreachSeverity.CRITICAL:
            notification_logger.error(message)
        else:
            notification_logger.warning(message)
        self.sent_count += 1
