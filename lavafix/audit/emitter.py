"""
Notification Emitter

DESIGN DECISION: Every mutation of the ledger is recorded.
This provides:
1. A history the owner can read in the Notificaciones tab
2. Debugging capability
3. A structured log line for every change

The emitter:
- Prepends (newest first), never removes
- Writes the whole notification collection through after each entry
- Gracefully handles storage failures (doesn't crash the app if saving fails)
"""

from datetime import datetime
from decimal import Decimal
from typing import Optional

import structlog

from lavafix.models.notification import (
    Notification,
    NotificationBuilder,
    NotificationType,
)
from lavafix.services.storage import (
    CollectionKey,
    LedgerStorageInterface,
    StorageError,
)


# Configure structlog for local logging
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.processors.JSONRenderer()
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)


class NotificationEmitter:
    """
    Central notification service.

    Records notifications both to:
    1. Structured local log (for debugging)
    2. The notifications collection (for persistence and user visibility)
    """

    def __init__(
        self,
        storage: Optional[LedgerStorageInterface] = None,
        notifications: Optional[list[Notification]] = None,
        currency_symbol: str = "Q",
    ):
        """
        Initialize the emitter.

        Args:
            storage: Storage backend for persistence.
                    If None, notifications are only kept in memory and logged.
            notifications: Previously loaded notifications, newest first.
            currency_symbol: Symbol used in payment messages.
        """
        self._storage = storage
        self._notifications: list[Notification] = list(notifications or [])
        self._currency_symbol = currency_symbol
        self._logger = structlog.get_logger()

    @property
    def notifications(self) -> list[Notification]:
        """All notifications, newest first."""
        return list(self._notifications)

    def emit(self, notification: Notification) -> bool:
        """
        Record a notification.

        Always logs locally. Persists to storage if available.

        Returns True if storage write succeeded (or no storage configured).
        """
        self._notifications.insert(0, notification)

        log_dict = notification.to_log_dict()
        if notification.type == NotificationType.WARNING:
            self._logger.warning("notification", **log_dict)
        else:
            self._logger.info("notification", **log_dict)

        if self._storage:
            try:
                self._storage.save(
                    CollectionKey.NOTIFICATIONS,
                    [n.to_record() for n in self._notifications],
                )
            except StorageError as e:
                # Log failure but don't raise
                self._logger.error(
                    "notification_storage_failed",
                    error=str(e),
                    notification_id=notification.id,
                )
                return False

        return True

    def client_added(self, name: str, timestamp: datetime) -> None:
        """Record a new client."""
        self.emit(NotificationBuilder.client_added(name, timestamp))

    def client_updated(self, name: str, timestamp: datetime) -> None:
        """Record a client profile edit."""
        self.emit(NotificationBuilder.client_updated(name, timestamp))

    def client_removed(self, timestamp: datetime) -> None:
        """Record a client delete."""
        self.emit(NotificationBuilder.client_removed(timestamp))

    def payment_received(
        self,
        client_name: str,
        amount: Decimal,
        timestamp: datetime,
    ) -> None:
        """Record a payment."""
        self.emit(
            NotificationBuilder.payment_received(
                client_name=client_name,
                amount=amount,
                timestamp=timestamp,
                currency_symbol=self._currency_symbol,
            )
        )

    def status_corrected(self, name: str, timestamp: datetime) -> None:
        """Record an undone payment."""
        self.emit(NotificationBuilder.status_corrected(name, timestamp))

    def month_reset(self, timestamp: datetime) -> None:
        """Record a month reset."""
        self.emit(NotificationBuilder.month_reset(timestamp))

    def payment_updated(self, timestamp: datetime) -> None:
        """Record a history edit."""
        self.emit(NotificationBuilder.payment_updated(timestamp))

    def payment_removed(self, timestamp: datetime) -> None:
        """Record a history delete."""
        self.emit(NotificationBuilder.payment_removed(timestamp))
