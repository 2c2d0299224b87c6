"""
Notification Models for LavaFix

Every mutation of the ledger leaves a notification behind.
This provides:
1. A visible history of what happened to clients and payments
2. Debugging information when totals look wrong
3. Ability to reconstruct the sequence of changes

DESIGN DECISION: Notifications are append-only. We never delete or modify them.
"""

from datetime import datetime
from decimal import Decimal
from enum import Enum

from pydantic import Field

from lavafix.models.ledger import LedgerModel, LocalDatetime, new_id


class NotificationType(str, Enum):
    """Visual category of a notification."""
    INFO = "info"
    SUCCESS = "success"
    WARNING = "warning"


class Notification(LedgerModel):
    """
    A single audit entry.

    Notifications do not reference the entity they describe; the
    message text is all that survives.
    """

    id: str = Field(
        default_factory=new_id,
        description="Unique notification identifier"
    )
    title: str = Field(
        ...,
        description="Short title"
    )
    message: str = Field(
        ...,
        description="Human-readable description of what happened"
    )
    type: NotificationType = Field(
        default=NotificationType.INFO,
        description="Notification category"
    )
    timestamp: LocalDatetime = Field(
        default_factory=datetime.now,
        description="When the change happened"
    )

    def to_log_dict(self) -> dict:
        """
        Convert to a dictionary suitable for structured logging.
        """
        return {
            "notification_id": self.id,
            "timestamp": self.timestamp.isoformat(),
            "type": self.type.value,
            "title": self.title,
            "message": self.message,
        }


def format_amount(amount: Decimal, currency_symbol: str = "Q") -> str:
    """Render an amount the way it is shown to users (Q150.00)."""
    return f"{currency_symbol}{amount:.2f}"


class NotificationBuilder:
    """
    Helper class to build the fixed notifications of each ledger operation.

    Usage:
        notification = NotificationBuilder.client_added("Ana", now)
        notification = NotificationBuilder.payment_received("Ana", amount, now)
    """

    @staticmethod
    def client_added(name: str, timestamp: datetime) -> Notification:
        return Notification(
            title="Nuevo Cliente",
            message=f"{name} ha sido agregado.",
            type=NotificationType.SUCCESS,
            timestamp=timestamp,
        )

    @staticmethod
    def client_updated(name: str, timestamp: datetime) -> Notification:
        return Notification(
            title="Cliente Actualizado",
            message=f"Se actualizaron los datos de {name}",
            type=NotificationType.INFO,
            timestamp=timestamp,
        )

    @staticmethod
    def client_removed(timestamp: datetime) -> Notification:
        return Notification(
            title="Cliente Eliminado",
            message="El cliente y sus datos han sido eliminados por completo.",
            type=NotificationType.WARNING,
            timestamp=timestamp,
        )

    @staticmethod
    def payment_received(
        client_name: str,
        amount: Decimal,
        timestamp: datetime,
        currency_symbol: str = "Q",
    ) -> Notification:
        return Notification(
            title="Pago Recibido",
            message=(
                f"Pago de {format_amount(amount, currency_symbol)} "
                f"recibido de {client_name}."
            ),
            type=NotificationType.SUCCESS,
            timestamp=timestamp,
        )

    @staticmethod
    def status_corrected(name: str, timestamp: datetime) -> Notification:
        return Notification(
            title="Estado Corregido",
            message=f"{name} ha vuelto a estado Pendiente.",
            type=NotificationType.INFO,
            timestamp=timestamp,
        )

    @staticmethod
    def month_reset(timestamp: datetime) -> Notification:
        return Notification(
            title="Mes Reiniciado",
            message="Todos los estados han sido reseteados a Pendiente.",
            type=NotificationType.INFO,
            timestamp=timestamp,
        )

    @staticmethod
    def payment_updated(timestamp: datetime) -> Notification:
        return Notification(
            title="Registro Actualizado",
            message="El historial de pago ha sido modificado.",
            type=NotificationType.INFO,
            timestamp=timestamp,
        )

    @staticmethod
    def payment_removed(timestamp: datetime) -> Notification:
        return Notification(
            title="Registro Eliminado",
            message="El registro ha sido eliminado del historial.",
            type=NotificationType.WARNING,
            timestamp=timestamp,
        )
