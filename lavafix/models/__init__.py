"""
Data Models Package

This package contains all Pydantic models used in the LavaFix ledger.
All data flowing through the system must conform to these schemas.
"""

from lavafix.models.ledger import (
    Client,
    ClientDeletionPreview,
    ClientDraft,
    ClientPatch,
    ClientStatus,
    LedgerModel,
    LocalDatetime,
    MonthResetPreview,
    PaymentPatch,
    PaymentRecord,
    UndoPreview,
    new_id,
)
from lavafix.models.notification import (
    Notification,
    NotificationBuilder,
    NotificationType,
    format_amount,
)

__all__ = [
    # Ledger models
    "Client",
    "ClientDeletionPreview",
    "ClientDraft",
    "ClientPatch",
    "ClientStatus",
    "LedgerModel",
    "LocalDatetime",
    "MonthResetPreview",
    "PaymentPatch",
    "PaymentRecord",
    "UndoPreview",
    "new_id",
    # Notification models
    "Notification",
    "NotificationBuilder",
    "NotificationType",
    "format_amount",
]
