"""Outbound messaging package."""

from lavafix.messaging.reminders import (
    ReminderLink,
    build_reminder_message,
    build_whatsapp_link,
    first_pending_reminder,
)

__all__ = [
    "ReminderLink",
    "build_reminder_message",
    "build_whatsapp_link",
    "first_pending_reminder",
]
