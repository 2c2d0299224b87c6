"""Audit trail package."""

from lavafix.audit.emitter import NotificationEmitter

__all__ = ["NotificationEmitter"]
