"""
Main Orchestrator for LavaFix

Ties the components together for the dashboard:
1. Persistence gateway (picked from settings)
2. Ledger store + billing state machine on top of it
3. Backup exporter
4. Service assistant (optional - needs a Gemini key)

The store is created once and handed to everything that needs it.
"""

from typing import NamedTuple, Optional

import structlog

from lavafix.agents import ServiceAssistant
from lavafix.config import AppSettings, get_settings
from lavafix.export import BackupExporter
from lavafix.ledger import BillingStateMachine, LedgerStore
from lavafix.services.storage import (
    GoogleSheetsClient,
    GoogleSheetsLedgerStorage,
    InMemoryStorage,
    JsonFileStorage,
    LedgerStorageInterface,
)


logger = structlog.get_logger()


class AppComponents(NamedTuple):
    store: LedgerStore
    billing: BillingStateMachine
    exporter: BackupExporter
    assistant: Optional[ServiceAssistant]


def create_storage(settings: AppSettings) -> LedgerStorageInterface:
    """
    Build the persistence gateway named by settings.storage_backend.

    Falls back to in-memory storage if the configured backend cannot
    even be constructed (e.g. Sheets credentials missing).
    """
    if settings.storage_backend == "memory":
        return InMemoryStorage()

    if settings.storage_backend == "sheets":
        try:
            return GoogleSheetsLedgerStorage(GoogleSheetsClient())
        except Exception as e:
            # Storage not configured - continue without it
            logger.warning("storage_not_configured", backend="sheets", error=str(e))
            return InMemoryStorage()

    return JsonFileStorage(settings.data_dir)


def create_assistant() -> Optional[ServiceAssistant]:
    """Build the assistant, or None if Gemini is not configured."""
    try:
        return ServiceAssistant()
    except Exception as e:
        logger.warning("assistant_not_configured", error=str(e))
        return None


def create_app_components(
    settings: Optional[AppSettings] = None,
    storage: Optional[LedgerStorageInterface] = None,
    use_assistant: bool = True,
) -> AppComponents:
    """
    Factory function to create all application components.

    Args:
        settings: App settings; loaded from the environment if None.
        storage: Explicit gateway; overrides settings.storage_backend.
        use_assistant: Whether to initialize the Gemini assistant.

    Returns:
        AppComponents(store, billing, exporter, assistant)
    """
    settings = settings or get_settings().app
    storage = storage or create_storage(settings)

    store = LedgerStore(storage, settings=settings)
    return AppComponents(
        store=store,
        billing=BillingStateMachine(store),
        exporter=BackupExporter(settings),
        assistant=create_assistant() if use_assistant else None,
    )
