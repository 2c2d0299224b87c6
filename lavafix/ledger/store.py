"""
Ledger Store

DESIGN DECISION: The store is an explicit object holding the three
ledger collections and the persistence gateway they come from.
It is constructed once and passed to everything that reads or
changes the ledger. There is no hidden, process-wide state.

GUARANTEES:
- Every mutation writes the affected collection(s) through before returning
- Every mutation leaves exactly one notification behind
- Deleting a client never leaves orphaned payments
- Bad input or unknown ids are skipped silently (None is returned)

Destructive operations come in pairs: preview_* tells the caller what
would be removed, the plain method commits unconditionally. Asking the
user for confirmation is the caller's job.
"""

from datetime import datetime
from typing import Callable, Optional, TypeVar

import structlog
from pydantic import ValidationError

from lavafix.audit import NotificationEmitter
from lavafix.config import AppSettings, get_settings
from lavafix.models import (
    Client,
    ClientDeletionPreview,
    ClientDraft,
    ClientPatch,
    ClientStatus,
    LedgerModel,
    Notification,
    PaymentPatch,
    PaymentRecord,
    new_id,
)
from lavafix.services.storage import (
    CollectionKey,
    LedgerStorageInterface,
    StorageError,
)


ModelT = TypeVar("ModelT", bound=LedgerModel)


class LedgerStore:
    """
    Holds clients, payments and notifications.

    Collections are loaded once at construction. A collection that
    cannot be loaded starts out empty; the failure is logged only.
    """

    def __init__(
        self,
        storage: LedgerStorageInterface,
        settings: Optional[AppSettings] = None,
        clock: Callable[[], datetime] = datetime.now,
    ):
        """
        Initialize the store.

        Args:
            storage: Persistence gateway for all three collections
            settings: App settings (default fee, currency symbol)
            clock: Source of "now"; injectable for tests
        """
        self._storage = storage
        self._settings = settings or get_settings().app
        self._clock = clock
        self._logger = structlog.get_logger()

        self._clients: list[Client] = self._load(CollectionKey.CLIENTS, Client)
        self._payments: list[PaymentRecord] = self._load(
            CollectionKey.PAYMENTS, PaymentRecord
        )
        self.emitter = NotificationEmitter(
            storage=storage,
            notifications=self._load(CollectionKey.NOTIFICATIONS, Notification),
            currency_symbol=self._settings.currency_symbol,
        )

    # -------------------------------------------------------------------------
    # Loading and committing
    # -------------------------------------------------------------------------

    def _load(self, key: CollectionKey, model: type[ModelT]) -> list[ModelT]:
        try:
            records = self._storage.load(key)
            return [model.model_validate(record) for record in records]
        except (StorageError, ValidationError) as e:
            self._logger.error(
                "ledger_load_failed",
                collection=key.value,
                error=str(e),
            )
            return []

    def _commit(self, key: CollectionKey) -> None:
        """Write one collection through. Save failures are logged, not raised."""
        entities = {
            CollectionKey.CLIENTS: self._clients,
            CollectionKey.PAYMENTS: self._payments,
        }[key]
        try:
            self._storage.save(key, [entity.to_record() for entity in entities])
        except StorageError as e:
            self._logger.error(
                "ledger_save_failed",
                collection=key.value,
                error=str(e),
            )

    def now(self) -> datetime:
        return self._clock()

    # -------------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------------

    @property
    def settings(self) -> AppSettings:
        return self._settings

    @property
    def clients(self) -> list[Client]:
        """Clients in insertion order."""
        return list(self._clients)

    @property
    def payments(self) -> list[PaymentRecord]:
        """Payment history, newest first."""
        return list(self._payments)

    @property
    def notifications(self) -> list[Notification]:
        """Notifications, newest first."""
        return self.emitter.notifications

    def get_client(self, client_id: str) -> Optional[Client]:
        for client in self._clients:
            if client.id == client_id:
                return client
        return None

    def get_payment(self, payment_id: str) -> Optional[PaymentRecord]:
        for payment in self._payments:
            if payment.id == payment_id:
                return payment
        return None

    def payments_for(self, client_id: str) -> list[PaymentRecord]:
        return [p for p in self._payments if p.client_id == client_id]

    # -------------------------------------------------------------------------
    # Low-level writes (used by the state machine; no notifications)
    # -------------------------------------------------------------------------

    def put_client(self, client: Client) -> None:
        """Replace a stored client (matched by id) and commit."""
        self._clients = [client if c.id == client.id else c for c in self._clients]
        self._commit(CollectionKey.CLIENTS)

    def put_clients(self, clients: list[Client]) -> None:
        """Replace the whole client collection and commit."""
        self._clients = list(clients)
        self._commit(CollectionKey.CLIENTS)

    def insert_payment(self, payment: PaymentRecord) -> None:
        """Prepend a payment (newest first) and commit."""
        self._payments.insert(0, payment)
        self._commit(CollectionKey.PAYMENTS)

    def discard_payment(self, payment_id: str) -> None:
        """Remove exactly one payment by id and commit."""
        self._payments = [p for p in self._payments if p.id != payment_id]
        self._commit(CollectionKey.PAYMENTS)

    # -------------------------------------------------------------------------
    # Clients
    # -------------------------------------------------------------------------

    def add_client(self, draft: ClientDraft) -> Optional[Client]:
        """
        Add a new client.

        A draft without name or primary phone is skipped: nothing is
        stored and no notification is emitted.

        Returns:
            The new client, or None if the draft was skipped
        """
        if not draft.is_complete:
            return None

        existing_ids = {c.id for c in self._clients}
        client_id = new_id()
        while client_id in existing_ids:
            client_id = new_id()

        # A blank or zero fee falls back to the default
        monthly_amount = draft.monthly_amount or self._settings.default_monthly_amount

        now = self.now()
        client = Client(
            id=client_id,
            name=draft.name,
            phone1=draft.phone1,
            phone2=draft.phone2 or None,
            monthly_amount=monthly_amount,
            status=ClientStatus.PENDIENTE,
            created_at=now,
            image=draft.image or None,
        )

        self._clients.append(client)
        self._commit(CollectionKey.CLIENTS)
        self.emitter.client_added(client.name, now)
        return client

    def update_client(self, client_id: str, patch: ClientPatch) -> Optional[Client]:
        """
        Apply a profile patch to a client.

        Fields set on the patch overwrite, the rest are kept. A patch that
        would leave the client invalid (e.g. blank name) is skipped.

        Returns:
            The updated client, or None if the id is unknown or the patch was skipped
        """
        client = self.get_client(client_id)
        if client is None:
            return None

        try:
            updated = Client.model_validate({**client.model_dump(), **patch.changes()})
        except ValidationError as e:
            self._logger.info(
                "client_update_skipped",
                client_id=client_id,
                error=str(e),
            )
            return None

        self.put_client(updated)
        self.emitter.client_updated(updated.name, self.now())
        return updated

    def preview_delete_client(self, client_id: str) -> Optional[ClientDeletionPreview]:
        """What delete_client would remove. No side effects."""
        client = self.get_client(client_id)
        if client is None:
            return None
        return ClientDeletionPreview(
            client=client,
            payments=self.payments_for(client_id),
        )

    def delete_client(self, client_id: str) -> Optional[ClientDeletionPreview]:
        """
        Remove a client and every payment that references it.

        Returns:
            What was removed, or None if the id is unknown
        """
        removed = self.preview_delete_client(client_id)
        if removed is None:
            return None

        self._clients = [c for c in self._clients if c.id != client_id]
        self._payments = [p for p in self._payments if p.client_id != client_id]
        self._commit(CollectionKey.CLIENTS)
        self._commit(CollectionKey.PAYMENTS)
        self.emitter.client_removed(self.now())
        return removed

    # -------------------------------------------------------------------------
    # Payment history
    # -------------------------------------------------------------------------

    def update_payment(
        self,
        payment_id: str,
        patch: PaymentPatch,
    ) -> Optional[PaymentRecord]:
        """
        Edit a history entry (amount, date, notes).

        client_id and client_name are never touched.
        """
        payment = self.get_payment(payment_id)
        if payment is None:
            return None

        try:
            updated = PaymentRecord.model_validate(
                {**payment.model_dump(), **patch.changes()}
            )
        except ValidationError as e:
            self._logger.info(
                "payment_update_skipped",
                payment_id=payment_id,
                error=str(e),
            )
            return None

        self._payments = [updated if p.id == payment_id else p for p in self._payments]
        self._commit(CollectionKey.PAYMENTS)
        self.emitter.payment_updated(self.now())
        return updated

    def preview_delete_payment(self, payment_id: str) -> Optional[PaymentRecord]:
        """The history entry delete_payment would remove. No side effects."""
        return self.get_payment(payment_id)

    def delete_payment(self, payment_id: str) -> Optional[PaymentRecord]:
        """
        Remove a history entry.

        The client's status is left alone; use undo_payment on the
        state machine to also revert the status.
        """
        payment = self.get_payment(payment_id)
        if payment is None:
            return None

        self.discard_payment(payment_id)
        self.emitter.payment_removed(self.now())
        return payment
