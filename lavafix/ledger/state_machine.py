"""
Billing Status State Machine

States:
    Pendiente - the client owes this month's fee
    Pagado    - the client paid this month's fee

Transitions:
    record_payment  Pendiente -> Pagado   (adds a payment record)
    undo_payment    Pagado    -> Pendiente (removes the latest payment record)
    reset_month     any       -> Pendiente (history untouched)

Neither record_payment nor undo_payment checks the current state.
Paying an already paid client records a second payment; undoing a
pending client still removes its latest payment, if any.

reset_month keeps last_payment_date while undo_payment clears it.
Both behaviours are kept exactly as the business has always seen them.
"""

from typing import Optional

from lavafix.ledger.store import LedgerStore
from lavafix.models import (
    ClientStatus,
    MonthResetPreview,
    PaymentRecord,
    UndoPreview,
)


class BillingStateMachine:
    """Status transitions of clients, layered on the ledger store."""

    def __init__(self, store: LedgerStore):
        self._store = store

    def record_payment(
        self,
        client_id: str,
        notes: Optional[str] = None,
    ) -> Optional[PaymentRecord]:
        """
        Mark a client as paid and record the payment.

        The amount is always the client's monthly fee and the client
        name is snapshotted into the record.

        Returns:
            The new payment record, or None if the client is unknown
        """
        client = self._store.get_client(client_id)
        if client is None:
            return None

        now = self._store.now()
        payment = PaymentRecord(
            client_id=client.id,
            client_name=client.name,
            amount=client.monthly_amount,
            date=now,
            notes=notes or None,
        )

        self._store.put_client(
            client.model_copy(
                update={
                    "status": ClientStatus.PAGADO,
                    "last_payment_date": now,
                }
            )
        )
        self._store.insert_payment(payment)
        self._store.emitter.payment_received(
            client_name=payment.client_name,
            amount=payment.amount,
            timestamp=now,
        )
        return payment

    def _latest_payment(self, client_id: str) -> Optional[PaymentRecord]:
        payments = self._store.payments_for(client_id)
        if not payments:
            return None
        # max() keeps the first of several equal dates
        return max(payments, key=lambda p: p.date)

    def preview_undo_payment(self, client_id: str) -> Optional[UndoPreview]:
        """What undo_payment would do. No side effects."""
        client = self._store.get_client(client_id)
        if client is None:
            return None
        return UndoPreview(
            client=client,
            payment_to_remove=self._latest_payment(client_id),
        )

    def undo_payment(self, client_id: str) -> Optional[UndoPreview]:
        """
        Revert a client to Pendiente and remove its most recent payment.

        If the client has no payments, only the status changes.

        Returns:
            What was done, or None if the client is unknown
        """
        preview = self.preview_undo_payment(client_id)
        if preview is None:
            return None

        client = preview.client
        self._store.put_client(
            client.model_copy(
                update={
                    "status": ClientStatus.PENDIENTE,
                    "last_payment_date": None,
                }
            )
        )
        if preview.payment_to_remove is not None:
            self._store.discard_payment(preview.payment_to_remove.id)

        self._store.emitter.status_corrected(client.name, self._store.now())
        return preview

    def preview_reset_month(self) -> MonthResetPreview:
        """Which clients a month reset would touch. No side effects."""
        clients = self._store.clients
        return MonthResetPreview(
            clients=clients,
            paid_clients=[c for c in clients if c.status == ClientStatus.PAGADO],
        )

    def reset_month(self) -> MonthResetPreview:
        """
        Start a new billing cycle: every client goes back to Pendiente.

        Payment history and last_payment_date are left as they are.
        """
        preview = self.preview_reset_month()
        self._store.put_clients(
            [
                c.model_copy(update={"status": ClientStatus.PENDIENTE})
                for c in preview.clients
            ]
        )
        self._store.emitter.month_reset(self._store.now())
        return preview
