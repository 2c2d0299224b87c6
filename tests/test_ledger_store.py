"""Tests for the ledger store: client CRUD, history edits, persistence."""

import pytest
from datetime import datetime
from decimal import Decimal

from lavafix.ledger import LedgerStore
from lavafix.models import (
    ClientDraft,
    ClientPatch,
    ClientStatus,
    NotificationType,
    PaymentPatch,
)
from lavafix.services.storage import (
    CollectionKey,
    InMemoryStorage,
    StorageError,
)


class FailingLoadStorage(InMemoryStorage):
    """Storage whose reads always fail."""

    def load(self, key):
        raise StorageError("disk on fire")


class FailingSaveStorage(InMemoryStorage):
    """Storage whose writes always fail."""

    def save(self, key, records):
        raise StorageError("disk full")


class TestAddClient:
    """Tests for add_client."""

    def test_add_client_starts_pending(self, store, clock):
        """Test a new client is Pendiente and timestamped."""
        client = store.add_client(ClientDraft(name="Ana", phone1="5551234"))
        assert client.status == ClientStatus.PENDIENTE
        assert client.created_at == datetime(2025, 3, 1, 9, 0)
        assert store.clients == [client]

    def test_add_client_ids_are_unique(self, store):
        """Test every client gets an id distinct from existing ids."""
        ids = {
            store.add_client(ClientDraft(name=f"C{i}", phone1=str(i))).id
            for i in range(1, 30)
        }
        assert len(ids) == 29

    def test_add_client_uses_default_fee(self, store):
        """Test a draft without fee gets the configured default."""
        client = store.add_client(ClientDraft(name="Ana", phone1="5551234"))
        assert client.monthly_amount == Decimal("150")

    def test_add_client_zero_fee_takes_default(self, store):
        """Test a zero fee is replaced by the default, like a blank one."""
        client = store.add_client(
            ClientDraft(name="Ana", phone1="5551234", monthly_amount=Decimal("0"))
        )
        assert client.monthly_amount == Decimal("150")

    def test_add_client_emits_notification(self, store):
        """Test adding a client leaves a success notification."""
        store.add_client(ClientDraft(name="Ana", phone1="5551234"))
        notification = store.notifications[0]
        assert notification.title == "Nuevo Cliente"
        assert notification.message == "Ana ha sido agregado."
        assert notification.type == NotificationType.SUCCESS

    @pytest.mark.parametrize("draft", [
        ClientDraft(name="", phone1="5551234"),
        ClientDraft(name="Ana", phone1=""),
        ClientDraft(name="   ", phone1="   "),
    ])
    def test_add_client_without_required_fields_is_skipped(self, store, storage, draft):
        """Test missing name or phone1 is a silent no-op."""
        assert store.add_client(draft) is None
        assert store.clients == []
        assert store.notifications == []
        assert storage.save_count == 0


class TestUpdateClient:
    """Tests for update_client."""

    def test_patch_overwrites_present_fields_only(self, store, ana):
        """Test fields in the patch overwrite, absent ones are kept."""
        updated = store.update_client(
            ana.id, ClientPatch(name="Ana María", monthly_amount=Decimal("175"))
        )
        assert updated.name == "Ana María"
        assert updated.monthly_amount == Decimal("175")
        assert updated.phone1 == ana.phone1
        assert updated.created_at == ana.created_at
        assert store.get_client(ana.id) == updated

    def test_patch_cannot_touch_status(self, store, billing, ana):
        """Test a profile edit leaves billing state alone."""
        billing.record_payment(ana.id)
        updated = store.update_client(ana.id, ClientPatch(phone2="4444"))
        assert updated.status == ClientStatus.PAGADO
        assert updated.last_payment_date is not None

    def test_update_unknown_client_is_noop(self, store, ana):
        """Test an unknown id changes nothing."""
        before = store.notifications
        assert store.update_client("missing", ClientPatch(name="X")) is None
        assert store.notifications == before

    def test_patch_blanking_name_is_skipped(self, store, ana):
        """Test a patch that would blank the name is skipped."""
        assert store.update_client(ana.id, ClientPatch(name="")) is None
        assert store.get_client(ana.id).name == "Ana"

    def test_update_emits_notification(self, store, ana):
        """Test editing emits a Cliente Actualizado entry."""
        store.update_client(ana.id, ClientPatch(name="Ana María"))
        assert store.notifications[0].title == "Cliente Actualizado"
        assert store.notifications[0].message == "Se actualizaron los datos de Ana María"

    def test_rename_does_not_touch_payment_snapshot(self, store, billing, ana):
        """Test payment client_name is a snapshot."""
        payment = billing.record_payment(ana.id)
        store.update_client(ana.id, ClientPatch(name="Ana María"))
        assert store.get_payment(payment.id).client_name == "Ana"


class TestDeleteClient:
    """Tests for the two-step client delete."""

    def test_preview_has_no_side_effects(self, store, billing, ana):
        """Test previewing lists the cascade without deleting anything."""
        billing.record_payment(ana.id)
        preview = store.preview_delete_client(ana.id)
        assert preview.client.id == ana.id
        assert preview.payment_count == 1
        assert store.get_client(ana.id) is not None
        assert len(store.payments) == 1

    def test_delete_cascades_to_payments(self, store, billing, ana, beto):
        """Test deleting a client removes every payment referencing it."""
        billing.record_payment(ana.id)
        billing.record_payment(ana.id)
        beto_payment = billing.record_payment(beto.id)

        removed = store.delete_client(ana.id)

        assert removed.payment_count == 2
        assert store.get_client(ana.id) is None
        assert all(p.client_id != ana.id for p in store.payments)
        assert store.payments == [beto_payment]

    def test_delete_emits_warning(self, store, ana):
        """Test deleting emits a warning notification."""
        store.delete_client(ana.id)
        assert store.notifications[0].title == "Cliente Eliminado"
        assert store.notifications[0].type == NotificationType.WARNING

    def test_delete_unknown_client_is_noop(self, store, ana):
        """Test an unknown id deletes nothing."""
        assert store.preview_delete_client("missing") is None
        assert store.delete_client("missing") is None
        assert len(store.clients) == 1


class TestPaymentHistoryEdits:
    """Tests for direct history edits and deletes."""

    def test_update_payment(self, store, billing, ana):
        """Test amount, date and notes can be edited."""
        payment = billing.record_payment(ana.id)
        new_date = datetime(2025, 2, 28, 18, 0)
        updated = store.update_payment(
            payment.id,
            PaymentPatch(amount=Decimal("120"), date=new_date, notes="descuento"),
        )
        assert updated.amount == Decimal("120")
        assert updated.date == new_date
        assert updated.notes == "descuento"
        assert updated.client_name == "Ana"
        assert store.notifications[0].title == "Registro Actualizado"

    def test_update_unknown_payment_is_noop(self, store):
        """Test an unknown payment id is skipped."""
        assert store.update_payment("missing", PaymentPatch(notes="x")) is None

    def test_delete_payment_keeps_status(self, store, billing, ana):
        """Test deleting a history row does not revert the client."""
        payment = billing.record_payment(ana.id)
        assert store.preview_delete_payment(payment.id) == payment

        store.delete_payment(payment.id)

        assert store.payments == []
        assert store.get_client(ana.id).status == ClientStatus.PAGADO
        assert store.notifications[0].title == "Registro Eliminado"


class TestPersistence:
    """Tests for write-through persistence and tolerant loading."""

    def test_every_mutation_is_written_through(self, storage, store, billing, settings):
        """Test a fresh store sees everything the previous one did."""
        client = store.add_client(ClientDraft(name="Ana", phone1="5551234"))
        billing.record_payment(client.id, "efectivo")

        reloaded = LedgerStore(storage, settings=settings)

        assert reloaded.clients == store.clients
        assert reloaded.payments == store.payments
        assert reloaded.notifications == store.notifications

    def test_load_failure_falls_back_to_empty(self, settings):
        """Test a failing gateway load yields empty collections."""
        store = LedgerStore(FailingLoadStorage(), settings=settings)
        assert store.clients == []
        assert store.payments == []
        assert store.notifications == []

    def test_invalid_records_fall_back_to_empty(self, settings):
        """Test a collection that doesn't validate loads as empty."""
        storage = InMemoryStorage({
            CollectionKey.CLIENTS: [{"id": "1", "name": "Ana"}],  # no phone1
            CollectionKey.PAYMENTS: [
                {"id": "p1", "clientId": "1", "clientName": "Ana",
                 "amount": 150, "date": "2025-01-05T10:00:00"},
            ],
        })
        store = LedgerStore(storage, settings=settings)
        assert store.clients == []
        assert len(store.payments) == 1

    def test_save_failure_is_not_surfaced(self, settings):
        """Test mutations still complete in memory when saving fails."""
        store = LedgerStore(FailingSaveStorage(), settings=settings)
        client = store.add_client(ClientDraft(name="Ana", phone1="5551234"))
        assert store.clients == [client]
        assert len(store.notifications) == 1
