"""Shared fixtures: an in-memory ledger with a deterministic clock."""

from datetime import datetime, timedelta
from decimal import Decimal

import pytest

from lavafix.config import AppSettings
from lavafix.ledger import BillingStateMachine, LedgerStore
from lavafix.models import ClientDraft
from lavafix.services.storage import InMemoryStorage


class FakeClock:
    """Returns a strictly increasing time, one minute per call."""

    def __init__(self, start: datetime = datetime(2025, 3, 1, 9, 0)):
        self.current = start

    def __call__(self) -> datetime:
        value = self.current
        self.current += timedelta(minutes=1)
        return value


@pytest.fixture
def settings() -> AppSettings:
    return AppSettings(
        app_name="LavaFix",
        default_monthly_amount=Decimal("150"),
        currency_symbol="Q",
        whatsapp_country_code="502",
        support_contact_name="Alex Gómez",
        support_contact_phone="37080233",
        backup_date_format="%d/%m/%Y",
    )


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def storage() -> InMemoryStorage:
    return InMemoryStorage()


@pytest.fixture
def store(storage, settings, clock) -> LedgerStore:
    return LedgerStore(storage, settings=settings, clock=clock)


@pytest.fixture
def billing(store) -> BillingStateMachine:
    return BillingStateMachine(store)


@pytest.fixture
def ana(store):
    return store.add_client(
        ClientDraft(name="Ana", phone1="5551234", monthly_amount=Decimal("150"))
    )


@pytest.fixture
def beto(store):
    return store.add_client(
        ClientDraft(name="Beto", phone1="5559876", monthly_amount=Decimal("200"))
    )
