"""
Ledger View Projections

DESIGN DECISION: Everything shown on the dashboard is derived from the
stored collections on every read. Nothing here is cached and nothing
here writes - the functions take lists and return new lists.

Totals are always computed from the FULL collections. A history filter
only changes which rows are listed, never the income figure.
"""

import unicodedata
from decimal import Decimal
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field

from lavafix.models import Client, ClientStatus, PaymentRecord


class SortKey(str, Enum):
    """Client list sort modes."""
    INSERTION = "insertion"
    NAME = "name"
    STATUS = "status"


class SortDirection(str, Enum):
    ASC = "asc"
    DESC = "desc"


class SortState(BaseModel):
    """
    Current sort of the client list.

    Selecting the active key again flips the direction; selecting a
    different key starts ascending.
    """

    key: SortKey = SortKey.INSERTION
    direction: SortDirection = SortDirection.ASC

    def select(self, key: SortKey) -> "SortState":
        key = SortKey(key)
        if key == self.key:
            flipped = (
                SortDirection.DESC
                if self.direction == SortDirection.ASC
                else SortDirection.ASC
            )
            return SortState(key=key, direction=flipped)
        return SortState(key=key, direction=SortDirection.ASC)

    @property
    def descending(self) -> bool:
        return self.direction == SortDirection.DESC


class HistoryFilter(BaseModel):
    """Payment history filters. Unset filters match everything."""

    search: str = ""
    year: Optional[int] = None
    month: Optional[int] = Field(default=None, ge=1, le=12)


class LedgerSummary(BaseModel):
    """Dashboard stat cards."""

    total_clients: int
    total_income: Decimal
    pending_total: Decimal
    pending_count: int


# =============================================================================
# CLIENTS
# =============================================================================

def filter_clients(clients: list[Client], term: str) -> list[Client]:
    """Case-insensitive substring search over name and both phones. The term is not trimmed."""
    term = term.lower()
    if not term:
        return list(clients)

    def matches(client: Client) -> bool:
        if term in client.name.lower():
            return True
        if term in client.phone1.lower():
            return True
        return bool(client.phone2) and term in client.phone2.lower()

    return [c for c in clients if matches(c)]


def name_sort_key(name: str) -> str:
    """
    Collation key for client names.

    Accents and case are ignored at this level ("Ángel" sorts with
    "angel"), which is how Spanish speakers expect a name list to read.
    """
    decomposed = unicodedata.normalize("NFKD", name)
    stripped = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    return stripped.casefold()


def _status_rank(client: Client) -> int:
    return 0 if client.status == ClientStatus.PAGADO else 1


def sort_clients(clients: list[Client], sort: SortState) -> list[Client]:
    """
    Sort clients for display.

    All sorts are stable; equal keys keep their incoming order in
    both directions.
    """
    if sort.key == SortKey.NAME:
        return sorted(
            clients,
            key=lambda c: name_sort_key(c.name),
            reverse=sort.descending,
        )
    if sort.key == SortKey.STATUS:
        # Ascending: Pagado before Pendiente
        return sorted(clients, key=_status_rank, reverse=sort.descending)
    return sorted(clients, key=lambda c: c.created_at)


def visible_clients(
    clients: list[Client],
    term: str = "",
    sort: Optional[SortState] = None,
) -> list[Client]:
    """Search, then sort - what the client table shows."""
    return sort_clients(filter_clients(clients, term), sort or SortState())


def pending_clients(clients: list[Client]) -> list[Client]:
    """Clients that still owe this month, in stored order."""
    return [c for c in clients if c.status == ClientStatus.PENDIENTE]


# =============================================================================
# PAYMENT HISTORY
# =============================================================================

def filter_payments(
    payments: list[PaymentRecord],
    history_filter: Optional[HistoryFilter] = None,
) -> list[PaymentRecord]:
    """AND of client-name search, calendar year and calendar month."""
    history_filter = history_filter or HistoryFilter()
    search = history_filter.search.strip().lower()

    results = []
    for payment in payments:
        if search and search not in payment.client_name.lower():
            continue
        if history_filter.year is not None and payment.date.year != history_filter.year:
            continue
        if history_filter.month is not None and payment.date.month != history_filter.month:
            continue
        results.append(payment)
    return results


def payment_years(payments: list[PaymentRecord]) -> list[int]:
    """Distinct payment years, newest first (for the year selector)."""
    return sorted({p.date.year for p in payments}, reverse=True)


# =============================================================================
# AGGREGATES
# =============================================================================

def summarize(clients: list[Client], payments: list[PaymentRecord]) -> LedgerSummary:
    """
    Compute the stat cards.

    total_income is all-time and unfiltered.
    """
    pending = pending_clients(clients)
    return LedgerSummary(
        total_clients=len(clients),
        total_income=sum((p.amount for p in payments), Decimal("0")),
        pending_total=sum((c.monthly_amount for c in pending), Decimal("0")),
        pending_count=len(pending),
    )
