"""Ledger package: store, status state machine and read-only projections."""

from lavafix.ledger.projections import (
    HistoryFilter,
    LedgerSummary,
    SortDirection,
    SortKey,
    SortState,
    filter_clients,
    filter_payments,
    payment_years,
    pending_clients,
    sort_clients,
    summarize,
    visible_clients,
)
from lavafix.ledger.state_machine import BillingStateMachine
from lavafix.ledger.store import LedgerStore

__all__ = [
    "BillingStateMachine",
    "HistoryFilter",
    "LedgerStore",
    "LedgerSummary",
    "SortDirection",
    "SortKey",
    "SortState",
    "filter_clients",
    "filter_payments",
    "payment_years",
    "pending_clients",
    "sort_clients",
    "summarize",
    "visible_clients",
]
