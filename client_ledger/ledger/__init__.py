"""Ledger core: entries, running balances, dates and reconciliation."""

from client_ledger.ledger.balance import compute_cumulative, grand_total
from client_ledger.ledger.book import LedgerBook, SaveError, SaveResult
from client_ledger.ledger.dates import is_display_date, to_display, to_storage
from client_ledger.ledger.entry import (
    FieldOutcome,
    FieldUpdate,
    LedgerEntry,
    PendingId,
    PersistedId,
    apply_field,
    new_entry,
    update_field,
)
from client_ledger.ledger.gateway import GatewayClient

__all__ = [
    "compute_cumulative",
    "grand_total",
    "LedgerBook",
    "SaveError",
    "SaveResult",
    "is_display_date",
    "to_display",
    "to_storage",
    "FieldOutcome",
    "FieldUpdate",
    "LedgerEntry",
    "PendingId",
    "PersistedId",
    "apply_field",
    "new_entry",
    "update_field",
    "GatewayClient",
]
