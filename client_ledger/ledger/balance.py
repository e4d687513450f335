"""
Running balance over an ordered list of entries.

Recomputed from scratch on every call. Lists are UI-sized, so
there is no incremental bookkeeping to keep in sync.
"""

from decimal import Decimal
from itertools import accumulate
from typing import Iterable

from client_ledger.ledger.entry import LedgerEntry, ZERO


def compute_cumulative(entries: Iterable[LedgerEntry]) -> list[Decimal]:
    """Prefix sums of total, one per entry, in list order."""
    return list(accumulate(entry.total for entry in entries))


def grand_total(entries: Iterable[LedgerEntry]) -> Decimal:
    cumulative = compute_cumulative(entries)
    return cumulative[-1] if cumulative else ZERO
