"""
Per-client ledger book: the in-memory entry list and its
reconciliation with the persistence gateway.

A book is what one open client view works on. Rows are added
locally as pending entries, edited field by field, and saved
in one pass:

1. Persisted entries are updated, one request at a time, in
   list order.
2. Pending entries are created, one request at a time, in list
   order. Each confirmed entry replaces its pending entry at
   the same position, matched by local id.
3. The whole list is fetched again to pick up anything the
   gateway normalized.

Saving is best-effort, not transactional. A failed request is
recorded and the entry keeps its local state (a pending entry
stays pending); the remaining entries are still processed.
Only one save may run at a time; a second call raises
SaveInProgressError instead of racing the first. edit() and
delete_row() raise it too while a save is running; add_row()
does not, as new pending rows are kept by the merge.
"""

import asyncio
import itertools
import logging
from dataclasses import dataclass, field
from decimal import Decimal

from client_ledger.config import get_settings
from client_ledger.exceptions import GatewayError, SaveInProgressError
from client_ledger.ledger.balance import compute_cumulative, grand_total
from client_ledger.ledger.entry import (
    EntryId,
    FieldUpdate,
    LedgerEntry,
    apply_field,
    new_entry,
)
from client_ledger.ledger.gateway import GatewayClient

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SaveError:
    """One failed request during save()."""
    operation: str  # "update", "create" or "fetch"
    entry_id: int | None
    message: str


@dataclass
class SaveResult:
    entries: list[LedgerEntry]
    errors: list[SaveError] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors


class LedgerBook:

    def __init__(
        self,
        gateway: GatewayClient,
        client_id: int,
        entries: list[LedgerEntry] | None = None,
        strict_dates: bool | None = None,
    ):
        self.gateway = gateway
        self.client_id = client_id
        self.entries: list[LedgerEntry] = list(entries or [])
        if strict_dates is None:
            strict_dates = get_settings().STRICT_DATES
        self.strict_dates = strict_dates

        # Local ids continue past any pending entries handed in
        start = max(
            (e.key.local_id for e in self.entries if e.is_pending), default=0
        ) + 1
        self._local_ids = itertools.count(start)
        self._save_lock = asyncio.Lock()

    # --- Reading ---

    @property
    def cumulative(self) -> list[Decimal]:
        return compute_cumulative(self.entries)

    @property
    def grand_total(self) -> Decimal:
        return grand_total(self.entries)

    def rows(self) -> list[tuple[LedgerEntry, Decimal]]:
        """Each entry paired with its running balance, in display order."""
        return list(zip(self.entries, self.cumulative))

    def get(self, ref: int | EntryId) -> LedgerEntry:
        return self.entries[self._index(ref)]

    def _index(self, ref: int | EntryId) -> int:
        for i, entry in enumerate(self.entries):
            if entry.key == ref or entry.id == ref:
                return i
        raise ValueError(f"Entry {ref} not found")

    # --- Local edits ---

    def add_row(self, today=None) -> LedgerEntry:
        """Append a blank pending entry dated today."""
        entry = new_entry(next(self._local_ids), today)
        self.entries.append(entry)
        return entry

    def edit(self, ref: int | EntryId, field_name: str, raw_value) -> FieldUpdate:
        """Apply one field edit in place and report how it went."""
        self._check_not_saving()
        i = self._index(ref)
        update = apply_field(
            self.entries[i], field_name, raw_value, self.strict_dates
        )
        self.entries[i] = update.entry
        return update

    async def delete_row(self, ref: int | EntryId) -> None:
        """
        Remove an entry.

        A persisted entry is deleted on the gateway first; if that
        fails the GatewayError propagates and the entry stays.
        Pending entries only exist here and are dropped directly.
        """
        self._check_not_saving()
        entry = self.entries[self._index(ref)]
        if not entry.is_pending:
            await self.gateway.delete_transaction(entry.id)
            logger.info("Deleted transaction %s for client %s", entry.id, self.client_id)
        self.entries = [e for e in self.entries if e.key != entry.key]

    def _check_not_saving(self) -> None:
        if self._save_lock.locked():
            raise SaveInProgressError(
                f"A save for client {self.client_id} is running; try again after it finishes"
            )

    # --- Gateway round-trips ---

    async def load(self) -> list[LedgerEntry]:
        """Replace the list with the gateway's copy."""
        self.entries = await self.gateway.list_transactions(self.client_id)
        return self.entries

    async def save(self) -> SaveResult:
        if self._save_lock.locked():
            raise SaveInProgressError(
                f"A save for client {self.client_id} is already running"
            )
        async with self._save_lock:
            return await self._save()

    async def _save(self) -> SaveResult:
        errors: list[SaveError] = []
        failed: set[EntryId] = set()
        persisted = [e for e in self.entries if not e.is_pending]
        pending = [e for e in self.entries if e.is_pending]

        updated = 0
        for entry in persisted:
            try:
                saved = await self.gateway.update_transaction(entry)
            except (GatewayError, ValueError) as exc:
                errors.append(SaveError("update", entry.id, str(exc)))
                failed.add(entry.key)
                continue
            self._replace(entry.key, saved)
            updated += 1

        created = 0
        for entry in pending:
            try:
                saved = await self.gateway.create_transaction(self.client_id, entry)
            except (GatewayError, ValueError) as exc:
                errors.append(SaveError("create", entry.id, str(exc)))
                continue
            self._replace(entry.key, saved)
            created += 1

        try:
            fetched = await self.gateway.list_transactions(self.client_id)
        except GatewayError as exc:
            errors.append(SaveError("fetch", None, str(exc)))
        else:
            self.entries = self._merge(fetched, failed)

        logger.info(
            "Saved client %s: %d updated, %d created, %d failed",
            self.client_id, updated, created, len(errors),
        )
        return SaveResult(list(self.entries), errors)

    def _replace(self, key: EntryId, saved: LedgerEntry) -> None:
        for i, entry in enumerate(self.entries):
            if entry.key == key:
                self.entries[i] = saved
                return
        # Removed locally while the request was in flight; the
        # refetch brings the server's copy back.
        logger.debug("Entry %s no longer in the list, skipping replace", key)

    def _merge(
        self, fetched: list[LedgerEntry], failed: set[EntryId]
    ) -> list[LedgerEntry]:
        """
        Take the gateway's list, except where local state must win:
        entries whose update failed keep their local edits, and
        entries still pending are kept after the fetched ones.
        """
        local = {e.key: e for e in self.entries}
        merged = [local.get(e.key, e) if e.key in failed else e for e in fetched]

        fetched_keys = {e.key for e in fetched}
        merged.extend(
            e for e in self.entries
            if e.key in failed and e.key not in fetched_keys
        )
        merged.extend(e for e in self.entries if e.is_pending)
        return merged
