"""
Tests for LedgerBook: local edits, deletion and save().

Most tests use FakeGateway, an in-memory stand-in with the
same async methods as GatewayClient, so individual requests
can be made to fail. The last class runs a book against the
real FastAPI app through httpx.ASGITransport.
"""

import asyncio
import dataclasses
from datetime import date
from decimal import Decimal

import httpx
import pytest

from client_ledger.exceptions import (
    GatewayError,
    GatewayNotFoundError,
    SaveInProgressError,
)
from client_ledger.ledger.book import LedgerBook
from client_ledger.ledger.entry import (
    FieldOutcome,
    LedgerEntry,
    PendingId,
    PersistedId,
)
from client_ledger.ledger.gateway import GatewayClient
from client_ledger.schemas.client import ClientCreate
from client_ledger.services.client_service import ClientService

CLIENT_ID = 7
TODAY = date(2024, 6, 1)


class FakeGateway:
    """In-memory gateway that records calls and can fail on demand."""

    def __init__(self, entries=()):
        self.store = {e.id: e for e in entries}
        self.next_id = max(self.store, default=0) + 1
        self.calls = []
        self.fail_update = set()
        self.fail_create = set()
        self.fail_list = False
        self.gate = None

    async def _wait(self):
        if self.gate is not None:
            await self.gate.wait()

    async def list_transactions(self, client_id):
        self.calls.append(("list", client_id))
        if self.fail_list:
            raise GatewayError("Gateway unreachable")
        return [self.store[i] for i in sorted(self.store)]

    async def create_transaction(self, client_id, entry):
        self.calls.append(("create", entry.id))
        await self._wait()
        if entry.id in self.fail_create:
            raise GatewayError("Invalid request.", status_code=400)
        saved = dataclasses.replace(entry, key=PersistedId(self.next_id))
        self.store[saved.id] = saved
        self.next_id += 1
        return saved

    async def update_transaction(self, entry):
        self.calls.append(("update", entry.id))
        await self._wait()
        if entry.id in self.fail_update:
            raise GatewayError("Boom", status_code=500)
        self.store[entry.id] = entry
        return entry

    async def delete_transaction(self, transaction_id):
        self.calls.append(("delete", transaction_id))
        if transaction_id not in self.store:
            raise GatewayNotFoundError("Transaction not found.", status_code=404)
        del self.store[transaction_id]


def stored(entry_id, description="", **amounts):
    return LedgerEntry(
        key=PersistedId(entry_id), date="01/06/2024",
        description=description, **amounts,
    )


# --- Local edits ---

class TestLocalEdits:

    def test_add_row_assigns_distinct_pending_ids(self):
        book = LedgerBook(FakeGateway(), CLIENT_ID, strict_dates=False)

        first = book.add_row(today=TODAY)
        second = book.add_row(today=TODAY)

        assert first.is_pending and second.is_pending
        assert first.id < 0 and second.id < 0
        assert first.id != second.id
        assert book.entries == [first, second]

    def test_local_ids_continue_past_existing_pending(self):
        existing = LedgerEntry(key=PendingId(5), date="01/06/2024")
        book = LedgerBook(FakeGateway(), CLIENT_ID, entries=[existing], strict_dates=False)

        assert book.add_row(today=TODAY).id == -6

    def test_edit_updates_entry_and_balances(self):
        book = LedgerBook(FakeGateway(), CLIENT_ID, entries=[
            stored(1, debit=Decimal("10"), price=Decimal("1")),
        ], strict_dates=False)
        row = book.add_row(today=TODAY)

        book.edit(row.id, "credit", "5")
        book.edit(row.id, "price", "1")

        assert book.get(row.id).total == Decimal("-5")
        assert book.cumulative == [Decimal("10"), Decimal("5")]
        assert book.grand_total == Decimal("5")
        assert [balance for _, balance in book.rows()] == book.cumulative

    def test_edit_by_key(self):
        book = LedgerBook(FakeGateway(), CLIENT_ID, entries=[stored(1)], strict_dates=False)

        book.edit(PersistedId(1), "description", "Rent")

        assert book.get(1).description == "Rent"

    def test_rejected_date_leaves_entry(self):
        book = LedgerBook(FakeGateway(), CLIENT_ID, entries=[stored(1)], strict_dates=False)

        update = book.edit(1, "date", "2024-06-01")

        assert not update.accepted
        assert book.get(1).date == "01/06/2024"

    def test_strict_dates_option(self):
        book = LedgerBook(FakeGateway(), CLIENT_ID, entries=[stored(1)], strict_dates=True)

        assert not book.edit(1, "date", "31/02/2024").accepted

    def test_unknown_entry_raises(self):
        book = LedgerBook(FakeGateway(), CLIENT_ID, strict_dates=False)

        with pytest.raises(ValueError, match="not found"):
            book.edit(99, "description", "x")


# --- Delete ---

class TestDeleteRow:

    @pytest.mark.asyncio
    async def test_pending_row_dropped_without_request(self):
        gateway = FakeGateway()
        book = LedgerBook(gateway, CLIENT_ID, strict_dates=False)
        row = book.add_row(today=TODAY)

        await book.delete_row(row.id)

        assert book.entries == []
        assert gateway.calls == []

    @pytest.mark.asyncio
    async def test_persisted_row_deleted_on_gateway(self):
        gateway = FakeGateway([stored(1), stored(2)])
        book = LedgerBook(gateway, CLIENT_ID, strict_dates=False)
        await book.load()

        await book.delete_row(1)

        assert [e.id for e in book.entries] == [2]
        assert 1 not in gateway.store

    @pytest.mark.asyncio
    async def test_failed_delete_keeps_row(self):
        gateway = FakeGateway()
        book = LedgerBook(gateway, CLIENT_ID, entries=[stored(3)], strict_dates=False)

        with pytest.raises(GatewayNotFoundError):
            await book.delete_row(3)

        assert [e.id for e in book.entries] == [3]


# --- Save ---

class TestSave:

    @pytest.mark.asyncio
    async def test_updates_run_before_creates_then_refetch(self):
        gateway = FakeGateway([stored(1), stored(2)])
        book = LedgerBook(gateway, CLIENT_ID, strict_dates=False)
        await book.load()
        a = book.add_row(today=TODAY)
        b = book.add_row(today=TODAY)
        gateway.calls.clear()

        result = await book.save()

        assert result.ok
        assert gateway.calls == [
            ("update", 1), ("update", 2),
            ("create", a.id), ("create", b.id),
            ("list", CLIENT_ID),
        ]

    @pytest.mark.asyncio
    async def test_pending_entry_becomes_persisted(self):
        gateway = FakeGateway()
        book = LedgerBook(gateway, CLIENT_ID, strict_dates=False)
        row = book.add_row(today=TODAY)
        book.edit(row.id, "debit", "5")
        book.edit(row.id, "price", "2")

        result = await book.save()

        assert result.ok
        assert len(book.entries) == 1
        saved = book.entries[0]
        assert not saved.is_pending
        assert saved.id > 0
        assert saved.total == Decimal("10")
        assert result.entries == book.entries

    @pytest.mark.asyncio
    async def test_created_entry_replaces_pending_in_place(self):
        gateway = FakeGateway([stored(1), stored(2)])
        book = LedgerBook(gateway, CLIENT_ID, strict_dates=False)
        await book.load()
        row = book.add_row(today=TODAY)
        book.entries = [book.entries[0], row, book.entries[1]]
        # Without a refetch the local order is what remains
        gateway.fail_list = True

        result = await book.save()

        assert [e.operation for e in result.errors] == ["fetch"]
        assert [e.id for e in book.entries] == [1, 3, 2]

    @pytest.mark.asyncio
    async def test_failed_create_keeps_entry_pending(self):
        gateway = FakeGateway()
        book = LedgerBook(gateway, CLIENT_ID, strict_dates=False)
        bad = book.add_row(today=TODAY)
        good = book.add_row(today=TODAY)
        gateway.fail_create.add(bad.id)

        result = await book.save()

        assert not result.ok
        assert [(e.operation, e.entry_id) for e in result.errors] == [("create", bad.id)]
        assert len(book.entries) == 2
        assert not book.entries[0].is_pending
        assert book.entries[1].key == bad.key
        assert good.id not in [e.id for e in book.entries]

    @pytest.mark.asyncio
    async def test_failed_update_keeps_local_edit(self):
        gateway = FakeGateway([stored(1, "old"), stored(2, "old")])
        book = LedgerBook(gateway, CLIENT_ID, strict_dates=False)
        await book.load()
        book.edit(1, "description", "new")
        book.edit(2, "description", "also new")
        gateway.fail_update.add(1)

        result = await book.save()

        assert [(e.operation, e.entry_id) for e in result.errors] == [("update", 1)]
        assert book.get(1).description == "new"
        assert book.get(2).description == "also new"
        assert gateway.store[1].description == "old"

    @pytest.mark.asyncio
    async def test_failed_fetch_keeps_local_list(self):
        gateway = FakeGateway([stored(1)])
        book = LedgerBook(gateway, CLIENT_ID, strict_dates=False)
        await book.load()
        book.edit(1, "description", "edited")
        gateway.fail_list = True

        result = await book.save()

        assert [e.operation for e in result.errors] == ["fetch"]
        assert book.get(1).description == "edited"

    @pytest.mark.asyncio
    async def test_second_save_rejected_while_first_runs(self):
        gateway = FakeGateway()
        gateway.gate = asyncio.Event()
        book = LedgerBook(gateway, CLIENT_ID, strict_dates=False)
        book.add_row(today=TODAY)

        first = asyncio.create_task(book.save())
        await asyncio.sleep(0)

        with pytest.raises(SaveInProgressError):
            await book.save()

        gateway.gate.set()
        result = await first
        assert result.ok
        assert [c[0] for c in gateway.calls].count("create") == 1

    @pytest.mark.asyncio
    async def test_edits_rejected_while_save_runs(self):
        gateway = FakeGateway([stored(1, "old")])
        book = LedgerBook(gateway, CLIENT_ID, strict_dates=False)
        await book.load()
        gateway.gate = asyncio.Event()

        first = asyncio.create_task(book.save())
        await asyncio.sleep(0)

        with pytest.raises(SaveInProgressError):
            book.edit(1, "description", "lost")
        with pytest.raises(SaveInProgressError):
            await book.delete_row(1)
        added = book.add_row(today=TODAY)

        gateway.gate.set()
        result = await first

        assert result.ok
        assert book.get(1).description == "old"
        assert book.get(added.id).is_pending
        book.edit(1, "description", "new")
        assert book.get(1).description == "new"

    @pytest.mark.asyncio
    async def test_save_allowed_again_after_finishing(self):
        gateway = FakeGateway()
        book = LedgerBook(gateway, CLIENT_ID, strict_dates=False)
        book.add_row(today=TODAY)

        await book.save()
        result = await book.save()

        assert result.ok
        assert len(gateway.store) == 1


# --- Against the real gateway ---

class TestAgainstGatewayApp:

    @pytest.mark.asyncio
    async def test_full_round_trip(self, gateway_app, db_session):
        client = ClientService(db_session).create_client(ClientCreate(name="Acme"))
        db_session.commit()

        transport = httpx.ASGITransport(app=gateway_app)
        async with httpx.AsyncClient(transport=transport, base_url="http://test") as http:
            gateway = GatewayClient(client=http)
            book = LedgerBook(gateway, client.id, strict_dates=False)

            row = book.add_row(today=TODAY)
            book.edit(row.id, "description", "Coffee")
            book.edit(row.id, "debit", "5")
            book.edit(row.id, "price", "2")
            result = await book.save()

            assert result.ok
            assert len(book.entries) == 1
            saved = book.entries[0]
            assert not saved.is_pending
            assert saved.date == "01/06/2024"
            assert saved.total == Decimal("10")

            book.edit(saved.id, "credit", "1")
            assert (await book.save()).ok

            fresh = LedgerBook(gateway, client.id, strict_dates=False)
            await fresh.load()
            assert fresh.grand_total == Decimal("8")
            assert fresh.entries[0].description == "Coffee"

            await fresh.delete_row(saved.id)
            assert await gateway.list_transactions(client.id) == []

    @pytest.mark.asyncio
    async def test_long_description_round_trips(self, gateway_app, db_session):
        client = ClientService(db_session).create_client(ClientCreate(name="Acme"))
        db_session.commit()
        text = "x" * 300

        transport = httpx.ASGITransport(app=gateway_app)
        async with httpx.AsyncClient(transport=transport, base_url="http://test") as http:
            book = LedgerBook(GatewayClient(client=http), client.id, strict_dates=False)
            row = book.add_row(today=TODAY)
            book.edit(row.id, "description", text)

            result = await book.save()

            assert result.ok
            assert not book.entries[0].is_pending
            assert book.entries[0].description == text

    @pytest.mark.asyncio
    async def test_rounded_amount_survives_save(self, gateway_app, db_session):
        client = ClientService(db_session).create_client(ClientCreate(name="Acme"))
        db_session.commit()

        transport = httpx.ASGITransport(app=gateway_app)
        async with httpx.AsyncClient(transport=transport, base_url="http://test") as http:
            book = LedgerBook(GatewayClient(client=http), client.id, strict_dates=False)
            row = book.add_row(today=TODAY)
            book.edit(row.id, "debit", "1")
            book.edit(row.id, "price", "1")
            update = book.edit(row.id, "credit", "0.12345")
            before = book.entries[0]

            result = await book.save()

            assert update.outcome == FieldOutcome.ROUNDED
            assert result.ok
            saved = book.entries[0]
            assert saved.credit == before.credit == Decimal("0.1235")
            assert saved.total == before.total == Decimal("0.8765")

    @pytest.mark.asyncio
    async def test_gateway_rejects_impossible_date(self, gateway_app, db_session):
        client = ClientService(db_session).create_client(ClientCreate(name="Acme"))
        db_session.commit()

        transport = httpx.ASGITransport(app=gateway_app)
        async with httpx.AsyncClient(transport=transport, base_url="http://test") as http:
            book = LedgerBook(GatewayClient(client=http), client.id, strict_dates=False)
            row = book.add_row(today=TODAY)
            book.edit(row.id, "date", "31/02/2024")

            result = await book.save()

            assert [(e.operation, e.entry_id) for e in result.errors] == [("create", row.id)]
            assert book.entries[0].is_pending
            assert book.entries[0].date == "31/02/2024"
