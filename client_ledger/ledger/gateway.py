"""
Async HTTP client for the persistence gateway.

This is the only place that knows the wire format. Entries go
out with storage-encoded dates and come back converted to
display dates; total is recomputed from the returned fields
rather than trusted, so the derived-field rule holds for every
entry the ledger sees.

Every failed round-trip raises GatewayError (404 raises
GatewayNotFoundError). The error text from the response body
becomes the exception message; the details are logged.
"""

import logging

import httpx

from client_ledger.config import get_settings
from client_ledger.exceptions import GatewayError, GatewayNotFoundError
from client_ledger.ledger.dates import to_display, to_storage
from client_ledger.ledger.entry import LedgerEntry, PersistedId, parse_amount

logger = logging.getLogger(__name__)


def entry_to_payload(entry: LedgerEntry) -> dict:
    """Body for POST/PUT: every mutable field, never the id."""
    return {
        "date": to_storage(entry.date),
        "description": entry.description,
        "credit": str(entry.credit),
        "debit": str(entry.debit),
        "price": str(entry.price),
        "total": str(entry.total),
    }


def entry_from_payload(payload: dict) -> LedgerEntry:
    return LedgerEntry(
        key=PersistedId(int(payload["id"])),
        date=to_display(payload["date"]),
        description=payload.get("description") or "",
        credit=parse_amount(payload.get("credit")),
        debit=parse_amount(payload.get("debit")),
        price=parse_amount(payload.get("price")),
    )


def _to_entry(row) -> LedgerEntry:
    try:
        return entry_from_payload(row)
    except (KeyError, TypeError, ValueError) as exc:
        logger.warning("Malformed entry from gateway: %r (%s)", row, exc)
        raise GatewayError("Malformed entry from gateway", details=row) from exc


def _error_from_response(response: httpx.Response) -> GatewayError:
    try:
        body = response.json()
    except ValueError:
        body = {}
    if not isinstance(body, dict):
        body = {}

    message = body.get("error") or f"Gateway returned {response.status_code}"
    details = body.get("details")
    logger.warning(
        "%s %s failed with %s: %s (details: %s)",
        response.request.method, response.request.url.path,
        response.status_code, message, details,
    )
    error_class = GatewayNotFoundError if response.status_code == 404 else GatewayError
    return error_class(message, status_code=response.status_code, details=details)


class GatewayClient:
    """
    Thin async wrapper over the six gateway endpoints.

    Pass an httpx.AsyncClient to reuse a connection pool or to
    swap the transport in tests; otherwise one is built from
    settings and closed by aclose().
    """

    def __init__(
        self,
        base_url: str | None = None,
        client: httpx.AsyncClient | None = None,
        timeout: float | None = None,
    ):
        settings = get_settings()
        self.base_url = base_url or settings.GATEWAY_URL
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(
            base_url=self.base_url,
            timeout=timeout or settings.GATEWAY_TIMEOUT,
        )

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc_info):
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def _request(self, method: str, url: str, **kwargs):
        try:
            response = await self._client.request(method, url, **kwargs)
        except httpx.HTTPError as exc:
            logger.warning("%s %s could not reach the gateway: %s", method, url, exc)
            raise GatewayError(f"Gateway unreachable: {exc}") from exc

        if response.is_error:
            raise _error_from_response(response)
        try:
            return response.json()
        except ValueError as exc:
            raise GatewayError(
                f"Gateway returned a non-JSON body for {method} {url}",
                status_code=response.status_code,
            ) from exc

    # --- Transactions ---

    async def list_transactions(self, client_id: int) -> list[LedgerEntry]:
        rows = await self._request(
            "GET", "/transactions", params={"clientId": client_id}
        )
        return [_to_entry(row) for row in rows]

    async def create_transaction(
        self, client_id: int, entry: LedgerEntry
    ) -> LedgerEntry:
        body = {"clientId": client_id, **entry_to_payload(entry)}
        row = await self._request("POST", "/transactions", json=body)
        return _to_entry(row)

    async def update_transaction(self, entry: LedgerEntry) -> LedgerEntry:
        if entry.is_pending:
            raise ValueError("Pending entries have no gateway id to update")
        row = await self._request(
            "PUT", f"/transactions/{entry.id}", json=entry_to_payload(entry)
        )
        return _to_entry(row)

    async def delete_transaction(self, transaction_id: int) -> None:
        await self._request("DELETE", f"/transactions/{transaction_id}")

    # --- Clients ---

    async def list_clients(self) -> list[dict]:
        rows = await self._request("GET", "/clients")
        return [{"id": row["id"], "name": row["name"]} for row in rows]

    async def create_client(self, name: str) -> dict:
        row = await self._request("POST", "/clients", json={"name": name})
        return {"id": row["id"], "name": row["name"]}

    async def find_client(self, client_id: int) -> dict:
        """Look a client up by id from the client list."""
        for client in await self.list_clients():
            if client["id"] == client_id:
                return client
        raise GatewayNotFoundError(
            f"Client {client_id} not found", status_code=404
        )
