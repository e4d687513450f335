"""
Client service — creates and lists clients.
"""

from sqlalchemy import select
from sqlalchemy.orm import Session

from client_ledger.exceptions import NotFoundError
from client_ledger.models.client import Client
from client_ledger.schemas.client import ClientCreate


class ClientService:

    def __init__(self, db: Session):
        self.db = db

    def create_client(self, request: ClientCreate) -> Client:
        """Create a new client. The name is required and trimmed."""
        name = (request.name or "").strip()
        if not name:
            raise ValueError("Name is required.")

        client = Client(name=name)
        self.db.add(client)
        self.db.flush()
        return client

    def list_clients(self) -> list[Client]:
        clients = self.db.execute(
            select(Client).order_by(Client.id)
        ).scalars().all()
        return list(clients)

    def get_client(self, client_id: int) -> Client:
        client = self.db.get(Client, client_id)
        if not client:
            raise NotFoundError(f"Client {client_id} not found")
        return client
