"""Business logic services for the persistence gateway."""

from client_ledger.services.client_service import ClientService
from client_ledger.services.transaction_service import TransactionService

__all__ = ["ClientService", "TransactionService"]
