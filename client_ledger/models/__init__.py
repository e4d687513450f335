"""
Database models package.

All models must be imported here so that Alembic can discover
them through Base.metadata when generating migrations.
"""

from client_ledger.models.base import Base
from client_ledger.models.client import Client
from client_ledger.models.transaction import Transaction

__all__ = [
    "Base",
    "Client",
    "Transaction",
]
