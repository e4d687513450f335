"""
Transaction service — stores and retrieves client ledger lines.

The service owns one rule: total is never taken from the
request. It is recomputed from credit, debit and price on every
create and update, with the same function the ledger client
uses, so stored rows satisfy the same invariant as in-memory
entries.

The caller controls the commit.
"""

from datetime import datetime, time
from decimal import Decimal

from sqlalchemy import select
from sqlalchemy.orm import Session

from client_ledger.exceptions import NotFoundError
from client_ledger.ledger.entry import compute_total
from client_ledger.models.client import Client
from client_ledger.models.transaction import Transaction
from client_ledger.schemas.transaction import TransactionCreate, TransactionUpdate


def _midnight(day) -> datetime:
    return datetime.combine(day, time.min)


class TransactionService:

    def __init__(self, db: Session):
        self.db = db

    def list_for_client(self, client_id: int) -> list[Transaction]:
        """Return a client's transactions, oldest date first."""
        transactions = self.db.execute(
            select(Transaction)
            .where(Transaction.client_id == client_id)
            .order_by(Transaction.date.asc(), Transaction.id.asc())
        ).scalars().all()
        return list(transactions)

    def get_transaction(self, transaction_id: int) -> Transaction:
        txn = self.db.get(Transaction, transaction_id)
        if not txn:
            raise NotFoundError("Transaction not found.")
        return txn

    def create_transaction(self, request: TransactionCreate) -> Transaction:
        """
        Create a transaction for an existing client.

        Missing amounts default to zero and a missing description
        to the empty string.
        """
        if not request.client_id or not request.date:
            raise ValueError("clientId and date are required.")

        if not self.db.get(Client, request.client_id):
            raise NotFoundError(f"Client {request.client_id} not found")

        credit = request.credit or Decimal("0")
        debit = request.debit or Decimal("0")
        price = request.price or Decimal("0")

        txn = Transaction(
            client_id=request.client_id,
            date=_midnight(request.date),
            description=request.description or "",
            credit=credit,
            debit=debit,
            price=price,
            total=compute_total(credit, debit, price),
        )
        self.db.add(txn)
        self.db.flush()
        return txn

    def update_transaction(
        self, transaction_id: int, request: TransactionUpdate
    ) -> Transaction:
        """
        Update a transaction. The date is required; every other
        field keeps its stored value when omitted.
        """
        if not request.date:
            raise ValueError("Date is required.")

        txn = self.get_transaction(transaction_id)

        txn.date = _midnight(request.date)
        if request.description is not None:
            txn.description = request.description
        if request.credit is not None:
            txn.credit = request.credit
        if request.debit is not None:
            txn.debit = request.debit
        if request.price is not None:
            txn.price = request.price
        txn.total = compute_total(
            Decimal(txn.credit), Decimal(txn.debit), Decimal(txn.price)
        )

        self.db.flush()
        return txn

    def delete_transaction(self, transaction_id: int) -> None:
        txn = self.get_transaction(transaction_id)
        self.db.delete(txn)
        self.db.flush()
