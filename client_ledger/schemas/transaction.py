"""
Pydantic schemas for transaction operations.

The wire format is camelCase (clientId) to match what the
ledger client sends; Python code uses snake_case through
field aliases.
"""

from datetime import date as Date, datetime
from decimal import Decimal

from pydantic import BaseModel, Field

from client_ledger.ledger.entry import AMOUNT_PLACES


class TransactionCreate(BaseModel):
    """
    Request to create a transaction.

    clientId and date are optional at the schema level so the
    service can answer with the same 400 message for either.
    total is accepted for compatibility but always recomputed.
    """
    client_id: int | None = Field(default=None, alias="clientId")
    date: Date | None = None
    description: str | None = None
    credit: Decimal | None = Field(default=None, ge=0, decimal_places=AMOUNT_PLACES)
    debit: Decimal | None = Field(default=None, ge=0, decimal_places=AMOUNT_PLACES)
    price: Decimal | None = Field(default=None, ge=0, decimal_places=AMOUNT_PLACES)
    total: Decimal | None = None

    model_config = {"populate_by_name": True}


class TransactionUpdate(BaseModel):
    """Request to update a transaction. Omitted fields keep their value."""
    date: Date | None = None
    description: str | None = None
    credit: Decimal | None = Field(default=None, ge=0, decimal_places=AMOUNT_PLACES)
    debit: Decimal | None = Field(default=None, ge=0, decimal_places=AMOUNT_PLACES)
    price: Decimal | None = Field(default=None, ge=0, decimal_places=AMOUNT_PLACES)
    total: Decimal | None = None


class TransactionResponse(BaseModel):
    id: int
    client_id: int = Field(serialization_alias="clientId")
    date: datetime
    description: str
    credit: Decimal
    debit: Decimal
    price: Decimal
    total: Decimal

    model_config = {"from_attributes": True}


class MessageResponse(BaseModel):
    message: str
