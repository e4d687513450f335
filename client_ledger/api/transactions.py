"""
Transaction API endpoints.

The API layer is thin: it maps service exceptions to status
codes (NotFoundError to 404, any other ValueError to 400) and
leaves every rule to TransactionService.
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from client_ledger.exceptions import NotFoundError
from client_ledger.models.base import get_db
from client_ledger.services.transaction_service import TransactionService
from client_ledger.schemas.transaction import (
    TransactionCreate,
    TransactionUpdate,
    TransactionResponse,
    MessageResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/transactions", tags=["Transactions"])


@router.get("", response_model=list[TransactionResponse])
def list_transactions(
    client_id: int | None = Query(default=None, alias="clientId"),
    db: Session = Depends(get_db),
):
    """List a client's transactions, ordered by date ascending."""
    if client_id is None:
        raise HTTPException(status_code=400, detail="clientId is required.")

    transactions = TransactionService(db).list_for_client(client_id)
    logger.debug("Fetched %d transactions for client %s", len(transactions), client_id)
    return transactions


@router.post("", response_model=TransactionResponse, status_code=201)
def create_transaction(
    request: TransactionCreate,
    db: Session = Depends(get_db),
):
    """Create a transaction. total is recomputed from the amounts."""
    service = TransactionService(db)
    try:
        txn = service.create_transaction(request)
        db.commit()
    except NotFoundError as e:
        db.rollback()
        raise HTTPException(status_code=404, detail=str(e))
    except ValueError as e:
        db.rollback()
        raise HTTPException(status_code=400, detail=str(e))

    logger.info("Created transaction %s for client %s", txn.id, txn.client_id)
    return txn


@router.put("/{transaction_id}", response_model=TransactionResponse)
def update_transaction(
    transaction_id: int,
    request: TransactionUpdate,
    db: Session = Depends(get_db),
):
    """Update a transaction. Omitted fields keep their stored value."""
    service = TransactionService(db)
    try:
        txn = service.update_transaction(transaction_id, request)
        db.commit()
    except NotFoundError as e:
        db.rollback()
        raise HTTPException(status_code=404, detail=str(e))
    except ValueError as e:
        db.rollback()
        raise HTTPException(status_code=400, detail=str(e))

    logger.info("Updated transaction %s", txn.id)
    return txn


@router.delete("/{transaction_id}", response_model=MessageResponse)
def delete_transaction(
    transaction_id: int,
    db: Session = Depends(get_db),
):
    """Delete a transaction. 404 if it does not exist."""
    service = TransactionService(db)
    try:
        service.delete_transaction(transaction_id)
        db.commit()
    except NotFoundError as e:
        db.rollback()
        raise HTTPException(status_code=404, detail=str(e))

    logger.info("Deleted transaction %s", transaction_id)
    return MessageResponse(message="Transaction deleted successfully.")
