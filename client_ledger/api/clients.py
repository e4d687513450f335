"""
Client API endpoints.
"""

import logging

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from client_ledger.models.base import get_db
from client_ledger.services.client_service import ClientService
from client_ledger.schemas.client import ClientCreate, ClientResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/clients", tags=["Clients"])


@router.get("", response_model=list[ClientResponse])
def list_clients(db: Session = Depends(get_db)):
    """List every client."""
    return ClientService(db).list_clients()


@router.post("", response_model=ClientResponse, status_code=201)
def create_client(
    request: ClientCreate,
    db: Session = Depends(get_db),
):
    """Create a new client. 400 when the name is missing."""
    service = ClientService(db)
    try:
        client = service.create_client(request)
        db.commit()
    except ValueError as e:
        db.rollback()
        raise HTTPException(status_code=400, detail=str(e))

    logger.info("Created client %s (%s)", client.id, client.name)
    return client
