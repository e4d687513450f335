"""
Pydantic schemas for client operations.
"""

from pydantic import BaseModel


class ClientCreate(BaseModel):
    # Optional here so a missing name reaches the service and
    # comes back as a 400 with the usable message.
    name: str | None = None


class ClientResponse(BaseModel):
    id: int
    name: str

    model_config = {"from_attributes": True}
