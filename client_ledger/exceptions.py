"""
Exceptions shared by the gateway service and the ledger client.

The service layer raises plain ValueError for bad input and
NotFoundError for missing rows; routes turn both into HTTP
status codes. The ledger client raises GatewayError for any
failed round-trip, so callers can catch by type.
"""


class NotFoundError(ValueError):
    """A client or transaction row does not exist."""


class GatewayError(Exception):
    """
    A request to the persistence gateway failed.

    status_code is None when the gateway could not be reached
    at all. details carries whatever the error body held.
    """

    def __init__(self, message: str, status_code: int | None = None, details=None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.details = details


class GatewayNotFoundError(GatewayError):
    """The gateway answered 404 for the target row."""


class SaveInProgressError(RuntimeError):
    """save() was called while a previous save is still running."""
