"""
Domain Exceptions

Error taxonomy shared by the stores, services and routers.

Services raise these instead of HTTPException so they stay usable outside
a request (scripts, tests). The application factory registers a single
handler that turns any BookwormError into a JSON response:

    {"detail": "<message>"}

Mapping:
- ValidationError       -> 400 (malformed or missing input)
- NotFoundError         -> 404 (referenced user/book/entry absent)
- ForbiddenError        -> 403 (caller may not touch this resource)
- DataUnavailableError  -> 503 (store read/write failed)
"""

from fastapi import status


class BookwormError(Exception):
    """Base exception for Bookworm domain errors."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class ValidationError(BookwormError):
    """Input failed a business rule (e.g. a reading goal below one book)."""

    status_code = status.HTTP_400_BAD_REQUEST


class NotFoundError(BookwormError):
    """A referenced resource does not exist."""

    status_code = status.HTTP_404_NOT_FOUND

    def __init__(self, resource: str, identifier: object):
        self.resource = resource
        self.identifier = identifier
        super().__init__(f"{resource} with id {identifier} not found")


class ForbiddenError(BookwormError):
    """The caller is authenticated but not allowed to perform the action."""

    status_code = status.HTTP_403_FORBIDDEN


class DataUnavailableError(BookwormError):
    """A store operation failed; the request cannot produce a result."""

    status_code = status.HTTP_503_SERVICE_UNAVAILABLE

    def __init__(self, operation: str):
        self.operation = operation
        super().__init__(f"Data unavailable: {operation} failed")
