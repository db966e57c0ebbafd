"""Exceptions shared by the voting services."""
from typing import Optional


class VotingError(Exception):
    """Base class for voting service errors."""

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFoundError(VotingError):
    """Referenced entity or sub-entity does not exist."""

    status_code = 404


class AlreadyExistsError(VotingError):
    """Entity key or sub-entity id is already taken."""

    status_code = 409


class ValidationFailure(VotingError):
    """Request data was rejected."""

    status_code = 400


class StoreError(VotingError):
    """The storage backend failed."""
    pass


class UpstreamServiceError(VotingError):
    """A call to another voting service failed."""

    status_code = 502

    def __init__(self, message: str, upstream_status: Optional[int] = None):
        super().__init__(message)
        # None when the request never got a response
        self.upstream_status = upstream_status
