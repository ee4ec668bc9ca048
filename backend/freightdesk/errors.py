"""Error taxonomy raised by the services and rendered by the API."""

from fastapi import status


class FreightDeskError(Exception):
    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class AuthenticationError(FreightDeskError):
    status_code = status.HTTP_401_UNAUTHORIZED


class AuthorizationError(FreightDeskError):
    """The caller's role forbids the action."""

    status_code = status.HTTP_403_FORBIDDEN


class ValidationError(FreightDeskError):
    """Malformed or out-of-range input, rejected before any write."""


class BusinessRuleViolation(FreightDeskError):
    """Well-formed request that breaks an order or ledger rule."""


class NotFoundError(FreightDeskError):
    status_code = status.HTTP_404_NOT_FOUND


class ConflictError(FreightDeskError):
    """Another writer changed the row first; safe to retry after a reload."""

    status_code = status.HTTP_409_CONFLICT
