"""Error taxonomy shared by the store, identity service and dispatcher.

Each class carries the HTTP status its category maps to, so routes can turn
any of them into an `HTTPException` without a lookup table of their own.
"""

from __future__ import annotations

from fastapi import status


class PetAppError(Exception):
    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationError(PetAppError):
    status_code = status.HTTP_400_BAD_REQUEST


class AuthError(PetAppError):
    status_code = status.HTTP_401_UNAUTHORIZED


class ForbiddenError(PetAppError):
    status_code = status.HTTP_403_FORBIDDEN


class NotFoundError(PetAppError):
    status_code = status.HTTP_404_NOT_FOUND


class StateError(PetAppError):
    status_code = status.HTTP_400_BAD_REQUEST


class BusyError(PetAppError):
    status_code = status.HTTP_409_CONFLICT


class UnexpectedError(PetAppError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
