"""
Error taxonomy for the Todo Service.

Stores and services raise these; the exception handler registered in
``main.py`` turns them into HTTP responses using ``status_code`` and
``detail``.
"""
from fastapi import status


class TodoServiceError(Exception):
    status_code = status.HTTP_400_BAD_REQUEST

    @property
    def detail(self) -> str:
        return str(self)


class ValidationError(TodoServiceError):
    """Malformed or missing required input."""


class ConflictError(TodoServiceError):
    """Unique constraint violation, e.g. a duplicate email."""


class StoreError(TodoServiceError):
    """Underlying storage failure."""


class NotFound(TodoServiceError):
    status_code = status.HTTP_404_NOT_FOUND

    @property
    def detail(self) -> str:
        return "Not found"


class InvalidIdentifier(NotFound):
    pass


class AuthenticationFailed(TodoServiceError):
    """
    Bad credentials or an unusable token.

    ``reason`` tells the failure branches apart for logging and tests;
    it never reaches the client. ``user`` is set when the credentials
    named an existing account, for auditing.
    """
    status_code = status.HTTP_401_UNAUTHORIZED

    def __init__(self, message: str = "Unauthorized", reason: str = "invalid_credentials", user=None):
        super().__init__(message)
        self.reason = reason
        self.user = user

    @property
    def detail(self) -> str:
        return "Unauthorized"


class InvalidToken(AuthenticationFailed):
    def __init__(self, message: str = "Invalid token"):
        super().__init__(message, reason="invalid_token")
