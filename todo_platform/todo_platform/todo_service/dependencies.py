"""
Request-scoped dependencies: stores, the token service and the
authentication guard used by routes that need an identity.
"""
from dataclasses import dataclass
from typing import Optional
import logging

from fastapi import Depends, Header, Request
from sqlalchemy.orm import Session

from .auth import TokenService
from .config import settings
from .credentials import CredentialStore
from .db import get_db
from .errors import AuthenticationFailed, InvalidToken
from .models import TOKEN_PURPOSE_AUTH, User
from .todo_store import TodoStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AuthContext:
    """Identity attached to an authenticated request."""
    user_id: str
    user: User
    token: str


def get_token_service(request: Request) -> TokenService:
    return request.app.state.token_service


def get_credential_store(db: Session = Depends(get_db)) -> CredentialStore:
    return CredentialStore(db)


def get_todo_store(db: Session = Depends(get_db)) -> TodoStore:
    return TodoStore(db)


def resolve_identity(
    token: Optional[str],
    tokens: TokenService,
    credentials: CredentialStore,
) -> AuthContext:
    """
    Turn a raw header value into an AuthContext.

    Raises:
        AuthenticationFailed: reason is missing_token, invalid_token or revoked_token
    """
    if not token:
        raise AuthenticationFailed("No token supplied", reason="missing_token")

    claims = tokens.verify_structure(token)
    if claims.purpose != TOKEN_PURPOSE_AUTH:
        raise InvalidToken(f"Token purpose {claims.purpose!r} cannot authenticate")

    user = credentials.find_by_active_token(token, user_id=claims.user_id)
    return AuthContext(user_id=user.id, user=user, token=token)


def authenticate(
    token: Optional[str] = Header(default=None, alias=settings.AUTH_HEADER),
    tokens: TokenService = Depends(get_token_service),
    credentials: CredentialStore = Depends(get_credential_store),
) -> AuthContext:
    try:
        return resolve_identity(token, tokens, credentials)
    except AuthenticationFailed as exc:
        logger.info("Rejected request: reason=%s", exc.reason)
        raise
