"""
Credential store: user records, password hashes and active token sets.
"""
import logging
from typing import Callable, Optional

from email_validator import validate_email, EmailNotValidError
from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from .auth import hash_password, verify_password
from .config import settings
from .errors import AuthenticationFailed, ConflictError, NotFound, StoreError, ValidationError
from .identifiers import new_id, parse_id
from .models import TOKEN_PURPOSE_AUTH, User, UserToken

logger = logging.getLogger(__name__)

# Verified against when the email is unknown so both failure paths cost the same
_DUMMY_HASH = hash_password("not-a-real-password")


def _clean_email(email) -> str:
    if not isinstance(email, str) or not email.strip():
        raise ValidationError("email is required")
    email = email.strip()
    try:
        validate_email(email, check_deliverability=False)
    except EmailNotValidError as exc:
        raise ValidationError(f"{email} is not a valid email: {exc}") from exc
    return email


def _check_password(password) -> str:
    if not isinstance(password, str) or not password:
        raise ValidationError("password is required")
    if len(password) < settings.PASSWORD_MIN_LENGTH:
        raise ValidationError(
            f"password must be at least {settings.PASSWORD_MIN_LENGTH} characters"
        )
    return password


class CredentialStore:
    def __init__(self, db: Session):
        self.db = db

    def _commit(self, action: str):
        try:
            self.db.commit()
        except SQLAlchemyError as exc:
            self.db.rollback()
            logger.error("Credential store failure during %s: %s", action, exc)
            raise StoreError(f"Failed to {action}") from exc

    def get(self, user_id: str) -> User:
        user_id = parse_id(user_id)
        try:
            user = self.db.get(User, user_id)
        except SQLAlchemyError as exc:
            logger.error("Failed to load user: %s", exc)
            raise StoreError("Failed to load user") from exc
        if user is None:
            raise NotFound(f"User {user_id} not found")
        return user

    def find_by_email(self, email) -> Optional[User]:
        # Stored emails are trimmed, so lookups are too
        if not isinstance(email, str):
            return None
        try:
            return self.db.execute(
                select(User).where(User.email == email.strip())
            ).scalar_one_or_none()
        except SQLAlchemyError as exc:
            logger.error("Failed to look up user: %s", exc)
            raise StoreError("Failed to look up user") from exc

    def create(self, email, password, issue_token: Optional[Callable[[str], str]] = None) -> User:
        """
        Register a new user.

        When ``issue_token`` is given it is called with the new user's id and
        the returned token is stored as the user's first auth token, in the
        same transaction as the user itself.

        Raises:
            ValidationError: Empty/invalid email or too-short password
            ConflictError: The email is already registered
            StoreError: Any other database failure
        """
        email = _clean_email(email)
        password = _check_password(password)

        user = User(id=new_id(), email=email, password_hash=hash_password(password))
        if issue_token is not None:
            user.tokens.append(UserToken(purpose=TOKEN_PURPOSE_AUTH, token=issue_token(user.id)))
        self.db.add(user)
        try:
            self.db.commit()
        except IntegrityError as exc:
            self.db.rollback()
            raise ConflictError("Email already exists") from exc
        except SQLAlchemyError as exc:
            self.db.rollback()
            logger.error("Failed to create user: %s", exc)
            raise StoreError("Failed to create user") from exc
        self.db.refresh(user)
        logger.info("User created: user_id=%s", user.id)
        return user

    def verify_credentials(self, email, password) -> User:
        """
        Return the user owning ``email`` if ``password`` matches.

        Unknown email and wrong password fail identically; only the
        exception's ``user`` attribute, set for a wrong password, differs.
        """
        if not isinstance(email, str) or not isinstance(password, str):
            raise AuthenticationFailed("Invalid credentials")

        user = self.find_by_email(email)
        if user is None:
            verify_password(password, _DUMMY_HASH)
            raise AuthenticationFailed("Invalid credentials")
        if not verify_password(password, user.password_hash):
            raise AuthenticationFailed("Invalid credentials", user=user)
        return user

    def set_password(self, user_id: str, password) -> User:
        user = self.get(user_id)
        user.password_hash = hash_password(_check_password(password))
        self._commit("update password")
        logger.info("Password changed: user_id=%s", user.id)
        return user

    def delete(self, user_id: str) -> None:
        # Tokens go with the user through the relationship cascade
        user = self.get(user_id)
        self.db.delete(user)
        self._commit("delete user")
        logger.info("User deleted: user_id=%s", user_id)

    def add_token(self, user_id: str, token: str, purpose: str = TOKEN_PURPOSE_AUTH) -> None:
        user = self.get(user_id)
        self.db.add(UserToken(user_id=user.id, purpose=purpose, token=token))
        self._commit("add token")

    def remove_token(self, user_id: str, token: str) -> None:
        """Revoke ``token``; removing a token that is not present is a no-op."""
        user = self.get(user_id)
        try:
            self.db.execute(
                delete(UserToken).where(
                    UserToken.user_id == user.id,
                    UserToken.token == token,
                )
            )
        except SQLAlchemyError as exc:
            self.db.rollback()
            logger.error("Failed to remove token: %s", exc)
            raise StoreError("Failed to remove token") from exc
        self._commit("remove token")

    def find_by_active_token(self, token: str, user_id: Optional[str] = None) -> User:
        """
        Resolve a token to its owner, provided it is still in the active set.

        Raises:
            AuthenticationFailed: The token is not active (or not owned by ``user_id``)
        """
        query = select(User).join(UserToken, UserToken.user_id == User.id).where(UserToken.token == token)
        if user_id is not None:
            query = query.where(User.id == user_id)
        try:
            user = self.db.execute(query).scalar_one_or_none()
        except SQLAlchemyError as exc:
            logger.error("Failed to resolve token: %s", exc)
            raise StoreError("Failed to resolve token") from exc
        if user is None:
            raise AuthenticationFailed("Token is not active", reason="revoked_token")
        return user
