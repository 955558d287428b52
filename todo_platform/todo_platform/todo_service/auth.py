from passlib.context import CryptContext
from dataclasses import dataclass
import time
import uuid
import jwt

from .errors import InvalidToken
from .models import TOKEN_PURPOSE_AUTH

# Use pbkdf2_sha256 to avoid external bcrypt backend issues in some environments
pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(plain_password, hashed_password)


@dataclass(frozen=True)
class TokenClaims:
    user_id: str
    purpose: str


class TokenService:
    """
    Issues and structurally verifies signed bearer tokens.

    A token encodes the user id (``sub``) and its purpose. Verification here
    only proves the token was signed with our secret; whether it is still
    honoured is decided by the user's active token set in the database.
    """

    def __init__(self, secret: str, algorithm: str = "HS256"):
        if not secret:
            raise ValueError("Token signing secret must not be empty")
        self._secret = secret
        self._algorithm = algorithm

    def issue(self, user_id: str, purpose: str = TOKEN_PURPOSE_AUTH) -> str:
        payload = {
            "sub": user_id,
            "purpose": purpose,
            # Keeps two tokens for the same user in the same second distinct
            "jti": uuid.uuid4().hex,
            "iat": int(time.time()),
        }
        return jwt.encode(payload, self._secret, algorithm=self._algorithm)

    def verify_structure(self, token: str) -> TokenClaims:
        """
        Check the signature and decode the claims without touching storage.

        Raises:
            InvalidToken: On a tampered, malformed or foreign token
        """
        if not isinstance(token, str) or not token:
            raise InvalidToken("Token is empty")
        try:
            data = jwt.decode(
                token,
                self._secret,
                algorithms=[self._algorithm],
                options={"require": ["sub", "purpose"]},
            )
        except jwt.PyJWTError as exc:
            raise InvalidToken(f"Invalid token: {exc}") from exc

        user_id = data.get("sub")
        purpose = data.get("purpose")
        if not isinstance(user_id, str) or not isinstance(purpose, str):
            raise InvalidToken("Token claims are malformed")
        return TokenClaims(user_id=user_id, purpose=purpose)
