"""
User account routes: registration, login, identity and logout.
"""
from fastapi import APIRouter, Depends, HTTPException, Request, Response, status
from sqlalchemy.orm import Session

from ..auth import TokenService
from ..config import settings
from ..credentials import CredentialStore
from ..db import get_db
from ..dependencies import AuthContext, authenticate, get_credential_store, get_token_service
from ..errors import AuthenticationFailed
from ..models import TOKEN_PURPOSE_AUTH
from ..schemas import UserCreate, UserLogin, UserResponse
from ..utils.event_logger import log_auth_event

router = APIRouter(prefix="/users", tags=["users"])


@router.post("", response_model=UserResponse)
def register(
    payload: UserCreate,
    request: Request,
    response: Response,
    credentials: CredentialStore = Depends(get_credential_store),
    tokens: TokenService = Depends(get_token_service),
    db: Session = Depends(get_db),
):
    # The account and its first token are committed together
    user = credentials.create(payload.email, payload.password, issue_token=tokens.issue)

    log_auth_event("register", user, request, db)
    response.headers[settings.AUTH_HEADER] = user.tokens[0].token
    return UserResponse.model_validate(user)


@router.post("/login", response_model=UserResponse)
def login(
    payload: UserLogin,
    request: Request,
    response: Response,
    credentials: CredentialStore = Depends(get_credential_store),
    tokens: TokenService = Depends(get_token_service),
    db: Session = Depends(get_db),
):
    try:
        user = credentials.verify_credentials(payload.email, payload.password)
    except AuthenticationFailed as exc:
        # Only audit failures against accounts that exist
        if exc.user is not None:
            log_auth_event("login_failure", exc.user, request, db)
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid credentials") from exc

    token = tokens.issue(user.id, TOKEN_PURPOSE_AUTH)
    credentials.add_token(user.id, token, TOKEN_PURPOSE_AUTH)

    log_auth_event("login_success", user, request, db)
    response.headers[settings.AUTH_HEADER] = token
    return UserResponse.model_validate(user)


@router.get("/me", response_model=UserResponse)
def read_me(identity: AuthContext = Depends(authenticate)):
    return UserResponse.model_validate(identity.user)


@router.delete("/me/token")
def logout(
    request: Request,
    identity: AuthContext = Depends(authenticate),
    credentials: CredentialStore = Depends(get_credential_store),
    db: Session = Depends(get_db),
):
    credentials.remove_token(identity.user_id, identity.token)
    log_auth_event("logout", identity.user, request, db)
    return Response(status_code=status.HTTP_200_OK)
