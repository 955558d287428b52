"""
Event logger utility for authentication events.
"""
from datetime import datetime
from fastapi import Request
from sqlalchemy.orm import Session
from sqlalchemy.exc import SQLAlchemyError
import logging

from ..models import AuthEvent, User

logger = logging.getLogger(__name__)


ALLOWED_EVENT_TYPES = {
    "register",
    "login_success",
    "login_failure",
    "logout",
}


def client_ip(request: Request):
    """Client address, falling back to the first X-Forwarded-For entry."""
    if request.client and request.client.host:
        return request.client.host

    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        # X-Forwarded-For can contain multiple IPs, take the first one
        return forwarded.split(",")[0].strip()
    return None


def log_auth_event(
    event_type: str,
    user: User,
    request: Request,
    db: Session,
    metadata: dict = None
) -> None:
    """
    Record an authentication event in the audit table.

    Args:
        event_type: One of: register, login_success, login_failure, logout
        user: User the event concerns
        request: Incoming request, for client address and user agent
        db: Database session
        metadata: Optional dictionary of additional context

    Raises:
        ValueError: If event_type is invalid
    """
    if event_type not in ALLOWED_EVENT_TYPES:
        raise ValueError(
            f"Invalid event_type '{event_type}'. Must be one of: {', '.join(sorted(ALLOWED_EVENT_TYPES))}"
        )

    user_id = user.id
    ip_address = client_ip(request)

    try:
        auth_event = AuthEvent(
            user_id=user_id,
            email=user.email,
            event_type=event_type,
            ip_address=ip_address,
            user_agent=request.headers.get("user-agent"),
            timestamp=datetime.utcnow(),
            event_metadata=metadata or {}
        )

        db.add(auth_event)
        db.commit()

        logger.info(
            "AUTH %s user_id=%s ip=%s",
            event_type, user_id, ip_address
        )

    except SQLAlchemyError as e:
        # Auditing must never break the auth flow
        logger.warning(
            "Failed to log auth event: user_id=%s event_type=%s error=%s",
            user_id, event_type, e
        )
        db.rollback()
