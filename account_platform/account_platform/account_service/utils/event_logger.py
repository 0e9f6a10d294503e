"""
Event logger utility for account session events.
"""
from datetime import datetime
from typing import Optional
from fastapi import Request
from sqlalchemy.orm import Session
from sqlalchemy.exc import SQLAlchemyError
import sys
import logging
import os

from ..config import settings
from ..models import AUTH_EVENT_TYPES, AuthEvent, User

logger = logging.getLogger(__name__)

ALLOWED_EVENT_TYPES = set(AUTH_EVENT_TYPES)


def configure_logging() -> None:
    """Configure stdout logging plus a file handler under LOG_DIR when it is writable."""
    handlers = [logging.StreamHandler(sys.stdout)]

    # Try to add file handler, but continue without it if directory creation fails
    try:
        os.makedirs(settings.LOG_DIR, exist_ok=True)
        handlers.append(logging.FileHandler(os.path.join(settings.LOG_DIR, "account_events.log")))
    except OSError as e:
        print(f"WARNING: Could not set up file logging: {e}", file=sys.stderr)

    logging.basicConfig(
        level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        handlers=handlers
    )


def _client_ip(request: Optional[Request]) -> Optional[str]:
    if request is None:
        return None

    ip_address = None
    if request.client:
        ip_address = request.client.host

    # Check for X-Forwarded-For header (proxy/load balancer scenarios)
    if not ip_address and request.headers.get("x-forwarded-for"):
        # X-Forwarded-For can contain multiple IPs, take the first one
        ip_address = request.headers.get("x-forwarded-for").split(",")[0].strip()
    return ip_address


def log_auth_event(
    event_type: str,
    user: User,
    request: Optional[Request],
    db: Session,
    metadata: dict = None
) -> None:
    """
    Log an account session event to the database.

    Args:
        event_type: One of the values in ALLOWED_EVENT_TYPES
        user: User object from database
        request: FastAPI Request object, or None outside a request
        db: Database session
        metadata: Optional dictionary of additional context

    Raises:
        ValueError: If event_type is invalid
    """
    if event_type not in ALLOWED_EVENT_TYPES:
        raise ValueError(
            f"Invalid event_type '{event_type}'. Must be one of: {', '.join(sorted(ALLOWED_EVENT_TYPES))}"
        )

    user_id, username = user.id, user.user_name
    ip_address = _client_ip(request)
    user_agent = request.headers.get("user-agent") if request is not None else None

    try:
        auth_event = AuthEvent(
            user_id=user_id,
            username=username,
            event_type=event_type,
            ip_address=ip_address,
            user_agent=user_agent,
            timestamp=datetime.utcnow(),
            event_metadata=metadata or {}
        )

        db.add(auth_event)
        db.commit()

        logger.info(
            "AUTH %s user_id=%s username=%s ip=%s",
            event_type, user_id, username, ip_address
        )

    except SQLAlchemyError as e:
        # Logging failure should not break the session flow
        db.rollback()
        logger.warning(
            "Failed to log auth event - user_id=%s, event_type=%s, error=%s",
            user_id, event_type, e
        )
