"""
Development-only view of the account session audit trail.

Reachable only when ``DEV_MODE`` is on, and then only from loopback or
private-network callers. Responses use the same ``ApiResponse`` envelope
as the account routes.
"""
import ipaddress
import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.orm import Session

from ..config import settings
from ..db import get_db
from ..errors import Forbidden, InvalidInput, NotFound
from ..models import AUTH_EVENT_TYPES, AuthEvent
from ..schemas import ApiResponse

router = APIRouter(prefix="/dev", tags=["dev-monitor"])
logger = logging.getLogger(__name__)


def is_local_request(request: Request) -> bool:
    """True for loopback and private-network callers (e.g. Docker bridge)."""
    if not request.client:
        return True

    host = request.client.host
    if host == "localhost":
        return True
    try:
        address = ipaddress.ip_address(host)
    except ValueError:
        return False
    return address.is_loopback or address.is_private


@router.get("/event-logs")
def get_event_logs(
    request: Request,
    limit: int = Query(50, ge=1, le=1000),
    event_type: Optional[str] = None,
    user_id: Optional[str] = None,
    db: Session = Depends(get_db),
):
    """Recent auth events, newest first, optionally filtered by type and account."""
    client_host = request.client.host if request.client else "unknown"

    if not settings.DEV_MODE:
        logger.warning("[DevMonitor] Event log requested with DEV_MODE disabled, ip=%s", client_host)
        raise NotFound()

    if not is_local_request(request):
        logger.warning("[DevMonitor] Rejected non-local caller, ip=%s", client_host)
        raise Forbidden("Event logs are only available to local callers")

    if event_type and event_type not in AUTH_EVENT_TYPES:
        raise InvalidInput(f"Unknown event type: {event_type}")

    query = db.query(AuthEvent)
    if event_type:
        query = query.filter(AuthEvent.event_type == event_type)
    if user_id:
        query = query.filter(AuthEvent.user_id == user_id)

    events = query.order_by(AuthEvent.timestamp.desc()).limit(limit).all()
    logger.info(
        "[DevMonitor] limit=%s event_type=%s user_id=%s results=%s ip=%s",
        limit, event_type, user_id, len(events), client_host,
    )

    body = ApiResponse(
        statusCode=200,
        data=[event.to_dict() for event in events],
        message="Event logs fetched successfully",
    )
    return body.model_dump(mode="json")
