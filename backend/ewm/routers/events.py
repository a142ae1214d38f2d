"""Event API routes: initiator, admin, and public paths.

All invariant checks live in event_service; views are assembled by
view_service so counts are always computed per request.
"""
import logging
from fastapi import APIRouter, Depends, Query, Request, status
from sqlalchemy.orm import Session

from ewm.clients.stats_client import StatsGateway, get_stats_client
from ewm.database import get_db
from ewm.schemas.event import EventCreate, EventFullOut, EventShortOut, EventUpdate
from ewm.services import event_service, view_service

logger = logging.getLogger(__name__)
private_router = APIRouter()
admin_router = APIRouter()
public_router = APIRouter()


@private_router.post("/", response_model=EventFullOut, status_code=status.HTTP_201_CREATED)
def create_event(
    user_id: str,
    payload: EventCreate,
    db: Session = Depends(get_db),
    stats: StatsGateway = Depends(get_stats_client),
):
    """Create a new event in PENDING state."""
    event = event_service.create_event(db, user_id, payload)
    return view_service.compose_full(db, stats, event)


@private_router.get("/", response_model=list[EventShortOut])
def list_own_events(
    user_id: str,
    offset: int = Query(0, alias="from", ge=0),
    size: int = Query(10, ge=1),
    db: Session = Depends(get_db),
    stats: StatsGateway = Depends(get_stats_client),
):
    events = event_service.list_owner_events(db, user_id, offset=offset, limit=size)
    return view_service.compose_short_list(db, stats, events)


@private_router.get("/{event_id}", response_model=EventFullOut)
def get_own_event(
    user_id: str,
    event_id: str,
    db: Session = Depends(get_db),
    stats: StatsGateway = Depends(get_stats_client),
):
    event = event_service.get_owner_event(db, user_id, event_id)
    return view_service.compose_full(db, stats, event)


@private_router.patch("/{event_id}", response_model=EventFullOut)
def update_own_event(
    user_id: str,
    event_id: str,
    payload: EventUpdate,
    db: Session = Depends(get_db),
    stats: StatsGateway = Depends(get_stats_client),
):
    """Partial update by the initiator (not allowed once published)."""
    event = event_service.update_event_by_owner(db, user_id, event_id, payload)
    return view_service.compose_full(db, stats, event)


@admin_router.patch("/{event_id}", response_model=EventFullOut)
def update_event_admin(
    event_id: str,
    payload: EventUpdate,
    db: Session = Depends(get_db),
    stats: StatsGateway = Depends(get_stats_client),
):
    """Moderate an event: publish, reject, or edit fields."""
    event = event_service.update_event_by_admin(db, event_id, payload)
    return view_service.compose_full(db, stats, event)


@public_router.get("/{event_id}", response_model=EventFullOut)
def get_published_event(
    event_id: str,
    request: Request,
    db: Session = Depends(get_db),
    stats: StatsGateway = Depends(get_stats_client),
):
    """Public detail view; counts this call as a view."""
    event = event_service.get_published_event(db, event_id)
    client_ip = request.client.host if request.client else "unknown"
    return view_service.compose_public_detail(db, stats, event, client_ip)
