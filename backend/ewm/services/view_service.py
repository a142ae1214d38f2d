"""Read-side composition of event views.

Combines stored event rows with live confirmed-request counts and view
counts from the stats service. Nothing here writes Event or Request rows,
and neither count is cached: both are recomputed on every call.
"""
import logging
from datetime import timedelta

import requests
from sqlalchemy.orm import Session

from ewm import repository
from ewm.clients.stats_client import StatsGateway
from ewm.config import settings
from ewm.models.event import Event
from ewm.models.request import RequestStatus
from ewm.schemas.event import EventFullOut, EventShortOut
from ewm.timeutils import utcnow

logger = logging.getLogger(__name__)


def event_uri(event_id: str) -> str:
    return f"/events/{event_id}"


def get_views(stats: StatsGateway, event_ids: list[str]) -> dict[str, int]:
    """View counts keyed by event id; any stats failure degrades to zero."""
    if not event_ids:
        return {}
    end = utcnow()
    start = end - timedelta(days=settings.VIEWS_WINDOW_DAYS)
    uris = [event_uri(event_id) for event_id in event_ids]
    try:
        by_uri = stats.query_views(uris, start, end, unique=settings.STATS_UNIQUE_VIEWS)
    except (requests.RequestException, ValueError) as exc:
        logger.warning("Stats unavailable, reporting zero views for %d event(s): %s", len(event_ids), exc)
        by_uri = {}
    return {event_id: int(by_uri.get(event_uri(event_id)) or 0) for event_id in event_ids}


def record_view(stats: StatsGateway, event_id: str, client_ip: str) -> None:
    """Record a detail-page hit; a failed write never fails the read."""
    try:
        stats.record_hit(settings.APP_NAME, event_uri(event_id), client_ip, utcnow())
    except requests.RequestException as exc:
        logger.warning("Failed to record hit for event %s: %s", event_id, exc)


def compose_full(db: Session, stats: StatsGateway, event: Event) -> EventFullOut:
    view = EventFullOut.model_validate(event)
    view.confirmed_requests = repository.count_requests_by_event_and_status(db, event.id, RequestStatus.CONFIRMED)
    view.views = get_views(stats, [event.id])[event.id]
    return view


def compose_short_list(db: Session, stats: StatsGateway, events: list[Event]) -> list[EventShortOut]:
    event_ids = [e.id for e in events]
    confirmed = repository.count_confirmed_by_events(db, event_ids)
    views = get_views(stats, event_ids)

    result = []
    for event in events:
        view = EventShortOut.model_validate(event)
        view.confirmed_requests = confirmed.get(event.id, 0)
        view.views = views.get(event.id, 0)
        result.append(view)
    return result


def compose_public_detail(db: Session, stats: StatsGateway, event: Event, client_ip: str) -> EventFullOut:
    """Record this view first so the returned count includes it."""
    record_view(stats, event.id, client_ip)
    view = compose_full(db, stats, event)
    logger.info("Event %s viewed from %s (views=%d)", event.id, client_ip, view.views)
    return view
