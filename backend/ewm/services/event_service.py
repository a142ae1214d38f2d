"""Event lifecycle service: owns the Event state machine.

Responsibilities:
- Create events in PENDING with defaults and a lead-time check
- Owner updates: partial patch, SEND_TO_REVIEW / CANCEL_REVIEW, no edits once published
- Admin updates: partial patch, PUBLISH_EVENT / REJECT_EVENT
- Visibility rules for the initiator's and the public read paths

Owner and admin paths use different lead times before ``event_date``
(see ``settings.USER_LEAD_HOURS`` and ``settings.ADMIN_LEAD_HOURS``).
"""
import enum
import logging
from datetime import datetime, timedelta
from typing import Any, Optional

from sqlalchemy.orm import Session

from ewm import repository
from ewm.config import settings
from ewm.exceptions import ConflictError, NotFoundError, ValidationError
from ewm.models.category import Category
from ewm.models.event import AdminStateAction, Event, EventState, Location, UserStateAction
from ewm.schemas.event import EventCreate, EventUpdate
from ewm.timeutils import to_utc, utcnow

logger = logging.getLogger(__name__)

# Scalar fields copied verbatim from a patch when present
_PLAIN_FIELDS = ("annotation", "description", "paid", "participant_limit", "request_moderation", "title")


def get_event_or_404(db: Session, event_id: str) -> Event:
    event = repository.get_event(db, event_id)
    if not event:
        raise NotFoundError(f"Event with id={event_id} was not found")
    return event


def _get_user_or_404(db: Session, user_id: str):
    user = repository.get_user(db, user_id)
    if not user:
        raise NotFoundError(f"User with id={user_id} was not found")
    return user


def _get_category_or_404(db: Session, category_id: str) -> Category:
    category = repository.get_category(db, category_id)
    if not category:
        raise NotFoundError(f"Category with id={category_id} was not found")
    return category


def _check_lead_time(event_date: datetime, hours: int) -> datetime:
    """Return ``event_date`` in UTC, or raise if it is sooner than now + ``hours``."""
    event_date = to_utc(event_date)
    earliest = utcnow() + timedelta(hours=hours)
    if event_date < earliest:
        logger.warning("Rejected event date %s: must be at least %dh ahead", event_date.isoformat(), hours)
        raise ValidationError(f"Event date must be at least {hours} hour(s) from now")
    return event_date


def _parse_action(action_cls: type[enum.Enum], token: str):
    try:
        return action_cls(token)
    except ValueError:
        raise ConflictError(f"Invalid state action: {token}")


def _apply_patch(event: Event, patch: EventUpdate, category: Optional[Category], event_date: Optional[datetime]) -> None:
    """Overwrite every field present (non-null) in the patch; leave the rest untouched."""
    values: dict[str, Any] = patch.model_dump(include=set(_PLAIN_FIELDS), exclude_none=True)
    for field, value in values.items():
        setattr(event, field, value)
    if category is not None:
        event.category = category
    if event_date is not None:
        event.event_date = event_date
    if patch.location is not None:
        event.location = Location(patch.location.lat, patch.location.lon)


def create_event(db: Session, initiator_id: str, payload: EventCreate) -> Event:
    """Persist a new PENDING event for ``initiator_id``."""
    event_date = _check_lead_time(payload.event_date, settings.USER_LEAD_HOURS)
    initiator = _get_user_or_404(db, initiator_id)
    category = _get_category_or_404(db, payload.category)

    event = Event(
        annotation=payload.annotation,
        description=payload.description,
        event_date=event_date,
        location=Location(payload.location.lat, payload.location.lon),
        paid=payload.paid if payload.paid is not None else False,
        participant_limit=payload.participant_limit if payload.participant_limit is not None else 0,
        request_moderation=payload.request_moderation if payload.request_moderation is not None else True,
        state=EventState.PENDING,
        created_on=utcnow(),
        published_on=None,
        title=payload.title,
        category=category,
        initiator=initiator,
    )
    db.add(event)
    db.commit()
    db.refresh(event)
    logger.info("Created event '%s' (%s) by user %s", event.title, event.id, initiator_id)
    return event


def update_event_by_owner(db: Session, user_id: str, event_id: str, patch: EventUpdate) -> Event:
    """Initiator update: only while not PUBLISHED; review actions only."""
    event = get_event_or_404(db, event_id)

    if event.initiator_id != user_id:
        logger.warning("User %s tried to update event %s owned by %s", user_id, event_id, event.initiator_id)
        raise NotFoundError(f"Event with id={event_id} was not found")

    if event.state == EventState.PUBLISHED:
        logger.warning("User %s tried to update published event %s", user_id, event_id)
        raise ConflictError("Only pending or canceled events can be changed")

    event_date = None
    if patch.event_date is not None:
        event_date = _check_lead_time(patch.event_date, settings.USER_LEAD_HOURS)

    action = _parse_action(UserStateAction, patch.state_action) if patch.state_action is not None else None
    category = _get_category_or_404(db, patch.category) if patch.category is not None else None

    # A recognised action in the wrong state leaves the state unchanged
    if action is UserStateAction.SEND_TO_REVIEW:
        if event.state == EventState.CANCELED:
            event.state = EventState.PENDING
    elif action is UserStateAction.CANCEL_REVIEW:
        if event.state == EventState.PENDING:
            event.state = EventState.CANCELED

    _apply_patch(event, patch, category, event_date)
    db.commit()
    db.refresh(event)
    logger.info("Owner %s updated event %s (state=%s)", user_id, event_id, event.state.value)
    return event


def update_event_by_admin(db: Session, event_id: str, patch: EventUpdate) -> Event:
    """Administrator update: publish or reject, and edit fields in any state."""
    event = get_event_or_404(db, event_id)

    event_date = None
    if patch.event_date is not None:
        event_date = _check_lead_time(patch.event_date, settings.ADMIN_LEAD_HOURS)

    action = _parse_action(AdminStateAction, patch.state_action) if patch.state_action is not None else None
    category = _get_category_or_404(db, patch.category) if patch.category is not None else None

    if action is AdminStateAction.PUBLISH_EVENT:
        if event.state != EventState.PENDING:
            logger.warning("Cannot publish event %s from state %s", event_id, event.state.value)
            raise ConflictError(f"Cannot publish the event because it's not in the right state: {event.state.value}")
        event.state = EventState.PUBLISHED
        event.published_on = utcnow()
    elif action is AdminStateAction.REJECT_EVENT:
        if event.state == EventState.PUBLISHED:
            logger.warning("Cannot reject published event %s", event_id)
            raise ConflictError("Cannot reject the event because it has already been published")
        event.state = EventState.CANCELED

    _apply_patch(event, patch, category, event_date)
    db.commit()
    db.refresh(event)
    logger.info("Admin updated event %s (state=%s)", event_id, event.state.value)
    return event


def get_owner_event(db: Session, user_id: str, event_id: str) -> Event:
    """Return the event only when ``user_id`` is its initiator."""
    event = get_event_or_404(db, event_id)
    if event.initiator_id != user_id:
        raise NotFoundError(f"Event with id={event_id} was not found")
    return event


def list_owner_events(db: Session, user_id: str, offset: int = 0, limit: int = 10) -> list[Event]:
    """Initiator's events, latest event date first."""
    return (
        db.query(Event)
        .filter(Event.initiator_id == user_id)
        .order_by(Event.event_date.desc(), Event.id)
        .offset(offset)
        .limit(limit)
        .all()
    )


def get_published_event(db: Session, event_id: str) -> Event:
    """Public read path: unpublished events are invisible."""
    event = get_event_or_404(db, event_id)
    if event.state != EventState.PUBLISHED:
        raise NotFoundError(f"Event with id={event_id} was not found")
    return event
