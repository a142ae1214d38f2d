"""Storage collaborator: thin query helpers over a SQLAlchemy session.

Services call these instead of building queries inline wherever the same
lookup is needed by more than one operation.
"""
from typing import Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from ewm.models.category import Category
from ewm.models.event import Event
from ewm.models.request import ParticipationRequest, RequestStatus
from ewm.models.user import User


def get_event(db: Session, event_id: str, lock: bool = False) -> Optional[Event]:
    """Return an event by id; ``lock=True`` takes a row lock for the transaction."""
    query = db.query(Event).filter(Event.id == event_id)
    if lock:
        query = query.with_for_update(of=Event)
    return query.first()


def get_user(db: Session, user_id: str) -> Optional[User]:
    return db.query(User).filter(User.id == user_id).first()


def get_category(db: Session, category_id: str) -> Optional[Category]:
    return db.query(Category).filter(Category.id == category_id).first()


def get_request(db: Session, request_id: str) -> Optional[ParticipationRequest]:
    return db.query(ParticipationRequest).filter(ParticipationRequest.id == request_id).first()


def count_requests_by_event_and_status(db: Session, event_id: str, status: RequestStatus) -> int:
    count = (
        db.query(func.count(ParticipationRequest.id))
        .filter(ParticipationRequest.event_id == event_id, ParticipationRequest.status == status)
        .scalar()
    )
    return int(count or 0)


def count_confirmed_by_events(db: Session, event_ids: list[str]) -> dict[str, int]:
    """Confirmed-request counts for several events in one query."""
    if not event_ids:
        return {}
    rows = (
        db.query(ParticipationRequest.event_id, func.count(ParticipationRequest.id))
        .filter(
            ParticipationRequest.event_id.in_(event_ids),
            ParticipationRequest.status == RequestStatus.CONFIRMED,
        )
        .group_by(ParticipationRequest.event_id)
        .all()
    )
    return {event_id: int(count) for event_id, count in rows}


def find_requests_by_event_and_status(
    db: Session, event_id: str, status: RequestStatus
) -> list[ParticipationRequest]:
    return (
        db.query(ParticipationRequest)
        .filter(ParticipationRequest.event_id == event_id, ParticipationRequest.status == status)
        .order_by(ParticipationRequest.created)
        .all()
    )


def exists_active_request(db: Session, event_id: str, requester_id: str) -> bool:
    """True when the requester holds a non-canceled request for the event."""
    query = db.query(ParticipationRequest.id).filter(
        ParticipationRequest.event_id == event_id,
        ParticipationRequest.requester_id == requester_id,
        ParticipationRequest.status != RequestStatus.CANCELED,
    )
    return db.query(query.exists()).scalar()
