"""Participation request service: admission control for events.

Responsibilities:
- Create: ordered precondition checks, then auto-confirm or queue for moderation
- Cancel: requester-only, confirmed seats cannot be self-released
- Batch status change by the event initiator (or an administrator), with
  automatic rejection of the remaining queue once capacity is filled

Create and the batch change lock the event row for the rest of the
transaction, so the confirmed count they read cannot move underneath them.
"""
import enum
import logging
from typing import Optional

from sqlalchemy.orm import Session

from ewm import repository
from ewm.exceptions import ConflictError, NotFoundError, ValidationError
from ewm.models.event import Event, EventState
from ewm.models.request import ParticipationRequest, RequestStatus
from ewm.timeutils import utcnow

logger = logging.getLogger(__name__)


class ActingAs(str, enum.Enum):
    """Capability under which a batch status change is performed."""

    OWNER = "OWNER"
    ADMIN = "ADMIN"


def _has_capacity_limit(event: Event) -> bool:
    return event.participant_limit > 0


def create_request(db: Session, requester_id: str, event_id: Optional[str]) -> ParticipationRequest:
    """Ask to join ``event_id``; the first failing check wins."""
    if not event_id:
        raise ValidationError("Event id is required")

    if not repository.get_user(db, requester_id):
        raise NotFoundError(f"User with id={requester_id} was not found")

    event = repository.get_event(db, event_id, lock=True)
    if not event:
        raise NotFoundError(f"Event with id={event_id} was not found")

    if event.initiator_id == requester_id:
        logger.warning("User %s tried to join own event %s", requester_id, event_id)
        raise ConflictError("Cannot request participation in your own event")

    if event.state != EventState.PUBLISHED:
        logger.warning("User %s tried to join unpublished event %s (state=%s)", requester_id, event_id, event.state.value)
        raise ConflictError("Event is not published")

    if repository.exists_active_request(db, event_id, requester_id):
        logger.warning("User %s already has an active request for event %s", requester_id, event_id)
        raise ConflictError("Already requested participation in this event")

    if _has_capacity_limit(event):
        confirmed = repository.count_requests_by_event_and_status(db, event_id, RequestStatus.CONFIRMED)
        if confirmed >= event.participant_limit:
            logger.warning("Participant limit reached for event %s: %d/%d", event_id, confirmed, event.participant_limit)
            raise ConflictError("The participant limit has been reached")

    # Uncapped or unmoderated events skip the approval queue
    if not _has_capacity_limit(event) or not event.request_moderation:
        status = RequestStatus.CONFIRMED
    else:
        status = RequestStatus.PENDING

    request = ParticipationRequest(
        event_id=event_id,
        requester_id=requester_id,
        status=status,
        created=utcnow(),
    )
    db.add(request)
    db.commit()
    db.refresh(request)
    logger.info("Created request %s for event %s by user %s (status=%s)", request.id, event_id, requester_id, status.value)
    return request


def cancel_request(db: Session, user_id: str, request_id: str) -> ParticipationRequest:
    """Requester withdraws a request that has not been confirmed."""
    request = repository.get_request(db, request_id)
    if not request or request.requester_id != user_id:
        if request:
            logger.warning("User %s tried to cancel request %s of user %s", user_id, request_id, request.requester_id)
        raise NotFoundError(f"Request with id={request_id} was not found")

    if request.status == RequestStatus.CONFIRMED:
        logger.warning("User %s tried to cancel confirmed request %s", user_id, request_id)
        raise ConflictError("Confirmed requests cannot be canceled")

    request.status = RequestStatus.CANCELED
    db.commit()
    db.refresh(request)
    logger.info("Canceled request %s by user %s", request_id, user_id)
    return request


def list_user_requests(db: Session, user_id: str) -> list[ParticipationRequest]:
    if not repository.get_user(db, user_id):
        raise NotFoundError(f"User with id={user_id} was not found")
    return (
        db.query(ParticipationRequest)
        .filter(ParticipationRequest.requester_id == user_id)
        .order_by(ParticipationRequest.created)
        .all()
    )


def list_event_requests(db: Session, user_id: str, event_id: str) -> list[ParticipationRequest]:
    """All requests for an event, visible to its initiator only."""
    event = repository.get_event(db, event_id)
    if not event or event.initiator_id != user_id:
        raise NotFoundError(f"Event with id={event_id} was not found")
    return (
        db.query(ParticipationRequest)
        .filter(ParticipationRequest.event_id == event_id)
        .order_by(ParticipationRequest.created)
        .all()
    )


def change_request_statuses(
    db: Session,
    event_id: str,
    request_ids: list[str],
    target: RequestStatus,
    actor_id: Optional[str] = None,
    acting_as: ActingAs = ActingAs.OWNER,
) -> tuple[list[ParticipationRequest], list[ParticipationRequest]]:
    """Confirm or reject a batch of PENDING requests.

    Every precondition is checked before any row changes; a failure aborts
    the whole batch. When a confirmation fills the event, every request
    still PENDING for it is rejected as well.

    Returns ``(confirmed, rejected)``, where ``rejected`` holds explicit
    rejections followed by the automatic ones.
    """
    if target not in (RequestStatus.CONFIRMED, RequestStatus.REJECTED):
        raise ValidationError(f"Status must be CONFIRMED or REJECTED, got {target.value}")

    event = repository.get_event(db, event_id, lock=True)
    if not event:
        raise NotFoundError(f"Event with id={event_id} was not found")

    if acting_as is ActingAs.OWNER and event.initiator_id != actor_id:
        logger.warning("User %s tried to moderate requests of event %s", actor_id, event_id)
        raise NotFoundError(f"Event with id={event_id} was not found")

    requests: list[ParticipationRequest] = []
    for request_id in dict.fromkeys(request_ids):
        request = repository.get_request(db, request_id)
        if not request or request.event_id != event_id:
            raise NotFoundError(f"Request with id={request_id} was not found")
        requests.append(request)

    if any(r.status != RequestStatus.PENDING for r in requests):
        logger.warning("Batch for event %s contains non-PENDING requests", event_id)
        raise ConflictError("Request must have status PENDING")

    confirming = target == RequestStatus.CONFIRMED
    limited = confirming and _has_capacity_limit(event)
    confirmed_before = 0
    if limited:
        confirmed_before = repository.count_requests_by_event_and_status(db, event_id, RequestStatus.CONFIRMED)
        if confirmed_before >= event.participant_limit:
            logger.warning("Participant limit already reached for event %s", event_id)
            raise ConflictError("The participant limit has been reached")
        if confirmed_before + len(requests) > event.participant_limit:
            logger.warning(
                "Batch of %d would exceed limit for event %s (%d/%d)",
                len(requests), event_id, confirmed_before, event.participant_limit,
            )
            raise ConflictError("The participant limit has been reached")

    confirmed: list[ParticipationRequest] = []
    rejected: list[ParticipationRequest] = []
    for request in requests:
        request.status = target
        (confirmed if confirming else rejected).append(request)
    db.flush()

    if limited and confirmed_before + len(confirmed) >= event.participant_limit:
        overflow = repository.find_requests_by_event_and_status(db, event_id, RequestStatus.PENDING)
        for request in overflow:
            request.status = RequestStatus.REJECTED
        db.flush()
        rejected.extend(overflow)
        logger.info("Auto-rejected %d pending requests for full event %s", len(overflow), event_id)

    db.commit()
    for request in confirmed + rejected:
        db.refresh(request)
    logger.info(
        "%s changed requests for event %s: confirmed=%d, rejected=%d",
        acting_as.value, event_id, len(confirmed), len(rejected),
    )
    return confirmed, rejected
