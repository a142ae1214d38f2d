"""Participation request API routes."""
import logging
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from ewm.database import get_db
from ewm.schemas.request import RequestOut, RequestStatusUpdate, RequestStatusUpdateResult
from ewm.services import request_service
from ewm.services.request_service import ActingAs

logger = logging.getLogger(__name__)
router = APIRouter()
event_router = APIRouter()
admin_router = APIRouter()


def _result(confirmed, rejected) -> RequestStatusUpdateResult:
    return RequestStatusUpdateResult(
        confirmed_requests=[RequestOut.model_validate(r) for r in confirmed],
        rejected_requests=[RequestOut.model_validate(r) for r in rejected],
    )


@router.get("/", response_model=list[RequestOut])
def list_my_requests(user_id: str, db: Session = Depends(get_db)):
    return request_service.list_user_requests(db, user_id)


@router.post("/", response_model=RequestOut, status_code=status.HTTP_201_CREATED)
def create_request(
    user_id: str,
    event_id: str | None = Query(None),
    db: Session = Depends(get_db),
):
    """Request participation; status depends on the event's moderation and limit."""
    return request_service.create_request(db, user_id, event_id)


@router.patch("/{request_id}/cancel", response_model=RequestOut)
def cancel_request(user_id: str, request_id: str, db: Session = Depends(get_db)):
    return request_service.cancel_request(db, user_id, request_id)


@event_router.get("/", response_model=list[RequestOut])
def list_event_requests(user_id: str, event_id: str, db: Session = Depends(get_db)):
    """Requests for an event, visible to its initiator."""
    return request_service.list_event_requests(db, user_id, event_id)


@event_router.patch("/", response_model=RequestStatusUpdateResult)
def change_request_statuses(
    user_id: str,
    event_id: str,
    payload: RequestStatusUpdate,
    db: Session = Depends(get_db),
):
    """Confirm or reject a batch of pending requests for the initiator's event."""
    confirmed, rejected = request_service.change_request_statuses(
        db,
        event_id=event_id,
        request_ids=payload.request_ids,
        target=payload.status,
        actor_id=user_id,
        acting_as=ActingAs.OWNER,
    )
    return _result(confirmed, rejected)


@admin_router.patch("/", response_model=RequestStatusUpdateResult)
def admin_change_request_statuses(
    event_id: str,
    payload: RequestStatusUpdate,
    db: Session = Depends(get_db),
):
    """Same batch rules as the initiator path, without the ownership check."""
    confirmed, rejected = request_service.change_request_statuses(
        db,
        event_id=event_id,
        request_ids=payload.request_ids,
        target=payload.status,
        acting_as=ActingAs.ADMIN,
    )
    return _result(confirmed, rejected)
