"""Admin user API routes."""
import logging
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from ewm.database import get_db
from ewm.exceptions import ConflictError, NotFoundError
from ewm.models.event import Event
from ewm.models.request import ParticipationRequest
from ewm.models.user import User
from ewm.schemas.user import UserCreate, UserOut

logger = logging.getLogger(__name__)
router = APIRouter()


@router.post("/", response_model=UserOut, status_code=status.HTTP_201_CREATED)
def create_user(payload: UserCreate, db: Session = Depends(get_db)):
    """Register a user; emails are unique."""
    if db.query(User).filter(User.email == payload.email).first():
        raise ConflictError(f"Email already exists: {payload.email}")
    user = User(**payload.model_dump())
    db.add(user)
    db.commit()
    db.refresh(user)
    logger.info("Created user %s (%s)", user.id, user.email)
    return user


@router.get("/", response_model=list[UserOut])
def list_users(
    ids: list[str] | None = Query(None),
    offset: int = Query(0, alias="from", ge=0),
    size: int = Query(10, ge=1),
    db: Session = Depends(get_db),
):
    """List users, optionally restricted to ``ids``."""
    query = db.query(User)
    if ids:
        query = query.filter(User.id.in_(ids))
    return query.order_by(User.created_at, User.id).offset(offset).limit(size).all()


@router.delete("/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_user(user_id: str, db: Session = Depends(get_db)):
    user = db.query(User).filter(User.id == user_id).first()
    if not user:
        raise NotFoundError(f"User with id={user_id} was not found")
    if db.query(Event.id).filter(Event.initiator_id == user_id).first():
        raise ConflictError("Cannot delete a user who initiated events")
    if db.query(ParticipationRequest.id).filter(ParticipationRequest.requester_id == user_id).first():
        raise ConflictError("Cannot delete a user with participation requests")
    db.delete(user)
    db.commit()
    logger.info("Deleted user %s", user_id)
