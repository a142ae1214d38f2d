"""Participation request ORM model."""
import uuid
import enum
from sqlalchemy import Column, String, DateTime, ForeignKey, Index, Enum as SAEnum
from ewm.database import Base


class RequestStatus(str, enum.Enum):
    PENDING = "PENDING"
    CONFIRMED = "CONFIRMED"
    REJECTED = "REJECTED"
    CANCELED = "CANCELED"


class ParticipationRequest(Base):
    __tablename__ = "requests"
    __table_args__ = (
        Index("ix_requests_event_status", "event_id", "status"),
    )

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    event_id = Column(String(36), ForeignKey("events.id"), nullable=False)
    requester_id = Column(String(36), ForeignKey("users.id"), nullable=False, index=True)
    status = Column(SAEnum(RequestStatus), nullable=False, default=RequestStatus.PENDING)
    created = Column(DateTime(timezone=True), nullable=False)
