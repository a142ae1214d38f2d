"""Event ORM model and its lifecycle enums."""
import uuid
import enum
from dataclasses import dataclass
from sqlalchemy import Column, String, Text, DateTime, Integer, Boolean, Float, ForeignKey, Enum as SAEnum
from sqlalchemy.orm import relationship, composite
from ewm.database import Base


class EventState(str, enum.Enum):
    PENDING = "PENDING"
    PUBLISHED = "PUBLISHED"
    CANCELED = "CANCELED"


class UserStateAction(str, enum.Enum):
    SEND_TO_REVIEW = "SEND_TO_REVIEW"
    CANCEL_REVIEW = "CANCEL_REVIEW"


class AdminStateAction(str, enum.Enum):
    PUBLISH_EVENT = "PUBLISH_EVENT"
    REJECT_EVENT = "REJECT_EVENT"


@dataclass
class Location:
    lat: float
    lon: float


class Event(Base):
    __tablename__ = "events"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    annotation = Column(String(2000), nullable=False)
    description = Column(Text, nullable=False)
    event_date = Column(DateTime(timezone=True), nullable=False)
    location_lat = Column(Float, nullable=False)
    location_lon = Column(Float, nullable=False)
    paid = Column(Boolean, nullable=False, default=False)
    participant_limit = Column(Integer, nullable=False, default=0)
    request_moderation = Column(Boolean, nullable=False, default=True)
    state = Column(SAEnum(EventState), nullable=False, default=EventState.PENDING)
    created_on = Column(DateTime(timezone=True), nullable=False)
    published_on = Column(DateTime(timezone=True), nullable=True)
    title = Column(String(120), nullable=False)
    category_id = Column(String(36), ForeignKey("categories.id"), nullable=False)
    initiator_id = Column(String(36), ForeignKey("users.id"), nullable=False, index=True)

    location = composite(Location, location_lat, location_lon)

    category = relationship("Category", lazy="joined", innerjoin=True)
    initiator = relationship("User", lazy="joined", innerjoin=True)
