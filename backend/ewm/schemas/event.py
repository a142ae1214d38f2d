"""Pydantic schemas for Events."""
from __future__ import annotations
from datetime import datetime
from typing import Optional
from pydantic import BaseModel, Field

from ewm.models.event import EventState
from ewm.schemas.category import CategoryOut
from ewm.schemas.user import UserShortOut


class LocationIn(BaseModel):
    lat: float = Field(ge=-90, le=90)
    lon: float = Field(ge=-180, le=180)


class LocationOut(BaseModel):
    lat: float
    lon: float

    model_config = {"from_attributes": True}


class EventCreate(BaseModel):
    annotation: str = Field(min_length=20, max_length=2000)
    category: str
    description: str = Field(min_length=20, max_length=7000)
    event_date: datetime
    location: LocationIn
    paid: Optional[bool] = None
    participant_limit: Optional[int] = Field(default=None, ge=0)
    request_moderation: Optional[bool] = None
    title: str = Field(min_length=3, max_length=120)


class EventUpdate(BaseModel):
    """Partial update: only non-null fields are applied."""

    annotation: Optional[str] = Field(default=None, min_length=20, max_length=2000)
    category: Optional[str] = None
    description: Optional[str] = Field(default=None, min_length=20, max_length=7000)
    event_date: Optional[datetime] = None
    location: Optional[LocationIn] = None
    paid: Optional[bool] = None
    participant_limit: Optional[int] = Field(default=None, ge=0)
    request_moderation: Optional[bool] = None
    state_action: Optional[str] = None  # parsed per actor in event_service
    title: Optional[str] = Field(default=None, min_length=3, max_length=120)


class EventShortOut(BaseModel):
    id: str
    annotation: str
    category: CategoryOut
    confirmed_requests: int = 0
    event_date: datetime
    initiator: UserShortOut
    paid: bool
    title: str
    views: int = 0

    model_config = {"from_attributes": True}


class EventFullOut(EventShortOut):
    created_on: datetime
    description: str
    location: LocationOut
    participant_limit: int
    published_on: Optional[datetime] = None
    request_moderation: bool
    state: EventState
