"""Pydantic schemas for participation requests."""
from datetime import datetime
from pydantic import BaseModel, Field

from ewm.models.request import RequestStatus


class RequestOut(BaseModel):
    id: str
    created: datetime
    event: str = Field(validation_alias="event_id")
    requester: str = Field(validation_alias="requester_id")
    status: RequestStatus

    model_config = {"from_attributes": True}


class RequestStatusUpdate(BaseModel):
    request_ids: list[str] = Field(min_length=1)
    status: RequestStatus


class RequestStatusUpdateResult(BaseModel):
    confirmed_requests: list[RequestOut] = []
    rejected_requests: list[RequestOut] = []
