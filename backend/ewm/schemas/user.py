"""Pydantic schemas for Users."""
from datetime import datetime
from typing import Optional
from pydantic import BaseModel, EmailStr, Field


class UserCreate(BaseModel):
    name: str = Field(min_length=2, max_length=250)
    email: EmailStr = Field(max_length=254)


class UserOut(BaseModel):
    id: str
    name: str
    email: str
    created_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class UserShortOut(BaseModel):
    id: str
    name: str

    model_config = {"from_attributes": True}
