"""Pydantic schemas for Categories."""
from pydantic import BaseModel, Field


class CategoryCreate(BaseModel):
    name: str = Field(min_length=1, max_length=50)


class CategoryOut(BaseModel):
    id: str
    name: str

    model_config = {"from_attributes": True}
