from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

ImagePosition = Literal[
    "center-top",
    "center-bottom",
    "left-top",
    "left-bottom",
    "right-top",
    "right-bottom",
]


def _not_blank(value: str) -> str:
    if not value or not value.strip():
        raise ValueError("must not be empty")
    return value


class CustomImage(BaseModel):
    url: str
    position: ImagePosition


class EventPayload(BaseModel):
    name: str = Field(..., max_length=255)
    description: Optional[str] = None
    message: Optional[str] = None
    photos: Optional[List[str]] = None
    location: Optional[str] = Field(default=None, max_length=500)
    date: Optional[datetime] = None
    custom_images: Optional[List[CustomImage]] = None

    @field_validator("name")
    @classmethod
    def name_not_blank(cls, value: str) -> str:
        return _not_blank(value)


class EventCreate(EventPayload):
    date: datetime


class GuestCreate(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    event_id: int = Field(..., alias="eventId")
    name: str = Field(..., max_length=255)

    @field_validator("name")
    @classmethod
    def name_not_blank(cls, value: str) -> str:
        return _not_blank(value)


class GuestResponseUpdate(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    token: str = Field(..., min_length=1)
    confirmed: bool = False
    num_people: Optional[int] = Field(default=None, alias="numPeople")
