import uuid
from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

HolidayCategory = Literal["federal", "fun", "company"]

DATE_PATTERN = r"^\d{4}-\d{2}-\d{2}$"


def _check_calendar_date(value: str | None) -> str | None:
    """Reject strings that match the pattern but name no real day."""
    if value is not None:
        try:
            datetime.strptime(value, "%Y-%m-%d")
        except ValueError:
            raise ValueError(f"{value} is not a valid calendar date") from None
    return value


class HolidayCreate(BaseModel):
    title: str = Field(min_length=1, max_length=255)
    date: str = Field(pattern=DATE_PATTERN)
    category: HolidayCategory
    color: str | None = None
    visible: bool = True
    recurring: bool = False

    @field_validator("date")
    @classmethod
    def validate_date(cls, v: str) -> str:
        return _check_calendar_date(v)


class HolidayUpdate(BaseModel):
    title: str | None = Field(None, min_length=1, max_length=255)
    date: str | None = Field(None, pattern=DATE_PATTERN)
    category: HolidayCategory | None = None
    color: str | None = None
    visible: bool | None = None
    recurring: bool | None = None

    @field_validator("date")
    @classmethod
    def validate_date(cls, v: str | None) -> str | None:
        return _check_calendar_date(v)


class VisibilityUpdate(BaseModel):
    visible: bool


class HolidayResponse(BaseModel):
    id: uuid.UUID
    title: str
    date: str
    category: str
    color: str
    source: str
    visible: bool
    recurring: bool
    created_at: datetime | None = None
    updated_at: datetime | None = None
    model_config = ConfigDict(from_attributes=True)


class HolidayStats(BaseModel):
    total: int
    federal: int
    fun: int
    company: int
    hidden: int
    year: str
