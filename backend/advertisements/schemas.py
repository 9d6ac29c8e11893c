# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20261019v1
# ---------------------------------------------------------------------------
"""Pydantic request / response models for the advertisement endpoints."""

from datetime import datetime, timezone
from typing import Optional

from pydantic import BaseModel, Field, field_validator


def to_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Aware values are converted to UTC; naive values are taken as UTC."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


# -- Requests --------------------------------------------------------------


class _WindowFields(BaseModel):
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None

    @field_validator("start_date", "end_date")
    @classmethod
    def _normalise(cls, v: Optional[datetime]) -> Optional[datetime]:
        return to_utc(v)


class CreateAdvertisementRequest(_WindowFields):
    title: str = Field(min_length=1, max_length=500)
    link_url: str = Field(min_length=1, max_length=1000)
    image_url: Optional[str] = Field(None, max_length=1000)
    description: Optional[str] = None
    priority: int = 0
    is_active: bool = True


class UpdateAdvertisementRequest(_WindowFields):
    # Absent fields are left alone; an explicit null clears a nullable column
    title: Optional[str] = Field(None, min_length=1, max_length=500)
    link_url: Optional[str] = Field(None, min_length=1, max_length=1000)
    image_url: Optional[str] = Field(None, max_length=1000)
    description: Optional[str] = None
    priority: Optional[int] = None
    is_active: Optional[bool] = None

    @field_validator("title", "link_url", "priority", "is_active")
    @classmethod
    def _not_null(cls, v):
        if v is None:
            raise ValueError("may not be null")
        return v


# -- Responses -------------------------------------------------------------


class AdvertisementRow(BaseModel):
    id: int
    title: str
    image_url: Optional[str] = None
    link_url: str
    description: Optional[str] = None
    priority: int
    is_active: bool
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    click_count: int
    impression_count: int
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class AdvertisementActionResponse(BaseModel):
    message: str
    advertisement: AdvertisementRow


class CounterResponse(BaseModel):
    message: str
    id: int


class AdvertisementStats(BaseModel):
    totalAds: int
    activeAds: int
    inactiveAds: int
    totalClicks: int
    totalImpressions: int
