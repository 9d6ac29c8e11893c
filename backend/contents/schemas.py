# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20261019v1
# ---------------------------------------------------------------------------
"""Pydantic request / response models for the content endpoints."""

from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, Field, field_validator

from core.query import Page

ContentStatus = Literal["active", "inactive", "pending", "deleted"]


# -- Requests --------------------------------------------------------------


class CreateContentRequest(BaseModel):
    title: str = Field(min_length=1, max_length=500)
    category: str = Field(min_length=1, max_length=100)
    sub_category: Optional[str] = Field(None, max_length=100)
    image_url: Optional[str] = Field(None, max_length=1000)
    service_link: Optional[str] = Field(None, max_length=1000)
    video_guid: Optional[str] = Field(None, max_length=100)
    description: Optional[str] = None
    tags: Optional[str] = Field(None, max_length=1000)
    duration: Optional[int] = Field(None, ge=0)
    file_size: Optional[int] = Field(None, ge=0)
    status: ContentStatus = "active"


class UpdateContentRequest(BaseModel):
    # Absent fields are left alone; an explicit null clears a nullable column
    title: Optional[str] = Field(None, min_length=1, max_length=500)
    category: Optional[str] = Field(None, min_length=1, max_length=100)
    sub_category: Optional[str] = Field(None, max_length=100)
    image_url: Optional[str] = Field(None, max_length=1000)
    service_link: Optional[str] = Field(None, max_length=1000)
    video_guid: Optional[str] = Field(None, max_length=100)
    description: Optional[str] = None
    tags: Optional[str] = Field(None, max_length=1000)
    duration: Optional[int] = Field(None, ge=0)
    file_size: Optional[int] = Field(None, ge=0)
    status: Optional[ContentStatus] = None
    is_visible: Optional[bool] = None
    is_popular: Optional[bool] = None

    @field_validator("title", "category", "status", "is_visible", "is_popular")
    @classmethod
    def _not_null(cls, v):
        if v is None:
            raise ValueError("may not be null")
        return v


class ContentFilters(BaseModel):
    category: Optional[str] = None
    sub_category: Optional[str] = None
    status: Optional[ContentStatus] = None
    is_visible: Optional[bool] = None
    is_popular: Optional[bool] = None


# -- Responses -------------------------------------------------------------


class ContentRow(BaseModel):
    id: int
    title: str
    image_url: Optional[str] = None
    category: str
    sub_category: Optional[str] = None
    service_link: Optional[str] = None
    video_guid: Optional[str] = None
    description: Optional[str] = None
    tags: Optional[str] = None
    is_visible: bool
    is_popular: bool
    status: str
    duration: Optional[int] = None
    file_size: Optional[int] = None
    view_count: int
    like_count: int
    comment_count: int
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


ContentPage = Page[ContentRow]


class ContentStats(BaseModel):
    totalContents: int
    activeContents: int
    pendingContents: int
    popularContents: int
    totalViews: int
    totalLikes: int


class ImageUploadResponse(BaseModel):
    url: str
    filename: str


class VideoUploadResponse(BaseModel):
    url: str
    guid: str


class FileDeleteResponse(BaseModel):
    deleted: bool
    message: str
