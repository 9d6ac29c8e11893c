# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20261019v1
# ---------------------------------------------------------------------------
"""Pydantic request / response models for the category endpoints."""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field


# -- Requests --------------------------------------------------------------


class CreateCategoryRequest(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    parent_id: Optional[int] = None  # None creates a root


class UpdateCategoryRequest(BaseModel):
    # An explicit ``"parent_id": null`` moves the category to the top level;
    # leaving the key out keeps the current parent.
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    parent_id: Optional[int] = None


# -- Responses -------------------------------------------------------------
# Only one level of nesting is ever serialized: CategoryRow has no children.


class CategoryRow(BaseModel):
    id: int
    name: str
    parent_id: Optional[int] = None
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class CategoryTree(CategoryRow):
    children: List[CategoryRow] = []


class CategoryDetail(CategoryTree):
    parent: Optional[CategoryRow] = None
