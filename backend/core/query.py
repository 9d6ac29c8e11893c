# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20261019v1
# ---------------------------------------------------------------------------
"""
Listing contract shared by the user and content collections.

Pagination
----------
``page`` ≥ 1 and ``limit`` in [1, 100] are enforced by FastAPI (422) before a
handler runs; nothing is clamped.  ``offset = (page - 1) * limit`` and the
total is counted over the filtered set, so a page past the end comes back as
an empty ``data`` list with correct metadata.

Search
------
A non-blank ``search`` becomes an OR of case-insensitive substring matches
over a fixed set of columns per entity.  LIKE wildcards typed by the user
are escaped.

Sorting
-------
``sortBy`` is looked up in a per-entity allow-list and falls back to ``id``.
Client strings never reach ``ORDER BY`` directly.
"""

import math
from typing import Generic, Iterable, List, Optional, TypeVar

from fastapi import Query
from pydantic import BaseModel, Field, field_validator
from sqlalchemy import or_
from sqlalchemy.orm import Query as OrmQuery

DEFAULT_SORT_FIELD = "id"
MAX_LIMIT = 100

T = TypeVar("T")


class ListParams(BaseModel):
    page: int = Field(1, ge=1)
    limit: int = Field(10, ge=1, le=MAX_LIMIT)
    search: Optional[str] = None
    sort_by: str = DEFAULT_SORT_FIELD
    sort_order: str = "DESC"

    @field_validator("search")
    @classmethod
    def _blank_search_is_none(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return None
        v = v.strip()
        return v or None

    @field_validator("sort_order")
    @classmethod
    def _asc_or_desc(cls, v: str) -> str:
        return "ASC" if v and v.strip().upper() == "ASC" else "DESC"

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit


def list_params(
    page: int = Query(1, ge=1, description="1-based page number"),
    limit: int = Query(10, ge=1, le=MAX_LIMIT, description="Rows per page"),
    search: Optional[str] = Query(None, max_length=200),
    sortBy: str = Query(DEFAULT_SORT_FIELD, description="Column to order by"),
    sortOrder: str = Query("DESC", description="ASC or DESC"),
) -> ListParams:
    """Dependency: parse the common listing query-string parameters."""
    return ListParams(page=page, limit=limit, search=search, sort_by=sortBy, sort_order=sortOrder)


# -- Response shape ------------------------------------------------------------


class PaginationMeta(BaseModel):
    page: int
    limit: int
    total: int
    totalPages: int
    hasNext: bool
    hasPrev: bool


class Page(BaseModel, Generic[T]):
    data: List[T]
    pagination: PaginationMeta


def page_meta(page: int, limit: int, total: int) -> PaginationMeta:
    total_pages = math.ceil(total / limit)
    return PaginationMeta(
        page=page,
        limit=limit,
        total=total,
        totalPages=total_pages,
        hasNext=page < total_pages,
        hasPrev=page > 1,
    )


# -- Query building ------------------------------------------------------------


def resolve_sort(sort_by: Optional[str], allowed: Iterable[str]) -> str:
    return sort_by if sort_by in set(allowed) else DEFAULT_SORT_FIELD


def _contains_pattern(text: str) -> str:
    escaped = text.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"


def search_clause(columns, search: Optional[str]):
    """OR of ILIKE matches over *columns*, or None when there is nothing to match."""
    if not search or not search.strip():
        return None
    pattern = _contains_pattern(search.strip())
    return or_(*(col.ilike(pattern, escape="\\") for col in columns))


def paginate(query: OrmQuery, model, params: ListParams, allowed_sort: Iterable[str]) -> dict:
    """
    Apply ordering and the page window to an already-filtered *query*.

    Returns ``{"data": rows, "pagination": PaginationMeta}``.
    """
    total = query.order_by(None).count()

    field = resolve_sort(params.sort_by, allowed_sort)
    column = getattr(model, field)
    ascending = params.sort_order == "ASC"
    order = [column.asc() if ascending else column.desc()]
    if field != DEFAULT_SORT_FIELD:
        # Stable pages when the sort column has ties
        order.append(model.id.asc() if ascending else model.id.desc())

    rows = query.order_by(*order).offset(params.offset).limit(params.limit).all()
    return {"data": rows, "pagination": page_meta(params.page, params.limit, total)}
