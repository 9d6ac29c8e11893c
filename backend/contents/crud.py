# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20261019v1
# ---------------------------------------------------------------------------
"""Content persistence: filtered listing, CRUD, toggles and dashboard stats."""

from sqlalchemy import func
from sqlalchemy.orm import Session

from core.errors import NotFoundError
from core.query import ListParams, paginate, search_clause
from models.content import Content
from contents.schemas import ContentFilters, CreateContentRequest, UpdateContentRequest

CONTENT_SORT_FIELDS = (
    "id", "title", "category", "view_count", "like_count", "comment_count",
    "is_popular", "created_at", "updated_at",
)
CONTENT_SEARCH_COLUMNS = (Content.title, Content.description, Content.tags)


def list_contents(db: Session, params: ListParams, filters: ContentFilters) -> dict:
    query = db.query(Content)

    clause = search_clause(CONTENT_SEARCH_COLUMNS, params.search)
    if clause is not None:
        query = query.filter(clause)

    # Exact-match filters, AND-ed with the search
    for field, value in filters.model_dump(exclude_none=True).items():
        query = query.filter(getattr(Content, field) == value)

    return paginate(query, Content, params, CONTENT_SORT_FIELDS)


def get_content(db: Session, content_id: int) -> Content:
    content = db.query(Content).filter(Content.id == content_id).first()
    if not content:
        raise NotFoundError("Content not found")
    return content


def create_content(db: Session, body: CreateContentRequest) -> Content:
    content = Content(**body.model_dump(), is_visible=True, is_popular=False)
    db.add(content)
    db.flush()
    db.refresh(content)
    return content


def update_content(db: Session, content_id: int, body: UpdateContentRequest) -> Content:
    content = get_content(db, content_id)
    for field, value in body.model_dump(exclude_unset=True).items():
        setattr(content, field, value)
    db.flush()
    db.refresh(content)
    return content


def soft_delete(db: Session, content_id: int) -> Content:
    """Mark the row ``deleted``; it stays listable with ``status=deleted``."""
    content = get_content(db, content_id)
    content.status = "deleted"
    db.flush()
    db.refresh(content)
    return content


def hard_delete(db: Session, content_id: int) -> str:
    content = get_content(db, content_id)
    title = content.title
    db.delete(content)
    db.flush()
    return title


def toggle_popular(db: Session, content_id: int) -> Content:
    content = get_content(db, content_id)
    content.is_popular = not content.is_popular
    db.flush()
    db.refresh(content)
    return content


def toggle_visibility(db: Session, content_id: int) -> Content:
    content = get_content(db, content_id)
    content.is_visible = not content.is_visible
    db.flush()
    db.refresh(content)
    return content


def get_stats(db: Session) -> dict:
    def count(*criteria) -> int:
        return db.query(func.count(Content.id)).filter(*criteria).scalar() or 0

    views, likes = db.query(
        func.coalesce(func.sum(Content.view_count), 0),
        func.coalesce(func.sum(Content.like_count), 0),
    ).one()

    return {
        "totalContents": count(),
        "activeContents": count(Content.status == "active"),
        "pendingContents": count(Content.status == "pending"),
        "popularContents": count(Content.is_popular.is_(True)),
        "totalViews": int(views),
        "totalLikes": int(likes),
    }


# -- Media references --------------------------------------------------------


def clear_image_url(db: Session, url: str) -> int:
    """Null out ``image_url`` wherever it equals *url*.  Returns the row count."""
    cleared = (
        db.query(Content)
        .filter(Content.image_url == url)
        .update({Content.image_url: None}, synchronize_session=False)
    )
    db.flush()
    return cleared


def clear_video(db: Session, guid: str) -> int:
    """Null out ``video_guid`` and ``service_link`` on rows that used *guid*."""
    cleared = (
        db.query(Content)
        .filter(Content.video_guid == guid)
        .update({Content.video_guid: None, Content.service_link: None}, synchronize_session=False)
    )
    db.flush()
    return cleared
