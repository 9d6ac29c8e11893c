# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20261019v1
# ---------------------------------------------------------------------------
"""
Advertisement persistence.

An advertisement is *active* when its ``is_active`` switch is on and ``now``
falls inside its optional ``[start_date, end_date]`` window (both ends
inclusive, a missing end is unbounded).  The window is evaluated in SQL so
stored and bound datetimes are compared by the database, in UTC.
"""

from datetime import datetime, timezone
from typing import List, Optional, Tuple

from sqlalchemy import and_, func, or_
from sqlalchemy.orm import Session

from core.config import settings
from core.errors import NotFoundError, UpstreamError, ValidationError
from core.logger import logger
from core.media import BunnyClient, filename_from_url
from models.advertisement import Advertisement
from advertisements.schemas import CreateAdvertisementRequest, UpdateAdvertisementRequest, to_utc

_DISPLAY_ORDER = (Advertisement.priority.desc(), Advertisement.created_at.desc())


def find_all(db: Session) -> List[Advertisement]:
    return db.query(Advertisement).order_by(*_DISPLAY_ORDER).all()


def find_active(db: Session, now: Optional[datetime] = None) -> List[Advertisement]:
    now = to_utc(now) if now is not None else datetime.now(timezone.utc)
    return (
        db.query(Advertisement)
        .filter(
            Advertisement.is_active.is_(True),
            and_(
                or_(Advertisement.start_date.is_(None), Advertisement.start_date <= now),
                or_(Advertisement.end_date.is_(None), Advertisement.end_date >= now),
            ),
        )
        .order_by(*_DISPLAY_ORDER)
        .all()
    )


def find_one(db: Session, ad_id: int) -> Advertisement:
    ad = db.query(Advertisement).filter(Advertisement.id == ad_id).first()
    if not ad:
        raise NotFoundError("Advertisement not found")
    return ad


def _check_window(start: Optional[datetime], end: Optional[datetime]) -> None:
    start, end = to_utc(start), to_utc(end)
    if start is not None and end is not None and start > end:
        raise ValidationError("start_date must not be after end_date")


def create_advertisement(db: Session, body: CreateAdvertisementRequest) -> Advertisement:
    _check_window(body.start_date, body.end_date)
    ad = Advertisement(**body.model_dump(), click_count=0, impression_count=0)
    db.add(ad)
    db.flush()
    db.refresh(ad)
    return ad


def update_advertisement(db: Session, ad_id: int, body: UpdateAdvertisementRequest) -> Advertisement:
    ad = find_one(db, ad_id)

    changes = body.model_dump(exclude_unset=True)
    _check_window(changes.get("start_date", ad.start_date), changes.get("end_date", ad.end_date))

    for field, value in changes.items():
        setattr(ad, field, value)
    db.flush()
    db.refresh(ad)
    return ad


def delete_advertisement(db: Session, ad_id: int) -> Tuple[str, Optional[str]]:
    """Delete the row.  Returns its title and image URL for the follow-up steps."""
    ad = find_one(db, ad_id)
    title, image_url = ad.title, ad.image_url
    db.delete(ad)
    db.flush()
    return title, image_url


def discard_image(media: BunnyClient, ad_id: int, image_url: Optional[str]) -> None:
    """
    Best-effort delete of a removed advertisement's image.  Call only after
    the row delete is committed; a failure is logged and not raised.
    """
    filename = filename_from_url(image_url)
    if not filename:
        return
    try:
        media.delete_image(
            settings.bunny_advertisement_image_zone,
            settings.bunny_advertisement_image_access_key,
            filename,
        )
    except UpstreamError as exc:
        logger.warning("Image %s of deleted advertisement %s was not removed: %s", filename, ad_id, exc.message)


def toggle_active(db: Session, ad_id: int) -> Advertisement:
    ad = find_one(db, ad_id)
    ad.is_active = not ad.is_active
    db.flush()
    db.refresh(ad)
    return ad


def _increment(db: Session, ad_id: int, column) -> None:
    # UPDATE ... SET col = col + 1
    updated = (
        db.query(Advertisement)
        .filter(Advertisement.id == ad_id)
        .update({column: column + 1}, synchronize_session=False)
    )
    if not updated:
        raise NotFoundError("Advertisement not found")


def increment_clicks(db: Session, ad_id: int) -> None:
    _increment(db, ad_id, Advertisement.click_count)


def increment_impressions(db: Session, ad_id: int) -> None:
    _increment(db, ad_id, Advertisement.impression_count)


def get_stats(db: Session) -> dict:
    total = db.query(func.count(Advertisement.id)).scalar() or 0
    active = db.query(func.count(Advertisement.id)).filter(Advertisement.is_active.is_(True)).scalar() or 0
    clicks, impressions = db.query(
        func.coalesce(func.sum(Advertisement.click_count), 0),
        func.coalesce(func.sum(Advertisement.impression_count), 0),
    ).one()
    return {
        "totalAds": total,
        "activeAds": active,
        "inactiveAds": total - active,
        "totalClicks": int(clicks),
        "totalImpressions": int(impressions),
    }


def clear_image_url(db: Session, url: str) -> int:
    cleared = (
        db.query(Advertisement)
        .filter(Advertisement.image_url == url)
        .update({Advertisement.image_url: None}, synchronize_session=False)
    )
    db.flush()
    return cleared
