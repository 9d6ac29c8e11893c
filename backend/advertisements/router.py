# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20261019v1
# ---------------------------------------------------------------------------
"""
Advertisement endpoints.

Public: the active list, a single ad, and the click / impression counters
the site calls when an ad is shown or followed.  Everything else requires
``require_admin``.
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, File, Request, UploadFile, status
from sqlalchemy.orm import Session

from database import get_db
from core import audit
from core.config import settings
from core.errors import UpstreamError
from core.logger import logger
from core.media import IMAGE_TYPES, MAX_IMAGE_BYTES, BunnyClient, cdn_url, get_media_client, read_upload
from core.security import require_admin
from core.sessions import SessionEntry
from advertisements import crud
from advertisements.schemas import (
    AdvertisementActionResponse,
    AdvertisementRow,
    AdvertisementStats,
    CounterResponse,
    CreateAdvertisementRequest,
    UpdateAdvertisementRequest,
)
from contents.schemas import FileDeleteResponse, ImageUploadResponse

router = APIRouter(prefix="/advertisements", tags=["advertisements"])


# ---------------------------------------------------------------------------
# Public
# ---------------------------------------------------------------------------


@router.get("/active", response_model=List[AdvertisementRow])
def list_active(db: Session = Depends(get_db)):
    """Ads whose switch is on and whose date window contains now."""
    return crud.find_active(db)


# ---------------------------------------------------------------------------
# Admin: listing, stats, media
# ---------------------------------------------------------------------------


@router.get("", response_model=List[AdvertisementRow])
def list_advertisements(
    admin: SessionEntry = Depends(require_admin),
    db: Session = Depends(get_db),
):
    return crud.find_all(db)


@router.get("/admin/stats", response_model=AdvertisementStats)
def advertisement_stats(
    admin: SessionEntry = Depends(require_admin),
    db: Session = Depends(get_db),
):
    return crud.get_stats(db)


@router.post("/upload/advertisement-image", response_model=ImageUploadResponse)
def upload_image(
    request: Request,
    file: Optional[UploadFile] = File(None),
    admin: SessionEntry = Depends(require_admin),
    media: BunnyClient = Depends(get_media_client),
    db: Session = Depends(get_db),
):
    data = read_upload(file, IMAGE_TYPES, "image", max_bytes=MAX_IMAGE_BYTES)
    result = media.upload_image(
        settings.bunny_advertisement_image_zone,
        settings.bunny_advertisement_image_access_key,
        data,
        file.filename,
    )
    audit.record(db, request, admin.user_id, "upload_advertisement_image", detail=result["filename"])
    db.commit()
    return result


@router.delete("/files/{filename}", response_model=FileDeleteResponse)
def delete_image(
    filename: str,
    request: Request,
    admin: SessionEntry = Depends(require_admin),
    media: BunnyClient = Depends(get_media_client),
    db: Session = Depends(get_db),
):
    zone = settings.bunny_advertisement_image_zone
    try:
        media.delete_image(zone, settings.bunny_advertisement_image_access_key, filename)
    except UpstreamError as exc:
        logger.warning("Advertisement image %s not deleted: %s", filename, exc.message)
        return FileDeleteResponse(deleted=False, message=exc.message)

    cleared = crud.clear_image_url(db, cdn_url(zone, filename))
    audit.record(db, request, admin.user_id, "delete_advertisement_image",
                 detail=f"filename={filename}, rows={cleared}")
    db.commit()
    return FileDeleteResponse(deleted=True, message="File deleted")


# ---------------------------------------------------------------------------
# Single advertisement
# ---------------------------------------------------------------------------


@router.get("/{ad_id}", response_model=AdvertisementRow)
def get_advertisement(ad_id: int, db: Session = Depends(get_db)):
    return crud.find_one(db, ad_id)


@router.post("/{ad_id}/click", response_model=CounterResponse)
def record_click(ad_id: int, db: Session = Depends(get_db)):
    crud.increment_clicks(db, ad_id)
    db.commit()
    return CounterResponse(message="Click recorded", id=ad_id)


@router.post("/{ad_id}/impression", response_model=CounterResponse)
def record_impression(ad_id: int, db: Session = Depends(get_db)):
    crud.increment_impressions(db, ad_id)
    db.commit()
    return CounterResponse(message="Impression recorded", id=ad_id)


@router.post("", response_model=AdvertisementRow, status_code=status.HTTP_201_CREATED)
def create_advertisement(
    body: CreateAdvertisementRequest,
    request: Request,
    admin: SessionEntry = Depends(require_admin),
    db: Session = Depends(get_db),
):
    """``start_date`` after ``end_date`` is refused with 400."""
    ad = crud.create_advertisement(db, body)
    audit.record(db, request, admin.user_id, "create_advertisement", detail=f"id={ad.id}, title={ad.title}")
    db.commit()
    db.refresh(ad)
    return ad


@router.patch("/{ad_id}", response_model=AdvertisementActionResponse)
def update_advertisement(
    ad_id: int,
    body: UpdateAdvertisementRequest,
    request: Request,
    admin: SessionEntry = Depends(require_admin),
    db: Session = Depends(get_db),
):
    ad = crud.update_advertisement(db, ad_id, body)
    changed = ", ".join(sorted(body.model_fields_set))
    audit.record(db, request, admin.user_id, "update_advertisement", detail=f"id={ad_id}, fields={changed}")
    db.commit()
    db.refresh(ad)
    return AdvertisementActionResponse(message="Advertisement updated", advertisement=ad)


@router.delete("/{ad_id}")
def delete_advertisement(
    ad_id: int,
    request: Request,
    admin: SessionEntry = Depends(require_admin),
    media: BunnyClient = Depends(get_media_client),
    db: Session = Depends(get_db),
):
    """Delete the row, then the image on the CDN.  An image failure is logged only."""
    title, image_url = crud.delete_advertisement(db, ad_id)
    audit.record(db, request, admin.user_id, "delete_advertisement", detail=f"id={ad_id}, title={title}")
    db.commit()
    crud.discard_image(media, ad_id, image_url)
    return {"detail": "Advertisement deleted"}


@router.patch("/{ad_id}/toggle-active", response_model=AdvertisementActionResponse)
def toggle_active(
    ad_id: int,
    request: Request,
    admin: SessionEntry = Depends(require_admin),
    db: Session = Depends(get_db),
):
    ad = crud.toggle_active(db, ad_id)
    audit.record(db, request, admin.user_id, "toggle_advertisement_active",
                 detail=f"id={ad_id}, is_active={ad.is_active}")
    db.commit()
    db.refresh(ad)
    message = "Advertisement activated" if ad.is_active else "Advertisement deactivated"
    return AdvertisementActionResponse(message=message, advertisement=ad)
