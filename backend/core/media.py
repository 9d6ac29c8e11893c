# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20261019v1
# ---------------------------------------------------------------------------
"""
Bunny CDN client – pass-through uploads and deletes.

Images go to a Bunny *Storage* zone (one zone for content thumbnails, one
for advertisement images) and are served from ``https://{zone}.b-cdn.net``.
Videos go to a Bunny *Stream* library: create the video object first, then
PUT the bytes to it.

Every failed call raises :class:`core.errors.UpstreamError`.  Whether that
is fatal is the caller's decision: uploads propagate it, cleanup paths log
and swallow it.
"""

import os
import re
import secrets
import time
from typing import Optional

import httpx
from fastapi import UploadFile

from core.config import settings
from core.errors import UpstreamError, ValidationError
from core.logger import logger

IMAGE_TYPES = re.compile(r"/(jpg|jpeg|png|gif|webp)$")
VIDEO_TYPES = re.compile(r"/(mp4|avi|mov|wmv|flv|webm|mkv)$")
MAX_IMAGE_BYTES = 10 * 1024 * 1024


def unique_filename(original_name: Optional[str]) -> str:
    """``{epoch_ms}-{32 hex chars}{ext}`` – the extension is kept, the name is not."""
    ext = os.path.splitext(original_name or "")[1].lower()
    return f"{int(time.time() * 1000)}-{secrets.token_hex(16)}{ext}"


def filename_from_url(url: Optional[str]) -> Optional[str]:
    """Last path segment of a CDN URL, or None."""
    if not url:
        return None
    name = url.rstrip("/").rsplit("/", 1)[-1]
    return name or None


def cdn_url(zone: str, filename: str) -> str:
    return f"https://{zone}.b-cdn.net/{filename}"


def read_upload(file: Optional[UploadFile], allowed: re.Pattern, kind: str,
                max_bytes: Optional[int] = None) -> bytes:
    """Validate a multipart upload against a MIME pattern and size cap."""
    if file is None:
        raise ValidationError("No file was uploaded")
    if not allowed.search(file.content_type or ""):
        raise ValidationError(f"Only {kind} files can be uploaded")
    data = file.file.read()
    if not data:
        raise ValidationError("Uploaded file is empty")
    if max_bytes is not None and len(data) > max_bytes:
        raise ValidationError(f"File is too large. Maximum allowed size is {max_bytes // (1024 * 1024)} MB")
    return data


class BunnyClient:
    def __init__(self, http: Optional[httpx.Client] = None):
        self.http = http or httpx.Client(timeout=settings.media_timeout_seconds)

    def close(self) -> None:
        self.http.close()

    # -- transport -------------------------------------------------------------

    def _send(self, method: str, url: str, what: str, ok_statuses=(), **kwargs) -> httpx.Response:
        try:
            response = self.http.request(method, url, **kwargs)
        except httpx.HTTPError as exc:
            logger.error("Bunny %s failed: %s", what, exc)
            raise UpstreamError(f"Media store unreachable during {what}") from exc

        if response.is_success or response.status_code in ok_statuses:
            return response

        logger.error("Bunny %s failed: HTTP %d %s", what, response.status_code, response.reason_phrase)
        raise UpstreamError(f"Media store rejected {what}: {response.status_code} {response.reason_phrase}")

    # -- Storage zones (images) -----------------------------------------------

    def upload_image(self, zone: str, access_key: str, data: bytes, original_name: Optional[str]) -> dict:
        filename = unique_filename(original_name)
        logger.info("Uploading image to Bunny Storage: zone=%s file=%s size=%d", zone, filename, len(data))
        self._send(
            "PUT",
            f"{settings.bunny_storage_host}/{zone}/{filename}",
            "image upload",
            headers={
                "AccessKey": access_key,
                "Content-Type": "application/octet-stream",
                "accept": "application/json",
            },
            content=data,
        )
        return {"url": cdn_url(zone, filename), "filename": filename}

    def delete_image(self, zone: str, access_key: str, filename: str) -> None:
        """Delete a stored file.  A 404 means it is already gone."""
        logger.info("Deleting image from Bunny Storage: zone=%s file=%s", zone, filename)
        self._send(
            "DELETE",
            f"{settings.bunny_storage_host}/{zone}/{filename}",
            "image delete",
            ok_statuses=(404,),
            headers={"AccessKey": access_key},
        )

    # -- Stream library (videos) ----------------------------------------------

    def _library_url(self) -> str:
        return f"{settings.bunny_stream_host}/library/{settings.bunny_video_library_id}"

    def upload_video(self, data: bytes, original_name: Optional[str]) -> dict:
        title = unique_filename(original_name)
        headers = {"AccessKey": settings.bunny_video_api_key, "accept": "application/json"}

        created = self._send(
            "POST",
            f"{self._library_url()}/videos",
            "video create",
            headers={**headers, "Content-Type": "application/json"},
            json={"title": title},
        )
        try:
            guid = created.json()["guid"]
        except (ValueError, KeyError) as exc:
            raise UpstreamError("Media store returned no video GUID") from exc

        logger.info("Uploading video to Bunny Stream: guid=%s size=%d", guid, len(data))
        self._send("PUT", f"{self._library_url()}/videos/{guid}", "video upload", headers=headers, content=data)

        return {
            "url": f"{settings.bunny_player_host}/play/{settings.bunny_video_library_id}/{guid}",
            "guid": guid,
        }

    def delete_video(self, guid: str) -> None:
        logger.info("Deleting video from Bunny Stream: guid=%s", guid)
        self._send(
            "DELETE",
            f"{self._library_url()}/videos/{guid}",
            "video delete",
            headers={"AccessKey": settings.bunny_video_api_key},
        )


def get_media_client():
    """Dependency: a BunnyClient for the duration of one request."""
    client = BunnyClient()
    try:
        yield client
    finally:
        client.close()
