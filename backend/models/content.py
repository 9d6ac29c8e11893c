# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20261019v1
# ---------------------------------------------------------------------------
"""Content ORM model – one video entry managed from the admin UI."""

from sqlalchemy import Column, Integer, BigInteger, String, Text, Boolean, Enum, DateTime
from sqlalchemy.sql import func

from database import Base

CONTENT_STATUSES = ("active", "inactive", "pending", "deleted")


class Content(Base):
    __tablename__ = "contents"

    id = Column(Integer, primary_key=True, autoincrement=True)
    title = Column(String(500), nullable=False, index=True)
    image_url = Column(String(1000), nullable=True)
    # category / sub_category hold Category.name, not Category.id.  Renaming a
    # category leaves existing rows pointing at the old name.
    category = Column(String(100), nullable=False, index=True)
    sub_category = Column(String(100), nullable=True, index=True)
    service_link = Column(String(1000), nullable=True)
    video_guid = Column(String(100), nullable=True, index=True)  # Bunny Stream GUID
    description = Column(Text, nullable=True)
    tags = Column(String(1000), nullable=True)  # comma separated
    is_visible = Column(Boolean, nullable=False, default=True, index=True)
    is_popular = Column(Boolean, nullable=False, default=False, index=True)
    status = Column(
        Enum(*CONTENT_STATUSES, name="content_status"),
        nullable=False,
        default="active",
        index=True,
    )
    duration = Column(Integer, nullable=True)    # seconds
    file_size = Column(BigInteger, nullable=True)  # bytes
    view_count = Column(Integer, nullable=False, default=0)
    like_count = Column(Integer, nullable=False, default=0)
    comment_count = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )
