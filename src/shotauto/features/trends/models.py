"""Trend domain model."""

from typing import Optional

from pydantic import BaseModel, Field

from shotauto.platform.timestamps import Timestamp, utc_now


class Trend(BaseModel):
    """A discovered video tracked for potential processing.

    ``video_id`` is the external YouTube identifier and is unique across the
    registry.  ``id`` is the row id and stays None until the trend is read
    back from the store.
    """

    id: Optional[int] = None
    video_id: str = Field(min_length=1)
    title: str
    channel: Optional[str] = None
    views: Optional[int] = None
    category: Optional[str] = None
    fetched_at: Timestamp = Field(default_factory=utc_now)
