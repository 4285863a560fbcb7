"""Generated short video record."""

from typing import Optional

from pydantic import BaseModel


class Short(BaseModel):
    """Output of the pipeline for one job."""

    id: Optional[int] = None
    job_id: int
    script: Optional[str] = None
    audio_path: Optional[str] = None
    video_path: Optional[str] = None
    duration_sec: Optional[float] = None
    telegram_sent: bool = False
