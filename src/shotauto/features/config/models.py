"""Application configuration model and its persisted key names."""

from typing import Optional

from pydantic import BaseModel, Field

DEFAULT_OLLAMA_ENDPOINT = "http://localhost:11434"
DEFAULT_POLL_INTERVAL_SECS = 300

KEY_YOUTUBE_API_KEY = "youtube_api_key"
KEY_TELEGRAM_BOT_TOKEN = "telegram_bot_token"
KEY_TELEGRAM_CHAT_ID = "telegram_chat_id"
KEY_OLLAMA_ENDPOINT = "ollama_endpoint"
KEY_POLL_INTERVAL_SECS = "poll_interval_secs"

RECOGNIZED_KEYS = (
    KEY_YOUTUBE_API_KEY,
    KEY_TELEGRAM_BOT_TOKEN,
    KEY_TELEGRAM_CHAT_ID,
    KEY_OLLAMA_ENDPOINT,
    KEY_POLL_INTERVAL_SECS,
)


class AppConfig(BaseModel):
    """Settings persisted in the ``config`` table."""

    youtube_api_key: Optional[str] = None
    telegram_bot_token: Optional[str] = None
    telegram_chat_id: Optional[str] = None
    ollama_endpoint: str = DEFAULT_OLLAMA_ENDPOINT
    poll_interval_secs: int = Field(default=DEFAULT_POLL_INTERVAL_SECS, ge=0)
