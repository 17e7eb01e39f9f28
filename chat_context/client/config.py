"""Client configuration values read from the environment."""
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

BASE_DIR = Path(__file__).resolve().parent
DEFAULT_LOG_FILE = BASE_DIR / "client.log"

load_dotenv()


def _float_or_none(value: Optional[str]) -> Optional[float]:
    if value is None or not value.strip():
        return None
    return float(value)


@dataclass
class Settings:
    server_url: str = ""
    request_timeout: float = 10.0
    poll_interval: float = 2.0
    page_size: int = 25
    query_timeout: Optional[float] = None
    keystroke_interval: float = 0.0
    log_file: Path = DEFAULT_LOG_FILE


def get_settings() -> Settings:
    return Settings(
        server_url=os.getenv("CHAT_SERVER_URL", "").strip().rstrip("/"),
        request_timeout=float(os.getenv("CHAT_REQUEST_TIMEOUT", "10")),
        poll_interval=float(os.getenv("CHAT_POLL_INTERVAL", "2.0")),
        page_size=int(os.getenv("CHAT_PAGE_SIZE", "25")),
        query_timeout=_float_or_none(os.getenv("CHAT_QUERY_TIMEOUT")),
        keystroke_interval=float(os.getenv("CHAT_KEYSTROKE_INTERVAL", "0")),
        log_file=Path(os.getenv("CHAT_LOG_FILE") or DEFAULT_LOG_FILE),
    )
