import math
from datetime import datetime, timedelta, timezone
from typing import Optional

WATCH_URL = "https://youtube.com/watch?v={video_id}"


def parse_published_at(value: Optional[str]) -> Optional[datetime]:
    """Parses an RFC 3339 timestamp (e.g. 2023-10-25T10:00:00Z) to an aware datetime."""
    if not value or not isinstance(value, str):
        return None
    cleaned = value.strip()
    # Handle Z for UTC
    if cleaned.endswith("Z"):
        cleaned = cleaned[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(cleaned)
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def resolve_days_back(value, default: float = 1) -> float:
    """Returns the requested lookback in days, or the default for anything non-numeric."""
    # bool is an int subclass but JSON true/false is not a number
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return default
    if not math.isfinite(value):
        return default
    return value


def cutoff_for(days_back: float, now: Optional[datetime] = None) -> datetime:
    """Returns now minus ``days_back`` days, clamped to the representable range."""
    now = now or datetime.now(timezone.utc)
    try:
        return now - timedelta(days=days_back)
    except OverflowError:
        # A lookback past year 1 keeps everything, a cutoff past year 9999 keeps nothing
        edge = datetime.min if days_back > 0 else datetime.max
        return edge.replace(tzinfo=timezone.utc)


def watch_url(video_id: Optional[str]) -> Optional[str]:
    if not video_id or not isinstance(video_id, str) or not video_id.strip():
        return None
    return WATCH_URL.format(video_id=video_id.strip())
