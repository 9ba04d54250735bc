"""Display helpers for the upload gallery."""
from datetime import datetime, timezone

SIZE_UNITS = ["Bytes", "KB", "MB", "GB"]
OLDEST = datetime.min.replace(tzinfo=timezone.utc)


def format_file_size(size: int) -> str:
    if size <= 0:
        return "0 Bytes"
    value = float(size)
    i = 0
    while value >= 1024 and i < len(SIZE_UNITS) - 1:
        value /= 1024
        i += 1
    return f"{round(value, 2):g} {SIZE_UNITS[i]}"


def _uploaded_at(entry: dict) -> datetime:
    try:
        ts = datetime.fromisoformat(entry["uploadedAt"])
    except (KeyError, TypeError, ValueError):
        return OLDEST
    return ts if ts.tzinfo else ts.replace(tzinfo=timezone.utc)


def recent_uploads(files: list[dict], limit: int = 10) -> list[dict]:
    """Newest first by ``uploadedAt``; the server returns files unordered."""
    return sorted(files, key=_uploaded_at, reverse=True)[:limit]
