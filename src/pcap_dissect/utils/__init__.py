from __future__ import annotations

import re
from datetime import datetime, timezone
from typing import Any, Optional

from .sync import ReadWriteLock

# datetime.fromisoformat only understands microseconds; tshark prints nanoseconds.
_EXTRA_FRACTION_RE = re.compile(r"(\.\d{6})\d+")
# Epoch values above this are milliseconds, not seconds.
_MILLISECOND_EPOCH_THRESHOLD = 1e11


def _safe_str_to_bool(value: Any) -> Optional[bool]:
    """Safely converts a string value (like '0', '1', 'true', 'false') to ``bool``."""
    if isinstance(value, bool):
        return value
    s_val = str(value).lower().strip()
    if s_val in {"true", "1", "yes"}:
        return True
    if s_val in {"false", "0", "no"}:
        return False
    return None


def _safe_int(value: Any) -> Optional[int]:
    """Safely convert ``value`` containing commas or prefixes to ``int``."""
    cleaned = str(value).replace(",", "").strip()
    try:
        return int(cleaned, 0)
    except (TypeError, ValueError):
        pass
    # base 0 rejects leading zeros ("08")
    try:
        return int(cleaned, 10)
    except (TypeError, ValueError):
        return None


def decode_hex(value: str) -> bytes:
    """Decode a tshark hex string, tolerating ``:`` separators."""
    return bytes.fromhex(value.replace(":", "").strip())


def parse_timestamp(value: Any) -> Optional[datetime]:
    """Parse epoch seconds/milliseconds or an RFC3339 string to an aware UTC datetime.

    Returns ``None`` for anything that cannot be interpreted.
    """
    if isinstance(value, datetime):
        return value if value.tzinfo else value.replace(tzinfo=timezone.utc)
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        seconds = float(value)
    else:
        text = str(value).strip()
        try:
            seconds = float(text)
        except ValueError:
            text = _EXTRA_FRACTION_RE.sub(r"\1", text)
            if text[-1:] in ("Z", "z"):
                text = text[:-1] + "+00:00"
            try:
                parsed = datetime.fromisoformat(text)
            except ValueError:
                return None
            if parsed.tzinfo is None:
                parsed = parsed.replace(tzinfo=timezone.utc)
            return parsed.astimezone(timezone.utc)
    if seconds > _MILLISECOND_EPOCH_THRESHOLD:
        seconds /= 1000.0
    try:
        return datetime.fromtimestamp(seconds, tz=timezone.utc)
    except (OverflowError, OSError, ValueError):
        return None


def normalize_epoch(text: str) -> str:
    """Keep a numeric epoch as printed; turn an RFC3339 one into seconds.

    Newer tshark releases print ``frame.time_epoch`` as RFC3339.
    """
    text = text.strip()
    if not text:
        return ""
    try:
        float(text)
        return text
    except ValueError:
        parsed = parse_timestamp(text)
        return f"{parsed.timestamp():.6f}" if parsed else ""


__all__ = [
    "ReadWriteLock",
    "_safe_int",
    "_safe_str_to_bool",
    "decode_hex",
    "normalize_epoch",
    "parse_timestamp",
]
