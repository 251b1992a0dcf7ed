from __future__ import annotations

from datetime import date, datetime, time
from typing import Optional

from ..core.exceptions import ValidationError


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date."""
    try:
        return datetime.strptime((value or "").strip()[:10], "%Y-%m-%d").date()
    except ValueError:
        raise ValidationError("Ngày không hợp lệ (YYYY-MM-DD)")


def parse_optional_date(value: Optional[str]) -> Optional[date]:
    if value is None or not str(value).strip():
        return None
    return parse_iso_date(str(value))


def parse_hhmm(value: str) -> time:
    try:
        return datetime.strptime((value or "").strip(), "%H:%M").time()
    except ValueError:
        raise ValidationError("Giờ không hợp lệ (HH:MM)")


def parse_optional_datetime(value: Optional[str], *, on_date: Optional[date] = None) -> Optional[datetime]:
    """Accept ISO datetimes, or bare HH:MM combined with ``on_date``."""

    v = (value or "").strip()
    if not v:
        return None
    if on_date is not None and len(v) <= 5:
        return datetime.combine(on_date, parse_hhmm(v))
    try:
        parsed = datetime.fromisoformat(v.replace("Z", "+00:00"))
    except ValueError:
        raise ValidationError("Thời gian không hợp lệ")
    # Stored as naive local time, like the rest of the tables.
    return parsed.replace(tzinfo=None)


def now_local() -> datetime:
    """Current local time.

    Note: Wrapped so tests can patch/mocked easier.
    """
    return datetime.now()
