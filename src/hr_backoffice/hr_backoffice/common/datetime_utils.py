from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Union


def now_local() -> datetime:
    """Current local time, wrapped so services can take a clock instead."""
    return datetime.now()


def today() -> date:
    return now_local().date()


def iso_or_none(value: Optional[Union[date, datetime]]) -> Optional[str]:
    return value.isoformat() if value is not None else None
