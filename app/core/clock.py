# app/core/clock.py
import logging
import os
from abc import ABC, abstractmethod
from datetime import date, datetime, timedelta, timezone, tzinfo
from typing import Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

logger = logging.getLogger("tasktrack.clock")

LOCALTIME_PATH = "/etc/localtime"


def host_zone() -> Optional[tzinfo]:
    """
    Timezone dell'host come zona vera (con le regole dell'ora legale).

    Prima TZ, poi /etc/localtime. None se non si riesce a risolverla.
    """
    name = os.environ.get("TZ", "").lstrip(":")
    if name:
        try:
            return ZoneInfo(name)
        except (ZoneInfoNotFoundError, ValueError):
            logger.warning("TZ=%s non riconosciuta", name)
    try:
        with open(LOCALTIME_PATH, "rb") as f:
            return ZoneInfo.from_file(f, key="localtime")
    except (OSError, ValueError):
        return None


class Clock(ABC):
    """Unica sorgente di "adesso" per classifier e reminder engine."""

    @property
    @abstractmethod
    def zone(self) -> Optional[tzinfo]:
        """Zona usata per i giorni di calendario e per i datetime naive."""
        raise NotImplementedError

    @abstractmethod
    def now(self) -> datetime:
        raise NotImplementedError


class SystemClock(Clock):
    def __init__(self, tz: Optional[tzinfo] = None):
        self.tz = tz if tz is not None else host_zone()

    @classmethod
    def from_name(cls, name: str) -> "SystemClock":
        return cls(ZoneInfo(name) if name else None)

    @property
    def zone(self) -> Optional[tzinfo]:
        return self.tz

    def now(self) -> datetime:
        if self.tz is None:
            # zona non risolvibile: offset locale di adesso
            return datetime.now(timezone.utc).astimezone()
        return datetime.now(self.tz)


class FixedClock(Clock):
    """Orologio fermo, per i test."""

    def __init__(self, instant: datetime):
        if instant.tzinfo is None:
            raise ValueError("FixedClock requires an aware datetime")
        self.instant = instant

    @property
    def zone(self) -> Optional[tzinfo]:
        return self.instant.tzinfo

    def now(self) -> datetime:
        return self.instant

    def advance(self, delta: timedelta) -> None:
        self.instant = self.instant + delta


def ensure_aware(value: datetime, tz: Optional[tzinfo] = None) -> datetime:
    """Un datetime naive viene interpretato nella timezone indicata (o locale)."""
    if value.tzinfo is not None:
        return value
    if tz is None:
        # astimezone() sul naive usa le regole locali, ora legale compresa
        return value.astimezone()
    return value.replace(tzinfo=tz)


def local_date(value: datetime, now: datetime) -> date:
    """Giorno di calendario di `value` nella timezone di `now`."""
    return value.astimezone(now.tzinfo).date()
