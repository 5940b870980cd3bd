"""Civil-time helpers: the single source of "now" plus timestamp parsing and formatting."""

import logging
import math
from datetime import date, datetime, timedelta, timezone
from typing import Any, Optional
from zoneinfo import ZoneInfo

logger = logging.getLogger(__name__)


class TimeAuthority:
    """
    Supplies the current instant in one configured civil timezone.

    Every "now" comparison (payload construction, minutes-away, stale trip
    filtering) goes through an instance of this class so tests can swap in
    a FixedClock.
    """

    def __init__(self, tz_name: str = "America/New_York"):
        self.zone = ZoneInfo(tz_name)

    def now(self) -> datetime:
        """Current time as an aware datetime in the civil zone."""
        return datetime.now(self.zone)

    def today(self) -> date:
        """Current civil date."""
        return self.now().date()


class FixedClock(TimeAuthority):
    """A TimeAuthority frozen at a given instant."""

    def __init__(self, moment: datetime, tz_name: str = "America/New_York"):
        super().__init__(tz_name)
        if moment.tzinfo is None:
            moment = moment.replace(tzinfo=self.zone)
        self.moment = moment.astimezone(self.zone)

    def now(self) -> datetime:
        return self.moment

    def advance(self, **kwargs) -> None:
        """Move the clock forward by a timedelta built from kwargs."""
        self.moment = self.moment + timedelta(**kwargs)


def parse_timestamp(value: Any, zone: Optional[ZoneInfo] = None) -> Optional[datetime]:
    """
    Parse an ISO-8601 timestamp string into an aware datetime.

    Args:
        value: Timestamp string, e.g. "2025-01-15T15:04:00Z" or "2025-01-15T10:04:00-05:00".
        zone: Zone to attach when the string carries no offset (defaults to UTC).

    Returns:
        Aware datetime, or None if the value is missing or unparseable.
    """
    if not value or not isinstance(value, str):
        return None
    try:
        parsed = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
    except ValueError:
        logger.debug(f"Unparseable timestamp {value!r}")
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=zone or timezone.utc)
    return parsed


def format_clock_time(moment: datetime, zone: ZoneInfo) -> str:
    """Format as "h:mm am/pm" in the civil zone (e.g. "9:05 am", "12:30 pm")."""
    local = moment.astimezone(zone)
    suffix = "pm" if local.hour >= 12 else "am"
    hour = (local.hour + 11) % 12 + 1
    return f"{hour}:{local.minute:02d} {suffix}"


def minutes_until(moment: datetime, now: datetime) -> int:
    """Whole minutes from now until moment, rounded half up, never negative."""
    seconds_away = (moment - now).total_seconds()
    return max(0, math.floor(seconds_away / 60 + 0.5))
