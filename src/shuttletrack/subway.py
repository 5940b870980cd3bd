"""Transiter subway stop fetcher and departure grouping."""

import logging
from datetime import datetime, timezone
from typing import Dict, Iterable, List, Optional

import requests

from .clock import TimeAuthority, format_clock_time, minutes_until
from .config import AppConfig
from .exceptions import UpstreamError
from .models import SubwayBoard, SubwayDeparture, SubwayDestination

logger = logging.getLogger(__name__)

MAX_DEPARTURES = 3

# Sort key for a destination with no departures
NO_DEPARTURE_MINUTES = 9999


def _nested(record: dict, *keys: str):
    """Walk nested dicts, returning None as soon as a level is missing."""
    value = record
    for key in keys:
        if not isinstance(value, dict):
            return None
        value = value.get(key)
    return value


def _departure_epoch(stop_time: dict) -> Optional[float]:
    """First present of departure.time, arrival.time, arrival/departure predictedTime."""
    raw = (
        _nested(stop_time, "departure", "time")
        or _nested(stop_time, "arrival", "time")
        or _nested(stop_time, "arrival", "predictedTime")
        or _nested(stop_time, "departure", "predictedTime")
    )
    if not raw:
        return None
    try:
        return float(raw)
    except (TypeError, ValueError):
        logger.debug(f"Unparseable stop time {raw!r}")
        return None


def normalize_subway_stop(
    document: dict,
    clock: TimeAuthority,
    destinations: Iterable[str] = ("south ferry", "van cortlandt"),
    default_name: str = "125th St",
) -> SubwayBoard:
    """
    Group a Transiter stop's upcoming trains by destination.

    Args:
        document: Parsed Transiter stop JSON.
        clock: Supplies "now" and the display timezone.
        destinations: Lower-case substrings; only matching destinations are kept.
        default_name: Stop name used when the document has none.

    Returns:
        SubwayBoard with destinations ordered by their next departure.
    """
    now = clock.now()
    by_destination: Dict[str, SubwayDestination] = {}

    for stop_time in document.get("stopTimes") or []:
        if not isinstance(stop_time, dict):
            continue
        destination = _nested(stop_time, "trip", "destination", "name") or "Unknown"
        route = _nested(stop_time, "trip", "route", "shortName") or ""

        epoch = _departure_epoch(stop_time)
        if epoch is None:
            continue
        departs_at = datetime.fromtimestamp(epoch, tz=timezone.utc)

        if destination not in by_destination:
            by_destination[destination] = SubwayDestination(destination=destination, route=route)
        by_destination[destination].departures.append(
            SubwayDeparture(
                in_minutes=minutes_until(departs_at, now),
                absolute=format_clock_time(departs_at, clock.zone),
            )
        )

    def first_departure(group: SubwayDestination) -> int:
        return group.departures[0].in_minutes if group.departures else NO_DEPARTURE_MINUTES

    trains: List[SubwayDestination] = []
    for group in sorted(by_destination.values(), key=first_departure):
        group.departures = group.departures[:MAX_DEPARTURES]
        trains.append(group)

    wanted = [d.lower() for d in destinations]
    trains = [t for t in trains if any(w in t.destination.lower() for w in wanted)]

    return SubwayBoard(stop_name=document.get("name") or default_name, trains=trains)


class TransiterClient:
    """Fetches the configured subway stop from Transiter."""

    def __init__(self, config: AppConfig, clock: Optional[TimeAuthority] = None):
        self.config = config
        self.clock = clock or TimeAuthority(config.timezone)

    def fetch_stop(self) -> dict:
        """
        Fetch the raw stop document.

        Raises:
            UpstreamError: On network failure, non-2xx status, or invalid JSON.
        """
        url = self.config.transiter_stop_url
        logger.debug(f"Fetching {url}")
        try:
            response = requests.get(url, timeout=self.config.request_timeout)
        except requests.RequestException as e:
            logger.error(f"Transiter request failed: {e}")
            raise UpstreamError("Transiter", str(e)) from e

        if not response.ok:
            logger.error(f"Transiter HTTP {response.status_code}")
            raise UpstreamError("Transiter", f"HTTP {response.status_code}", response.status_code)

        try:
            document = response.json()
        except ValueError as e:
            logger.error(f"Transiter returned invalid JSON: {e}")
            raise UpstreamError("Transiter", "invalid JSON", response.status_code) from e

        if not isinstance(document, dict):
            raise UpstreamError("Transiter", "unexpected document shape", response.status_code)
        return document

    def get_board(self) -> SubwayBoard:
        """Fetch and normalize the subway stop."""
        document = self.fetch_stop()
        return normalize_subway_stop(
            document,
            self.clock,
            destinations=self.config.subway_destinations,
            default_name=self.config.subway_stop_name,
        )
