"""TripShot commutePlan parser: rides at an origin stop, bucketed by route color."""

import logging
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional, Tuple

from .clock import TimeAuthority, format_clock_time, minutes_until, parse_timestamp
from .config import AppConfig, StopConfig
from .models import COLOR_BUCKETS, ArrivalEntry, OriginBoard, Route, StopVisit

logger = logging.getLogger(__name__)

MAX_ENTRIES_PER_BUCKET = 3

# Delays at or under this many minutes count as on time
DELAY_THRESHOLD_MINUTES = 1

EXCLUDED_ROUTE_PATTERNS = ("manhattanville", "m'ville", "mville")

SCHEDULED_FIELDS = ("scheduledDepartureTime", "scheduledArrivalTime", "scheduledAt")
LIVE_FIELDS = ("expectedArrivalTime", "expectedDepartureTime")
DESTINATION_FIELDS = ("expectedArrivalTime", "scheduledArrivalTime", "scheduledAt")


def _as_list(value: Any) -> list:
    """A JSON array as a list; anything else counts as empty."""
    return value if isinstance(value, list) else []


def _as_text(value: Any) -> str:
    """A JSON string as-is; anything else counts as missing."""
    return value if isinstance(value, str) else ""


def resolve_field(record: Any, candidate_names: Iterable[str]) -> Optional[Any]:
    """
    Return the first present (non-empty) value among candidate field names.

    Args:
        record: A decoded JSON object. Anything that isn't a dict yields None.
        candidate_names: Field names in priority order.

    Returns:
        The first truthy value found, or None.
    """
    if not isinstance(record, dict):
        return None
    for name in candidate_names:
        value = record.get(name)
        if value:
            return value
    return None


def infer_color_label(name: str, short_name: str) -> Optional[str]:
    """Green, Red or Blue from the route names (first match wins), else None."""
    name_lower = _as_text(name).lower()
    short_lower = _as_text(short_name).lower()
    for color in COLOR_BUCKETS:
        if color in name_lower or color in short_lower:
            return color.capitalize()
    return None


def build_route_directory(routes: Any) -> Dict[str, Route]:
    """
    Index the commute plan's route descriptors by route id.

    Args:
        routes: The raw "routes" list. Entries without a routeId are skipped.

    Returns:
        Dictionary of route_id -> Route.
    """
    directory: Dict[str, Route] = {}
    for raw in _as_list(routes):
        if not isinstance(raw, dict):
            continue
        route_id = raw.get("routeId")
        if not route_id or not isinstance(route_id, (str, int)):
            continue

        name = _as_text(raw.get("name")) or _as_text(raw.get("shortName")) or "Shuttle"
        short_name = _as_text(raw.get("shortName")) or name
        directory[route_id] = Route(
            id=route_id,
            name=name,
            short_name=short_name,
            color_label=infer_color_label(name, short_name),
        )
    return directory


def is_walking_ride(ride: dict) -> bool:
    mode = str(ride.get("mode") or ride.get("type") or "").lower()
    return "walk" in mode


def resolve_route(ride: dict, directory: Dict[str, Route]) -> Route:
    """Look up a ride's route by routeId, then routeServiceId, else a plain shuttle."""
    for key in ("routeId", "routeServiceId"):
        route_id = ride.get(key)
        if isinstance(route_id, (str, int)) and route_id in directory:
            return directory[route_id]

    return Route(
        id=ride.get("routeId") or ride.get("routeServiceId"),
        name="Shuttle",
        short_name="Shuttle",
        color_label=None,
    )


def is_excluded_route(route: Route) -> bool:
    """Manhattanville shuttles never show up on the board."""
    names = (_as_text(route.name).lower(), _as_text(route.short_name).lower())
    return any(pattern in n for pattern in EXCLUDED_ROUTE_PATTERNS for n in names)


def unwrap_stop_status(record: Any) -> Any:
    """Strip a single-key envelope ({"OnRoute": {...}}) around a stop-status record."""
    if isinstance(record, dict) and len(record) == 1:
        inner = next(iter(record.values()))
        if isinstance(inner, dict):
            return inner
    return record


def decode_stop_visit(record: dict) -> StopVisit:
    """Decode a raw stop-status record into a StopVisit."""
    scheduled = resolve_field(record, SCHEDULED_FIELDS)
    live = resolve_field(record, LIVE_FIELDS) or scheduled
    return StopVisit(
        stop_id=str(record.get("stopId") or ""),
        scheduled_time=scheduled,
        live_time=live,
    )


def locate_stop_visits(
    ride: dict, origin_id: str, destination_id: str
) -> Tuple[Optional[dict], Optional[dict]]:
    """
    Find a ride's stop-status records for the origin and destination stops.

    Stop ids are compared case-insensitively. When a stop appears more than
    once, the last record wins.

    Returns:
        (origin_record, destination_record); either may be None.
    """
    origin_lower = origin_id.lower()
    destination_lower = destination_id.lower()
    origin_record = None
    destination_record = None

    for wrapper in _as_list(ride.get("stopStatus")):
        if not wrapper:
            continue
        record = unwrap_stop_status(wrapper)
        if not isinstance(record, dict):
            continue

        stop_id = str(record.get("stopId") or "").lower()
        if stop_id == origin_lower:
            origin_record = record
        if stop_id == destination_lower:
            destination_record = record

    return origin_record, destination_record


def bucket_for(route: Route) -> str:
    color_key = route.color_label.lower() if route.color_label else "blue"
    if color_key not in COLOR_BUCKETS:
        color_key = "blue"
    return color_key


class CommutePlanNormalizer:
    """
    Turns a raw TripShot commutePlan document into an OriginBoard.

    The normalizer holds no per-request state: each call to normalize()
    builds its route directory and buckets from scratch.
    """

    def __init__(self, config: AppConfig, clock: Optional[TimeAuthority] = None):
        self.config = config
        self.clock = clock or TimeAuthority(config.timezone)

    def normalize(self, document: dict, origin: StopConfig) -> OriginBoard:
        """
        Build the board for one origin stop.

        Args:
            document: Parsed commutePlan JSON ({"routes": [...], "rides": [...]}).
            origin: The origin stop being queried.

        Returns:
            OriginBoard with at most three entries per color, sorted by time.
        """
        now = self.clock.now()
        if not isinstance(document, dict):
            logger.warning(f"{origin.name}: commute plan is {type(document).__name__}, not an object")
            document = {}
        directory = build_route_directory(document.get("routes"))
        buckets: Dict[str, List[Tuple[datetime, ArrivalEntry]]] = {c: [] for c in COLOR_BUCKETS}

        rides = _as_list(document.get("rides"))
        for ride in rides:
            if not isinstance(ride, dict):
                continue
            if is_walking_ride(ride):
                continue

            route = resolve_route(ride, directory)
            if is_excluded_route(route):
                logger.debug(f"Skipping excluded route {route.name!r}")
                continue

            candidate = self._consider_ride(ride, route, origin, now)
            if candidate is not None:
                color_key, departs_at, entry = candidate
                buckets[color_key].append((departs_at, entry))

        board = OriginBoard(stop_name=origin.name)
        for color in COLOR_BUCKETS:
            ordered = sorted(buckets[color], key=lambda pair: pair[0])
            setattr(board, color, [entry for _, entry in ordered[:MAX_ENTRIES_PER_BUCKET]])

        logger.debug(
            f"{origin.name}: {len(rides)} rides -> "
            f"{len(board.green)} green, {len(board.red)} red, {len(board.blue)} blue"
        )
        return board

    def _consider_ride(
        self, ride: dict, route: Route, origin: StopConfig, now: datetime
    ) -> Optional[Tuple[str, datetime, ArrivalEntry]]:
        """Derive the arrival entry for one ride, or None if it doesn't qualify."""
        zone = self.clock.zone
        origin_record, destination_record = locate_stop_visits(
            ride, origin.stop_id, self.config.destination.stop_id
        )
        # Rides are shared across origin queries; only keep ones that stop here
        if origin_record is None:
            return None

        visit = decode_stop_visit(origin_record)
        departs_at = parse_timestamp(visit.live_time, zone)
        if departs_at is None:
            return None

        direct = False
        if destination_record is not None:
            arrives_at = parse_timestamp(resolve_field(destination_record, DESTINATION_FIELDS), zone)
            if arrives_at is not None and departs_at < arrives_at:
                direct = True

        delayed = False
        scheduled_at = parse_timestamp(visit.scheduled_time, zone)
        if scheduled_at is not None:
            delay_minutes = (departs_at - scheduled_at).total_seconds() / 60
            delayed = delay_minutes > DELAY_THRESHOLD_MINUTES

        color_key = bucket_for(route)
        entry = ArrivalEntry(
            route_name=route.name,
            color=route.color_label or color_key.capitalize(),
            time=format_clock_time(departs_at, zone),
            raw_iso=visit.live_time,
            in_minutes=minutes_until(departs_at, now),
            direct=direct,
            delayed=delayed,
        )
        return color_key, departs_at, entry


def filter_future(board: OriginBoard, now: datetime) -> OriginBoard:
    """
    Drop entries that depart before now.

    Args:
        board: A normalized board (not modified).
        now: The current instant, from the TimeAuthority at filter time.

    Returns:
        A new OriginBoard holding only entries at or after now.
    """
    filtered = OriginBoard(stop_name=board.stop_name)
    for color in COLOR_BUCKETS:
        kept = []
        for entry in board.bucket(color):
            departs_at = parse_timestamp(entry.raw_iso, now.tzinfo)
            if departs_at is not None and departs_at >= now:
                kept.append(entry)
        setattr(filtered, color, kept)
    return filtered
