"""Data models for the shuttle and subway boards."""

from dataclasses import dataclass, field
from typing import List, Optional

COLOR_BUCKETS = ("green", "red", "blue")


@dataclass
class Route:
    """A TripShot route as resolved from the commute plan's route list."""
    id: Optional[str]
    name: str
    short_name: str
    color_label: Optional[str] = None  # "Green", "Red", "Blue" or None


@dataclass
class StopVisit:
    """One decoded stop-status record of a ride."""
    stop_id: str
    scheduled_time: Optional[str] = None  # Static timetable
    live_time: Optional[str] = None  # Real-time estimate, falls back to scheduled


@dataclass
class ArrivalEntry:
    """An upcoming shuttle departure from an origin stop."""
    route_name: str
    color: str
    time: str  # "h:mm am/pm" in the civil zone
    raw_iso: str
    in_minutes: int
    direct: bool = False
    delayed: bool = False

    def to_dict(self) -> dict:
        return {
            "routeName": self.route_name,
            "color": self.color,
            "time": self.time,
            "rawISO": self.raw_iso,
            "inMinutes": self.in_minutes,
            "direct": self.direct,
            "delayed": self.delayed,
        }


@dataclass
class OriginBoard:
    """Arrivals at one origin stop, split into the three color buckets."""
    stop_name: str
    green: List[ArrivalEntry] = field(default_factory=list)
    red: List[ArrivalEntry] = field(default_factory=list)
    blue: List[ArrivalEntry] = field(default_factory=list)

    def bucket(self, color: str) -> List[ArrivalEntry]:
        return getattr(self, color)

    def to_dict(self) -> dict:
        result = {"stopName": self.stop_name}
        for color in COLOR_BUCKETS:
            result[color] = [entry.to_dict() for entry in self.bucket(color)]
        return result


@dataclass
class SubwayDeparture:
    """A single subway departure."""
    in_minutes: int
    absolute: str  # "h:mm am/pm"

    def to_dict(self) -> dict:
        return {"inMinutes": self.in_minutes, "absolute": self.absolute}


@dataclass
class SubwayDestination:
    """Departures from the subway stop heading to one destination."""
    destination: str
    route: str
    departures: List[SubwayDeparture] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "destination": self.destination,
            "route": self.route,
            "departures": [d.to_dict() for d in self.departures],
        }


@dataclass
class SubwayBoard:
    """Complete data for the subway stop."""
    stop_name: str
    trains: List[SubwayDestination]

    def to_dict(self) -> dict:
        return {"stopName": self.stop_name, "trains": [t.to_dict() for t in self.trains]}
