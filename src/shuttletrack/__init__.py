"""ShuttleTrack - Real-time campus shuttle and subway departure board."""

__version__ = "0.1.0"

from .models import ArrivalEntry, OriginBoard, Route, StopVisit, SubwayBoard
from .config import AppConfig, DEFAULT_CONFIG
from .clock import TimeAuthority, FixedClock
from .commute_plan import CommutePlanNormalizer, filter_future
from .tripshot_client import TripShotClient, build_commute_plan_payload
from .subway import TransiterClient, normalize_subway_stop
from .board import ShuttleBoard
from .exceptions import UpstreamError

__all__ = [
    "ShuttleBoard",
    "CommutePlanNormalizer",
    "filter_future",
    "TripShotClient",
    "build_commute_plan_payload",
    "TransiterClient",
    "normalize_subway_stop",
    "TimeAuthority",
    "FixedClock",
    "AppConfig",
    "DEFAULT_CONFIG",
    "UpstreamError",
    "Route",
    "StopVisit",
    "ArrivalEntry",
    "OriginBoard",
    "SubwayBoard",
]
