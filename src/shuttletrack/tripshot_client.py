"""TripShot commutePlan request builder and fetcher."""

import logging
from datetime import timezone
from typing import Optional

import requests

from .clock import TimeAuthority
from .config import AppConfig, StopConfig
from .exceptions import UpstreamError

logger = logging.getLogger(__name__)

TRIPSHOT_HEADERS = {"Content-Type": "application/json"}


def build_commute_plan_payload(
    config: AppConfig, origin: StopConfig, clock: TimeAuthority
) -> dict:
    """
    Build a "depart now" commutePlan request from an origin to the destination stop.

    Args:
        config: App configuration (region id and destination stop).
        origin: Origin stop to plan from.
        clock: Supplies the current civil date and time.

    Returns:
        JSON-serializable request body.
    """
    now = clock.now()
    depart_at = now.astimezone(timezone.utc).isoformat(timespec="milliseconds")
    destination = config.destination

    return {
        "day": {"year": now.year, "month": now.month, "day": now.day},
        "startPoint": {
            "location": origin.location.to_payload(),
            "name": origin.name,
            "stop": origin.stop_id,
        },
        "endPoint": {
            "location": destination.location.to_payload(),
            "name": destination.name,
            "stop": destination.stop_id,
        },
        "departAt": depart_at.replace("+00:00", "Z"),
        "arriveBy": None,
        "directOnly": False,
        "forUserId": None,
        "keepInferiors": False,
        "regionId": config.region_id,
        "requestImperial": True,
        "travelMode": "Walking",
    }


class TripShotClient:
    """Posts commutePlan requests to TripShot. One request per call, no retry."""

    def __init__(self, config: AppConfig, clock: Optional[TimeAuthority] = None):
        self.config = config
        self.clock = clock or TimeAuthority(config.timezone)

    def fetch_commute_plan(self, origin: StopConfig) -> dict:
        """
        Fetch the commute plan for an origin stop.

        Args:
            origin: Origin stop to plan from.

        Returns:
            Parsed JSON document.

        Raises:
            UpstreamError: On network failure, non-2xx status, or invalid JSON.
        """
        payload = build_commute_plan_payload(self.config, origin, self.clock)
        logger.debug(f"Requesting commute plan for {origin.name}")

        try:
            response = requests.post(
                self.config.tripshot_url,
                json=payload,
                headers=TRIPSHOT_HEADERS,
                timeout=self.config.request_timeout,
            )
        except requests.RequestException as e:
            logger.error(f"TripShot request for {origin.name} failed: {e}")
            raise UpstreamError("TripShot", str(e)) from e

        if not response.ok:
            logger.error(f"TripShot HTTP {response.status_code} for {origin.name}")
            raise UpstreamError("TripShot", f"HTTP {response.status_code}", response.status_code)

        try:
            document = response.json()
        except ValueError as e:
            logger.error(f"TripShot returned invalid JSON for {origin.name}: {e}")
            raise UpstreamError("TripShot", "invalid JSON", response.status_code) from e

        if not isinstance(document, dict):
            logger.warning(f"TripShot returned {type(document).__name__} for {origin.name}")
            raise UpstreamError("TripShot", "unexpected document shape", response.status_code)
        return document
