"""Fixed stops, upstream URLs and server settings."""

import logging
import os
from dataclasses import dataclass, field, replace
from typing import Tuple

from dotenv import load_dotenv

logger = logging.getLogger(__name__)

TRIPSHOT_COMMUTE_PLAN_URL = "https://columbia.tripshot.com/v2/p/commutePlan"
TRIPSHOT_REGION_ID = "CA558DDC-D7F2-4B48-9CAC-DEEA1134F820"

# Subway - 125th St 1 train stop
TRANSITER_STOP_URL = "https://realtimerail.nyc/transiter/v0.6/systems/us-ny-subway/stops/116"


@dataclass(frozen=True)
class Location:
    """A coordinate pair in the shape TripShot expects (lt/lg)."""
    lat: float
    lng: float

    def to_payload(self) -> dict:
        return {"lt": self.lat, "lg": self.lng}


@dataclass(frozen=True)
class StopConfig:
    """A TripShot stop: id, display name and location."""
    stop_id: str
    name: str
    location: Location


EC_S = StopConfig(
    stop_id="EC00CCCF-1599-454B-A90A-05F7FAD06576",
    name="EC S",
    location=Location(40.8148513609553, -73.9591558764148),
)

S120 = StopConfig(
    stop_id="db0236ef-fbfa-4254-ae30-ea57dee20a00",
    name="120 S",
    location=Location(40.8102628806603, -73.9624749343461),
)

NINETY_SIX = StopConfig(
    stop_id="A5C97705-8217-4D82-A778-01DAA12322A6",
    name="96",
    location=Location(40.7943928026156, -73.971405716243),
)


@dataclass(frozen=True)
class AppConfig:
    """Immutable configuration passed to the clients, normalizers and server."""
    tripshot_url: str = TRIPSHOT_COMMUTE_PLAN_URL
    region_id: str = TRIPSHOT_REGION_ID
    ec_s: StopConfig = EC_S
    s120: StopConfig = S120
    destination: StopConfig = NINETY_SIX
    transiter_stop_url: str = TRANSITER_STOP_URL
    subway_stop_name: str = "125th St"
    subway_destinations: Tuple[str, ...] = ("south ferry", "van cortlandt")
    timezone: str = "America/New_York"
    public_dir: str = field(default_factory=lambda: os.path.join(os.getcwd(), "public"))
    host: str = "0.0.0.0"
    port: int = 3000
    request_timeout: float = 10.0

    @classmethod
    def from_env(cls, dotenv: bool = True) -> "AppConfig":
        """
        Build a config from defaults plus environment overrides.

        Args:
            dotenv: If True, load a .env file from the working directory first.

        Returns:
            AppConfig with PORT, HOST, TRIPSHOT_URL, TRANSITER_STOP_URL,
            TIMEZONE, PUBLIC_DIR and REQUEST_TIMEOUT applied when set.
        """
        if dotenv:
            load_dotenv()

        config = cls()
        overrides = {}

        if os.getenv("PORT"):
            overrides["port"] = int(os.environ["PORT"])
        if os.getenv("HOST"):
            overrides["host"] = os.environ["HOST"]
        if os.getenv("TRIPSHOT_URL"):
            overrides["tripshot_url"] = os.environ["TRIPSHOT_URL"]
        if os.getenv("TRANSITER_STOP_URL"):
            overrides["transiter_stop_url"] = os.environ["TRANSITER_STOP_URL"]
        if os.getenv("TIMEZONE"):
            overrides["timezone"] = os.environ["TIMEZONE"]
        if os.getenv("PUBLIC_DIR"):
            overrides["public_dir"] = os.environ["PUBLIC_DIR"]
        if os.getenv("REQUEST_TIMEOUT"):
            overrides["request_timeout"] = float(os.environ["REQUEST_TIMEOUT"])

        if overrides:
            logger.debug(f"Config overrides from environment: {sorted(overrides)}")
            config = replace(config, **overrides)
        return config


DEFAULT_CONFIG = AppConfig()
