"""Shuttle board: fetches both origin stops and assembles the API response."""

import asyncio
import logging
from typing import Dict, Optional

from .clock import TimeAuthority
from .commute_plan import CommutePlanNormalizer, filter_future
from .config import AppConfig
from .models import OriginBoard
from .tripshot_client import TripShotClient

logger = logging.getLogger(__name__)


class ShuttleBoard:
    """
    Upcoming shuttle departures from the two campus origin stops.

    Both commutePlan requests are issued concurrently and joined before
    either is normalized. Nothing is cached between calls.
    """

    def __init__(
        self,
        config: AppConfig,
        clock: Optional[TimeAuthority] = None,
        client: Optional[TripShotClient] = None,
    ):
        """
        Initialize the board.

        Args:
            config: App configuration.
            clock: Time source; defaults to the configured civil timezone.
            client: TripShot client; defaults to one built from config and clock.
        """
        self.config = config
        self.clock = clock or TimeAuthority(config.timezone)
        self.client = client or TripShotClient(config, self.clock)
        self.normalizer = CommutePlanNormalizer(config, self.clock)

    async def fetch(self) -> Dict[str, OriginBoard]:
        """
        Fetch, normalize and filter both origins.

        Returns:
            {"ecS": OriginBoard, "s120": OriginBoard}

        Raises:
            UpstreamError: If either request fails. No partial result is returned.
        """
        origins = {"ecS": self.config.ec_s, "s120": self.config.s120}

        documents = await asyncio.gather(
            *(asyncio.to_thread(self.client.fetch_commute_plan, stop) for stop in origins.values())
        )

        result: Dict[str, OriginBoard] = {}
        for (key, stop), document in zip(origins.items(), documents):
            board = self.normalizer.normalize(document, stop)
            # Filter against now at filter time, not the instant normalize() saw
            result[key] = filter_future(board, self.clock.now())
        return result

    async def to_dict(self) -> dict:
        boards = await self.fetch()
        return {key: board.to_dict() for key, board in boards.items()}
