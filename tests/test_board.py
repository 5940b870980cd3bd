"""Tests for the ShuttleBoard orchestrator."""

import asyncio
import unittest
from unittest.mock import MagicMock, patch
from datetime import datetime
import sys
from pathlib import Path
from zoneinfo import ZoneInfo

# Add src to path so we can import shuttletrack
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from shuttletrack.board import ShuttleBoard
from shuttletrack.clock import FixedClock
from shuttletrack.config import DEFAULT_CONFIG, EC_S, NINETY_SIX, S120
from shuttletrack.exceptions import UpstreamError
from shuttletrack.tripshot_client import TripShotClient

NY = ZoneInfo("America/New_York")
NOW = datetime(2025, 1, 15, 10, 0, tzinfo=NY)


def at(hour: int, minute: int) -> str:
    return datetime(2025, 1, 15, hour, minute, tzinfo=NY).isoformat()


# Both origin requests see the same rides; each origin must pick out its own
COMMUTE_PLAN = {
    "routes": [
        {"routeId": "g", "name": "Green Loop"},
        {"routeId": "r", "name": "Red Line"},
    ],
    "rides": [
        {
            "routeId": "g",
            "stopStatus": [
                {"Arrived": {"stopId": EC_S.stop_id, "scheduledAt": at(9, 58)}},
                {"Pending": {"stopId": NINETY_SIX.stop_id, "scheduledAt": at(10, 10)}},
            ],
        },
        {
            "routeId": "g",
            "stopStatus": [
                {"Pending": {"stopId": EC_S.stop_id, "scheduledAt": at(10, 4)}},
                {"Pending": {"stopId": NINETY_SIX.stop_id, "scheduledAt": at(10, 16)}},
            ],
        },
        {
            "routeId": "r",
            "stopStatus": [
                {"Pending": {"stopId": S120.stop_id, "scheduledAt": at(10, 7), "expectedArrivalTime": at(10, 11)}},
            ],
        },
        {"routeId": "r", "mode": "Walking", "stopStatus": [{"stopId": S120.stop_id, "scheduledAt": at(10, 3)}]},
    ],
}


class TestShuttleBoard(unittest.TestCase):
    """Test concurrent fetching, normalization and stale filtering."""

    def setUp(self):
        self.clock = FixedClock(NOW)
        self.client = MagicMock(spec=TripShotClient)
        self.board = ShuttleBoard(DEFAULT_CONFIG, self.clock, client=self.client)

    def test_fetch_both_origins(self):
        self.client.fetch_commute_plan.return_value = COMMUTE_PLAN

        boards = asyncio.run(self.board.fetch())

        self.assertEqual(set(boards), {"ecS", "s120"})
        requested = [call.args[0] for call in self.client.fetch_commute_plan.call_args_list]
        self.assertCountEqual(requested, [EC_S, S120])

        ec = boards["ecS"]
        self.assertEqual(ec.stop_name, "EC S")
        # The 9:58 departure is already gone
        self.assertEqual([e.raw_iso for e in ec.green], [at(10, 4)])
        self.assertTrue(ec.green[0].direct)
        self.assertEqual(ec.red, [])

        s120 = boards["s120"]
        self.assertEqual(s120.stop_name, "120 S")
        self.assertEqual(len(s120.red), 1)
        self.assertTrue(s120.red[0].delayed)
        self.assertFalse(s120.red[0].direct)
        self.assertEqual(s120.green, [])

    def test_filter_reads_clock_after_normalizing(self):
        self.client.fetch_commute_plan.return_value = COMMUTE_PLAN
        normalize = self.board.normalizer.normalize
        normalized = {}

        def normalize_then_wait(document, origin):
            board = normalize(document, origin)
            normalized[origin.name] = [e.raw_iso for e in board.green]
            # Time passes between normalizing and filtering
            self.clock.advance(minutes=5)
            return board

        with patch.object(self.board.normalizer, "normalize", side_effect=normalize_then_wait):
            boards = asyncio.run(self.board.fetch())

        # 10:04 was still ahead at 10:00 but is gone by 10:05
        self.assertIn(at(10, 4), normalized["EC S"])
        self.assertEqual(boards["ecS"].green, [])
        # 10:11 is still ahead at 10:10
        self.assertEqual([e.raw_iso for e in boards["s120"].red], [at(10, 11)])

    def test_to_dict(self):
        self.client.fetch_commute_plan.return_value = COMMUTE_PLAN

        result = asyncio.run(self.board.to_dict())

        self.assertEqual(result["ecS"]["stopName"], "EC S")
        self.assertEqual(result["s120"]["red"][0]["routeName"], "Red Line")
        self.assertEqual(result["s120"]["red"][0]["inMinutes"], 11)
        self.assertEqual(result["s120"]["blue"], [])

    def test_upstream_failure_is_not_partial(self):
        def fetch(origin):
            if origin is S120:
                raise UpstreamError("TripShot", "HTTP 502", 502)
            return COMMUTE_PLAN

        self.client.fetch_commute_plan.side_effect = fetch

        with self.assertRaises(UpstreamError):
            asyncio.run(self.board.fetch())


if __name__ == "__main__":
    unittest.main()
