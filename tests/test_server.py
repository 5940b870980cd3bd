"""Tests for the HTTP API."""

import os
import unittest
from unittest.mock import patch, AsyncMock, MagicMock
import sys
from pathlib import Path

from fastapi.testclient import TestClient

# Add src to path so we can import shuttletrack
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from shuttletrack.board import ShuttleBoard
from shuttletrack.config import AppConfig
from shuttletrack.exceptions import UpstreamError
from shuttletrack.models import SubwayBoard, SubwayDeparture, SubwayDestination
from shuttletrack.server import create_app
from shuttletrack.subway import TransiterClient

EMPTY_ORIGIN = {"green": [], "red": [], "blue": []}


class TestServer(unittest.TestCase):
    """Test the API routes with mocked collaborators."""

    def setUp(self):
        self.config = AppConfig(public_dir=str(Path(__file__).parent / "no-such-dir"))
        self.shuttle_board = MagicMock(spec=ShuttleBoard)
        self.shuttle_board.to_dict = AsyncMock()
        self.subway_client = MagicMock(spec=TransiterClient)
        app = create_app(self.config, shuttle_board=self.shuttle_board, subway_client=self.subway_client)
        self.http = TestClient(app)

    def test_health(self):
        response = self.http.get("/health")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["status"], "healthy")

    def test_shuttle(self):
        body = {"ecS": {"stopName": "EC S", **EMPTY_ORIGIN}, "s120": {"stopName": "120 S", **EMPTY_ORIGIN}}
        self.shuttle_board.to_dict.return_value = body

        response = self.http.get("/api/shuttle")

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json(), body)

    def test_shuttle_upstream_failure(self):
        self.shuttle_board.to_dict.side_effect = UpstreamError("TripShot", "HTTP 500", 500)

        response = self.http.get("/api/shuttle")

        self.assertEqual(response.status_code, 500)
        self.assertEqual(response.json(), {"error": "TripShot request failed"})

    def test_shuttle_unexpected_failure(self):
        self.shuttle_board.to_dict.side_effect = RuntimeError("boom")

        response = self.http.get("/api/shuttle")

        self.assertEqual(response.status_code, 500)
        self.assertEqual(response.json(), {"error": "Shuttle API error"})

    def test_subway(self):
        self.subway_client.get_board.return_value = SubwayBoard(
            stop_name="125 St",
            trains=[SubwayDestination("South Ferry", "1", [SubwayDeparture(4, "10:04 am")])],
        )

        response = self.http.get("/api/subway")

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["trains"][0]["departures"], [{"inMinutes": 4, "absolute": "10:04 am"}])

    def test_subway_upstream_failure(self):
        self.subway_client.get_board.side_effect = UpstreamError("Transiter", "HTTP 503", 503)

        response = self.http.get("/api/subway")

        self.assertEqual(response.status_code, 500)
        self.assertEqual(response.json(), {"error": "Transiter request failed"})


class TestAppConfig(unittest.TestCase):
    """Test environment overrides."""

    @patch.dict(os.environ, {"PORT": "8080", "TIMEZONE": "America/Chicago", "REQUEST_TIMEOUT": "2.5"})
    def test_from_env_overrides(self):
        config = AppConfig.from_env(dotenv=False)
        self.assertEqual(config.port, 8080)
        self.assertEqual(config.timezone, "America/Chicago")
        self.assertEqual(config.request_timeout, 2.5)
        self.assertEqual(config.ec_s.name, "EC S")

    @patch.dict(os.environ, {}, clear=True)
    def test_from_env_defaults(self):
        config = AppConfig.from_env(dotenv=False)
        self.assertEqual(config.port, 3000)
        self.assertEqual(config.destination.name, "96")


if __name__ == "__main__":
    unittest.main()
