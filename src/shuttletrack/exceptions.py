"""Exceptions raised by the upstream clients."""

from typing import Optional


class UpstreamError(Exception):
    """An upstream API request failed (transport, HTTP status, or bad JSON)."""

    def __init__(self, service: str, message: str, status_code: Optional[int] = None):
        self.service = service
        self.status_code = status_code
        super().__init__(f"{service}: {message}")
