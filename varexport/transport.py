"""
HTTP delivery of serialized events to the collector.
"""

import logging
from typing import Optional

import requests

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SECONDS = 10.0


class TransportError(Exception):
    """Sending one event failed before any response was received."""

    def __init__(self, url: str, payload: bytes, cause: Exception):
        super().__init__(f"Failed to POST event to {url}: {cause}")
        self.url = url
        self.payload = payload
        self.cause = cause


class HttpTransport:
    """
    Posts payloads with one blocking HTTP request each.

    Any response counts as delivered: the collector's status code is only
    logged, never checked.
    """

    def __init__(self, timeout: float = DEFAULT_TIMEOUT_SECONDS, session: Optional[requests.Session] = None):
        self.timeout = timeout
        self.session = session or requests.Session()

    def send(self, url: str, payload: bytes):
        """POST payload to url, raising TransportError on connection-level failure."""
        try:
            # stream=True leaves the body unread; closing the response releases the connection.
            with self.session.post(
                url,
                data=payload,
                headers={"Content-Type": "application/json"},
                timeout=self.timeout,
                stream=True,
            ) as response:
                logger.debug(f"Collector at {url} answered with status {response.status_code}")
        except requests.exceptions.RequestException as e:
            logger.error(f"Error POSTing events to collector: {e}")
            logger.error(f"The request we tried to post: {payload.decode('utf-8', errors='replace')}")
            raise TransportError(url, payload, e) from e

    def close(self):
        self.session.close()
