"""
Background exporter that periodically sends the process's monitored
variables to a Cube collector.

Typical use in a long-running service:

    from varexport import VariableExporter, new_int

    requests_served = new_int("requests_served")
    exporter = VariableExporter("myevents")
    exporter.start()
"""

import logging
import threading
from datetime import datetime
from typing import Optional

from .config import ExportConfig, parse_interval
from .scheduler import ExportResult, ExportScheduler
from .transport import HttpTransport

logger = logging.getLogger(__name__)


class VariableExporter:
    def __init__(self, event_type: str, config: Optional[ExportConfig] = None,
                 scheduler: Optional[ExportScheduler] = None):
        self.event_type = event_type
        self.config = config or ExportConfig.from_env()
        self.scheduler = scheduler or ExportScheduler(
            transport=HttpTransport(timeout=self.config.request_timeout)
        )
        self._thread: Optional[threading.Thread] = None

    @property
    def put_url(self) -> str:
        return self.config.put_url

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def run(self):
        """Export until stopped. Returns immediately when export is disabled."""
        if not self.config.enabled:
            logger.info("Variable export is disabled")
            return

        logger.info(f"Exporting variables to {self.put_url} with event type {self.event_type}")
        self.scheduler.run_forever(self.event_type, self.put_url, self.config.export_interval)

    def start(self) -> bool:
        """Start exporting on a daemon thread. Returns False if export is disabled."""
        if not self.config.enabled:
            logger.info("Variable export is disabled")
            return False
        if self.running:
            return True

        # Surface a bad interval to the caller instead of killing the thread.
        parse_interval(self.config.export_interval)

        # A previous stop() leaves the scheduler stopped; clear it for the new thread.
        self.scheduler.reset()

        self._thread = threading.Thread(target=self.run, name="varexport", daemon=True)
        self._thread.start()
        logger.info(f"Variable exporter started with {self.config.export_interval} interval")
        return True

    def stop(self, timeout: float = 5):
        self.scheduler.stop()
        if self._thread:
            self._thread.join(timeout=timeout)
            self._thread = None
        logger.info("Variable exporter stopped")

    def export_now(self, timestamp: Optional[datetime] = None) -> ExportResult:
        """Send the current variables once, outside the periodic schedule."""
        return self.scheduler.run_once(self.event_type, self.put_url, timestamp)


def run(event_type: str, config: Optional[ExportConfig] = None):
    """Export variables forever using the environment's configuration. Blocks."""
    VariableExporter(event_type, config).run()
