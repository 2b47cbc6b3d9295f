"""
Periodic export of variable snapshots.

Every tick runs one snapshot -> serialize -> send cycle on the scheduler's
own thread. Cycles never overlap: ticks that come due while a send is still
in flight are skipped, and the next cycle runs on the next point of the
original tick grid.
"""

import time
import logging
import threading
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Optional

from .config import parse_interval
from .registry import IntVar, VariableRegistry, get_registry
from .serializer import format_timestamp, serialize_event
from .snapshot import SnapshotCollector
from .transport import HttpTransport, TransportError

logger = logging.getLogger(__name__)

EXPORT_COUNTER_NAME = "CubeExports"


@dataclass
class ExportResult:
    """Outcome of one export cycle."""
    event_type: str
    url: str
    timestamp: datetime
    payload: bytes
    error: Optional[TransportError] = None

    @property
    def ok(self) -> bool:
        return self.error is None


class FailureSink(ABC):
    @abstractmethod
    def record_failure(self, result: ExportResult):
        """Called once for every cycle whose send failed."""


class LoggingFailureSink(FailureSink):
    def record_failure(self, result: ExportResult):
        logger.warning(f"Error exporting variables for {format_timestamp(result.timestamp)}: {result.error}")


class ExportScheduler:
    def __init__(
        self,
        registry: Optional[VariableRegistry] = None,
        collector: Optional[SnapshotCollector] = None,
        transport: Optional[HttpTransport] = None,
        sink: Optional[FailureSink] = None,
        clock: Callable[[], float] = time.monotonic,
        now: Callable[[], datetime] = datetime.now,
        wait: Optional[Callable[[float], bool]] = None,
    ):
        self.registry = registry if registry is not None else get_registry()
        self.collector = collector or SnapshotCollector(self.registry)
        self.transport = transport or HttpTransport()
        self.sink = sink or LoggingFailureSink()
        self._clock = clock
        self._now = now
        self._stop_event = threading.Event()
        self._wait = wait or self._stop_event.wait
        self._counter: Optional[IntVar] = None

    @property
    def exports(self) -> int:
        """Number of completed periodic export cycles."""
        return self._counter.value if self._counter else 0

    @property
    def stopped(self) -> bool:
        return self._stop_event.is_set()

    def stop(self):
        """Ask run_forever to return at its next wait."""
        self._stop_event.set()

    def reset(self):
        """Clear a previous stop so run_forever can be entered again."""
        self._stop_event.clear()

    def run_once(self, event_type: str, collector_url: str, timestamp: Optional[datetime] = None) -> ExportResult:
        """Export the current variables once. Transport failures are returned, not raised."""
        timestamp = timestamp or self._now()
        payload = serialize_event(event_type, self.collector.snapshot(), timestamp)
        result = ExportResult(event_type=event_type, url=collector_url, timestamp=timestamp, payload=payload)

        try:
            self.transport.send(collector_url, payload)
        except TransportError as e:
            result.error = e
            self.sink.record_failure(result)

        return result

    def run_forever(self, event_type: str, collector_url: str, interval: str):
        """
        Export on every tick until stop() is called.

        Raises ConfigurationError before the first tick if the interval
        cannot be parsed.
        """
        interval_seconds = parse_interval(interval)
        self._counter = self.registry.int_var(EXPORT_COUNTER_NAME)

        logger.info(f"Exporting variables every {interval} to {collector_url} with event type {event_type}")

        next_tick = self._clock() + interval_seconds
        while not self._stop_event.is_set():
            delay = next_tick - self._clock()
            if delay > 0 and self._wait(delay):
                break
            if self._stop_event.is_set():
                break

            try:
                self.run_once(event_type, collector_url)
            except Exception as e:
                logger.error(f"Error in export cycle: {e}")
            finally:
                self._counter.add(1)

            next_tick += interval_seconds
            now = self._clock()
            if now >= next_tick:
                missed = int((now - next_tick) // interval_seconds) + 1
                next_tick += missed * interval_seconds
                logger.warning(f"Export cycle outlasted the interval, skipped {missed} tick(s)")

        logger.info(f"Variable export to {collector_url} stopped after {self.exports} cycles")
