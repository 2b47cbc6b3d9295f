"""
Event serialization for the Cube collector.

An event is posted as a JSON array holding a single object:

    [{"type": "myevents", "time": "Mon Jan  2 15:04:05 2006", "data": {...}}]

Variable values are inserted verbatim. They are already JSON value
expressions rendered by the registry, so they are not escaped again.
"""

import json
from datetime import datetime
from dataclasses import dataclass

from .snapshot import Snapshot

# Fixed English names so the rendered time does not depend on the locale.
_WEEKDAYS = ("Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun")
_MONTHS = ("Jan", "Feb", "Mar", "Apr", "May", "Jun",
           "Jul", "Aug", "Sep", "Oct", "Nov", "Dec")


@dataclass
class Event:
    """One export cycle's record."""
    type: str
    time: datetime
    data: Snapshot

    def to_json(self) -> bytes:
        data = ", ".join(f"{json.dumps(var.name)}: {var.value}" for var in self.data)
        record = (
            f'{{"type": {json.dumps(self.type)}, '
            f'"time": {json.dumps(format_timestamp(self.time))}, '
            f'"data": {{{data}}}}}'
        )
        return f"[{record}]".encode("utf-8")


def format_timestamp(timestamp: datetime) -> str:
    """Render a timestamp in ANSI C layout, e.g. 'Mon Jan  2 15:04:05 2006'."""
    return (
        f"{_WEEKDAYS[timestamp.weekday()]} {_MONTHS[timestamp.month - 1]} "
        f"{timestamp.day:>2} {timestamp.hour:02d}:{timestamp.minute:02d}:{timestamp.second:02d} "
        f"{timestamp.year}"
    )


def serialize_event(event_type: str, snapshot: Snapshot, timestamp: datetime) -> bytes:
    return Event(type=event_type, time=timestamp, data=snapshot).to_json()
