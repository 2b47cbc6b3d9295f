"""
Periodic export of process variables to a Cube collector.
"""

from .config import ConfigurationError, ExportConfig, parse_duration, parse_interval
from .registry import (
    Var, IntVar, FloatVar, StringVar, MapVar, FuncVar,
    VariableSource, VariableRegistry, get_registry,
    publish, new_int, new_float, new_string, new_map
)
from .snapshot import MonitoredVariable, Snapshot, SnapshotCollector
from .serializer import Event, format_timestamp, serialize_event
from .transport import HttpTransport, TransportError
from .scheduler import (
    EXPORT_COUNTER_NAME, ExportResult, ExportScheduler,
    FailureSink, LoggingFailureSink
)
from .exporter import VariableExporter, run

__version__ = "1.0.0"

__all__ = [
    'ConfigurationError', 'ExportConfig', 'parse_duration', 'parse_interval',
    'Var', 'IntVar', 'FloatVar', 'StringVar', 'MapVar', 'FuncVar',
    'VariableSource', 'VariableRegistry', 'get_registry',
    'publish', 'new_int', 'new_float', 'new_string', 'new_map',
    'MonitoredVariable', 'Snapshot', 'SnapshotCollector',
    'Event', 'format_timestamp', 'serialize_event',
    'HttpTransport', 'TransportError',
    'EXPORT_COUNTER_NAME', 'ExportResult', 'ExportScheduler',
    'FailureSink', 'LoggingFailureSink',
    'VariableExporter', 'run',
]
