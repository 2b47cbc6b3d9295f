"""
Variable snapshot capture.
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Optional

from .registry import VariableSource, get_registry

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MonitoredVariable:
    """A named variable and its pre-rendered JSON value."""
    name: str
    value: str


@dataclass
class Snapshot:
    """All monitored variables captured at one instant, in source order."""
    variables: List[MonitoredVariable] = field(default_factory=list)

    def as_dict(self) -> Dict[str, str]:
        return {var.name: var.value for var in self.variables}

    def names(self) -> List[str]:
        return [var.name for var in self.variables]

    def __iter__(self) -> Iterator[MonitoredVariable]:
        return iter(self.variables)

    def __len__(self) -> int:
        return len(self.variables)


class SnapshotCollector:
    def __init__(self, source: Optional[VariableSource] = None):
        self.source = source if source is not None else get_registry()

    def snapshot(self) -> Snapshot:
        """Capture every variable the source currently exposes."""
        variables = [MonitoredVariable(name, value) for name, value in self.source.variables()]
        logger.debug(f"Captured snapshot of {len(variables)} variables")
        return Snapshot(variables)
