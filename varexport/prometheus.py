"""
Expose prometheus_client metrics as a monitored variable.
"""

import json
import math
import logging
from typing import Dict, Optional

from prometheus_client import REGISTRY, CollectorRegistry

from .registry import Var, VariableRegistry, get_registry

logger = logging.getLogger(__name__)


def _sample_key(name: str, labels: Dict[str, str]) -> str:
    if not labels:
        return name
    rendered = ",".join(f'{k}="{v}"' for k, v in sorted(labels.items()))
    return f"{name}{{{rendered}}}"


class PrometheusVar(Var):
    """Renders every sample of a prometheus registry as one JSON object."""

    def __init__(self, collector_registry: Optional[CollectorRegistry] = None):
        self.collector_registry = collector_registry or REGISTRY

    def samples(self) -> Dict[str, Optional[float]]:
        values = {}
        for family in self.collector_registry.collect():
            for sample in family.samples:
                value = sample.value
                values[_sample_key(sample.name, sample.labels)] = value if math.isfinite(value) else None
        return values

    def render(self) -> str:
        return json.dumps(self.samples(), sort_keys=True)


def publish_prometheus(registry: Optional[VariableRegistry] = None, name: str = "prometheus",
                       collector_registry: Optional[CollectorRegistry] = None) -> PrometheusVar:
    """Publish a prometheus registry's samples under one variable name."""
    registry = registry if registry is not None else get_registry()
    var = PrometheusVar(collector_registry)
    registry.publish(name, var)
    logger.info(f"Publishing prometheus metrics as variable '{name}'")
    return var
