"""
Process-wide registry of monitored variables.

Variables render their current value as a JSON value expression. The
registry is the default source the snapshot collector reads from, and
the place where the exporter publishes its own export counter.
"""

import gc
import json
import math
import sys
import logging
import threading
from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, Iterable, List, Optional, Tuple

logger = logging.getLogger(__name__)


class Var(ABC):
    """A monitored variable."""

    @abstractmethod
    def render(self) -> str:
        """Return the current value as a JSON value expression."""

    def __str__(self) -> str:
        return self.render()


class IntVar(Var):
    def __init__(self, value: int = 0):
        self._lock = threading.Lock()
        self._value = value

    def add(self, delta: int = 1):
        with self._lock:
            self._value += delta

    def set(self, value: int):
        with self._lock:
            self._value = value

    @property
    def value(self) -> int:
        with self._lock:
            return self._value

    def render(self) -> str:
        return str(self.value)


class FloatVar(Var):
    """Float variable; NaN and infinities render as null."""

    def __init__(self, value: float = 0.0):
        self._lock = threading.Lock()
        self._value = value

    def add(self, delta: float):
        with self._lock:
            self._value += delta

    def set(self, value: float):
        with self._lock:
            self._value = value

    @property
    def value(self) -> float:
        with self._lock:
            return self._value

    def render(self) -> str:
        value = self.value
        return json.dumps(value if math.isfinite(value) else None)


class StringVar(Var):
    def __init__(self, value: str = ""):
        self._lock = threading.Lock()
        self._value = value

    def set(self, value: str):
        with self._lock:
            self._value = value

    @property
    def value(self) -> str:
        with self._lock:
            return self._value

    def render(self) -> str:
        return json.dumps(self.value)


class FuncVar(Var):
    """Variable whose value is computed on every render."""

    def __init__(self, func: Callable[[], Any]):
        self.func = func

    def render(self) -> str:
        return json.dumps(self.func())


class MapVar(Var):
    """String-keyed map of variables, rendered as a JSON object sorted by key."""

    def __init__(self):
        self._lock = threading.RLock()
        self._vars: Dict[str, Var] = {}

    def get(self, key: str) -> Optional[Var]:
        with self._lock:
            return self._vars.get(key)

    def set(self, key: str, var: Var):
        with self._lock:
            self._vars[key] = var

    def add(self, key: str, delta: int = 1):
        with self._lock:
            var = self._vars.get(key)
            if var is None:
                var = self._vars[key] = IntVar()
        var.add(delta)

    def add_float(self, key: str, delta: float):
        with self._lock:
            var = self._vars.get(key)
            if var is None:
                var = self._vars[key] = FloatVar()
        var.add(delta)

    def items(self) -> List[Tuple[str, Var]]:
        with self._lock:
            return sorted(self._vars.items())

    def render(self) -> str:
        parts = [f"{json.dumps(key)}: {var.render()}" for key, var in self.items()]
        return "{" + ", ".join(parts) + "}"


class VariableSource(ABC):
    """Anything that can enumerate (name, rendered value) pairs."""

    @abstractmethod
    def variables(self) -> Iterable[Tuple[str, str]]:
        """Yield every variable as a (name, JSON value expression) pair."""


class VariableRegistry(VariableSource):
    def __init__(self):
        self._lock = threading.RLock()
        self._vars: Dict[str, Var] = {}

    def publish(self, name: str, var: Var) -> Var:
        """Register a variable under a unique name."""
        with self._lock:
            if name in self._vars:
                raise ValueError(f"Variable '{name}' is already published")
            self._vars[name] = var
        logger.debug(f"Published variable {name}")
        return var

    def unpublish(self, name: str) -> Optional[Var]:
        with self._lock:
            return self._vars.pop(name, None)

    def get(self, name: str) -> Optional[Var]:
        with self._lock:
            return self._vars.get(name)

    def int_var(self, name: str) -> IntVar:
        """Get the integer variable published under name, creating it if needed."""
        with self._lock:
            var = self._vars.get(name)
            if var is None:
                return self.publish(name, IntVar())
            if not isinstance(var, IntVar):
                raise TypeError(f"Variable '{name}' is a {type(var).__name__}, not an IntVar")
            return var

    def clear(self):
        with self._lock:
            self._vars.clear()

    def variables(self) -> List[Tuple[str, str]]:
        # Copy under the lock, render outside it: FuncVars may take their own locks.
        with self._lock:
            entries = sorted(self._vars.items())
        return [(name, var.render()) for name, var in entries]

    def __contains__(self, name: str) -> bool:
        with self._lock:
            return name in self._vars

    def __len__(self) -> int:
        with self._lock:
            return len(self._vars)


def _gc_stats() -> Dict[str, Any]:
    return {
        "counts": list(gc.get_count()),
        "generations": gc.get_stats(),
    }


_default_registry: Optional[VariableRegistry] = None
_default_lock = threading.Lock()


def get_registry() -> VariableRegistry:
    """Get the process-wide registry, creating it with the default variables on first use."""
    global _default_registry
    with _default_lock:
        if _default_registry is None:
            registry = VariableRegistry()
            registry.publish("cmdline", FuncVar(lambda: list(sys.argv)))
            registry.publish("gc", FuncVar(_gc_stats))
            _default_registry = registry
        return _default_registry


def publish(name: str, var: Var) -> Var:
    """Publish a variable in the process-wide registry."""
    return get_registry().publish(name, var)


def new_int(name: str) -> IntVar:
    return get_registry().publish(name, IntVar())


def new_float(name: str) -> FloatVar:
    return get_registry().publish(name, FloatVar())


def new_string(name: str) -> StringVar:
    return get_registry().publish(name, StringVar())


def new_map(name: str) -> MapVar:
    return get_registry().publish(name, MapVar())
