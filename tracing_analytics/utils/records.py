"""
Leaf record types shared by every stage of the pipeline.
"""

import math
from dataclasses import dataclass, fields, is_dataclass
from enum import Enum
from typing import Any


@dataclass(frozen=True)
class RawTouchPoint:
    """One touch sample: position in px, timestamp in ms, normalized pressure."""
    x: float
    y: float
    timestamp: int
    pressure: float = 1.0


@dataclass(frozen=True)
class NotComputed:
    """Marks a field this pipeline deliberately did not compute, with the reason why."""
    reason: str

    def to_dict(self):
        return {'not_computed': True, 'reason': self.reason}


def to_serializable(value: Any) -> Any:
    """Recursively convert records, enums and containers into JSON-safe values."""
    if isinstance(value, NotComputed):
        return value.to_dict()
    if isinstance(value, Enum):
        return value.value
    if is_dataclass(value) and not isinstance(value, type):
        return {f.name: to_serializable(getattr(value, f.name)) for f in fields(value)}
    if isinstance(value, dict):
        return {str(k): to_serializable(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [to_serializable(v) for v in value]
    if isinstance(value, float) and not math.isfinite(value):
        return None
    if hasattr(value, 'x') and hasattr(value, 'y'):
        return {'x': value.x, 'y': value.y}
    if hasattr(value, 'item'):
        return value.item()
    return value
