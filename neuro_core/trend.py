# neuro_core/trend.py
from __future__ import annotations
from typing import Any, Sequence

from . import config
from .types import TrendResult

BASELINE = "Baseline Established"
IMPROVING = "Showing Improvement"
DECLINING = "Decline Detected"
STABLE = "Cognitively Stable"


def _global_index(rec: Any) -> float:
    if isinstance(rec, dict):
        return float(rec.get("global_index", 0.0))
    return float(getattr(rec, "global_index", 0.0))


def classify_trend(history: Sequence[Any]) -> TrendResult:
    """Label the change between the two most recent records (most recent first)."""

    if len(history) < 2:
        return TrendResult(status=BASELINE, direction="flat")
    diff = _global_index(history[0]) - _global_index(history[1])
    if diff > config.TREND_THRESHOLD:
        return TrendResult(status=IMPROVING, direction="up", delta=diff)
    if diff < -config.TREND_THRESHOLD:
        return TrendResult(status=DECLINING, direction="down", delta=diff)
    return TrendResult(status=STABLE, direction="flat", delta=diff)
