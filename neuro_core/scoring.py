from __future__ import annotations
import math
from typing import Tuple, Dict, Any
from . import config
from .metrics import AttentionMetrics, FunctionalMetrics, MemoryMetrics


def _clamp(x: float, lo: float = 0.0, hi: float = 100.0) -> float:
    xf = float(x)
    if math.isnan(xf): return lo
    if xf < lo: return lo
    if xf > hi: return hi
    return xf


def score_attention(m: AttentionMetrics) -> Tuple[float, Dict[str, Any]]:
    """
    Returns (index in 0..100, sub-scores).
    Speed uses the reciprocal transform 1000/mean_rt; stability penalizes the
    coefficient of variation; vigilance penalizes lapses and false starts.
    """
    speed = _clamp((1000.0 / m.mean_rt) * config.SPEED_SCALE) if m.mean_rt > 0 else 0.0
    stability = _clamp(100.0 - m.cov * config.STABILITY_SENSITIVITY)
    vigilance = _clamp(
        100.0 - m.lapses * config.LAPSE_PENALTY - m.false_starts * config.FALSE_START_PENALTY
    )
    w = config.ATTENTION_WEIGHTS
    index = w["speed"] * speed + w["stability"] * stability + w["vigilance"] * vigilance
    return _clamp(index), {"speed": speed, "stability": stability, "vigilance": vigilance}


def score_memory(m: MemoryMetrics) -> Tuple[float, Dict[str, Any]]:
    span = _clamp((m.max_span / config.MEM_GRID_SIZE) * 100.0)
    efficiency = _clamp((m.throughput / config.MEM_THROUGHPUT_CEILING) * 100.0)
    w = config.MEMORY_WEIGHTS
    index = w["span"] * span + w["efficiency"] * efficiency
    return _clamp(index), {"span": span, "efficiency": efficiency}


def score_functional(m: FunctionalMetrics) -> Tuple[float, Dict[str, Any]]:
    if m.total_weight <= 0:
        return 0.0, {"total_weighted": 0.0, "total_weight": 0.0}
    index = _clamp((m.total_weighted / m.total_weight) * 100.0)
    return index, {"total_weighted": m.total_weighted, "total_weight": m.total_weight}
