# neuro_core/insights.py
from __future__ import annotations
from typing import List

from . import config
from .metrics import AttentionMetrics, MemoryMetrics
from .validators import ValidityReport

NORMAL_TEXT = "Performance within parameters."


def insight_clauses(att: AttentionMetrics, mem: MemoryMetrics, validity: ValidityReport) -> List[str]:
    """Clauses in fixed domain order: attention first, then memory."""
    out: List[str] = []
    if not validity.attention:
        out.append("Reflexes task data discarded due to lack of participation.")
    else:
        if att.false_starts > config.INSIGHT_FALSE_STARTS_MAX:
            out.append("Impulsivity detected.")
        if att.sd_rt > config.INSIGHT_SD_RT_MAX_MS:
            out.append("High reaction variability.")
        if att.fatigue_index > config.INSIGHT_FATIGUE_MAX_MS:
            out.append("Performance decrement over time.")

    if not validity.memory:
        out.append("Memory span data unavailable.")
    elif mem.max_span < config.INSIGHT_SPAN_MIN:
        out.append("Working memory below average.")
    return out


def insight_text(att: AttentionMetrics, mem: MemoryMetrics, validity: ValidityReport) -> str:
    clauses = insight_clauses(att, mem, validity)
    return " ".join(clauses) if clauses else NORMAL_TEXT
