"""Summary statistics extracted from raw task samples.

Every extractor is a pure function over an already-captured sample sequence.
Empty or degenerate inputs yield zeros rather than raising, so the validity
gate downstream can decide what to trust.
"""
from __future__ import annotations

import math
from dataclasses import dataclass, field, asdict
from typing import Dict, Mapping, Sequence

from .types import CATEGORIES, MemoryRoundResult, QuestionBankItem, ReactionSample

__all__ = [
    "mean",
    "sample_sd",
    "AttentionMetrics",
    "MemoryMetrics",
    "FunctionalMetrics",
    "extract_attention",
    "extract_memory",
    "item_score",
    "extract_functional",
]


def mean(values: Sequence[float]) -> float:
    n = len(values)
    # divide first so very large samples cannot overflow the running sum
    return math.fsum(v / n for v in values) if n else 0.0


def sample_sd(values: Sequence[float], mu: float | None = None) -> float:
    """Bessel-corrected standard deviation; 0 for fewer than two values."""

    n = len(values)
    if n < 2:
        return 0.0
    m = mean(values) if mu is None else mu
    dev = [x - m for x in values]
    scale = max(abs(d) for d in dev)
    if scale == 0:
        return 0.0
    return scale * math.sqrt(math.fsum((d / scale) ** 2 for d in dev) / (n - 1))


@dataclass
class AttentionMetrics:
    valid_count: int = 0
    mean_rt: float = 0.0
    sd_rt: float = 0.0
    lapses: int = 0
    false_starts: int = 0
    cov: float = 0.0
    fatigue_index: float = 0.0

    def to_dict(self) -> Dict[str, float]:
        return asdict(self)


@dataclass
class MemoryMetrics:
    rounds: int = 0
    max_span: int = 0
    avg_recall_latency_ms: float = 0.0
    throughput: float = 0.0

    def to_dict(self) -> Dict[str, float]:
        return asdict(self)


@dataclass
class FunctionalMetrics:
    answered: int = 0
    total_weighted: float = 0.0
    total_weight: float = 0.0
    category_scores: Dict[str, float] = field(default_factory=lambda: {c: 0.0 for c in CATEGORIES})


def extract_attention(samples: Sequence[ReactionSample]) -> AttentionMetrics:
    valid = [s for s in samples if not s.is_false_start]
    rts = [float(s.reaction_time_ms) for s in valid]

    mu = mean(rts)
    sd = sample_sd(rts, mu)
    midpoint = len(rts) // 2
    first_half, second_half = rts[:midpoint], rts[midpoint:]
    fatigue = mean(second_half) - mean(first_half) if second_half else 0.0

    return AttentionMetrics(
        valid_count=len(valid),
        mean_rt=mu,
        sd_rt=sd,
        # lapses are counted over the full sequence, false starts included
        lapses=sum(1 for s in samples if s.is_lapse),
        false_starts=sum(1 for s in samples if s.is_false_start),
        cov=(sd / mu) * 100.0 if mu > 0 else 0.0,
        fatigue_index=fatigue,
    )


def extract_memory(rounds: Sequence[MemoryRoundResult]) -> MemoryMetrics:
    max_span = max((r.sequence_length for r in rounds if r.success), default=0)
    latency = mean([float(r.avg_click_latency_ms) for r in rounds])
    latency_sec = latency / 1000.0
    return MemoryMetrics(
        rounds=len(rounds),
        max_span=int(max_span),
        avg_recall_latency_ms=latency,
        throughput=max_span / latency_sec if latency_sec > 0 else 0.0,
    )


def item_score(item: QuestionBankItem, chosen_index: int) -> float:
    """Normalized answer quality: 1.0 for the first option, 0.0 for the last."""

    n = len(item.options)
    idx = int(chosen_index)
    if not 0 <= idx < n:
        raise ValueError(f"item {item.id}: chosen index {idx} outside 0..{n - 1}")
    return (n - 1 - idx) / (n - 1)


def extract_functional(
    answered: Mapping[int, int],
    active_set: Sequence[QuestionBankItem],
) -> FunctionalMetrics:
    out = FunctionalMetrics()
    seen: set[int] = set()
    for item in active_set:
        if item.id not in answered or item.id in seen:
            continue
        seen.add(item.id)
        weighted = item_score(item, answered[item.id]) * item.weight
        out.answered += 1
        out.total_weighted += weighted
        out.total_weight += item.weight
        out.category_scores[item.category] += weighted
    return out
