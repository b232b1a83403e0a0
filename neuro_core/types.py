from __future__ import annotations
import math
from dataclasses import dataclass, field, asdict
from typing import List, Dict, Optional, Literal

from .config import PVT_LAPSE_THRESHOLD_MS, PVT_FALSE_START_FLOOR_MS

Category = Literal["Safety", "Memory", "Executive", "Mood"]
CATEGORIES: tuple[str, ...] = ("Safety", "Memory", "Executive", "Mood")


@dataclass(frozen=True)
class ReactionSample:
    timestamp: float
    reaction_time_ms: float
    is_false_start: bool = False
    is_lapse: bool = False

    def __post_init__(self):
        if not math.isfinite(self.reaction_time_ms) or self.reaction_time_ms < 0:
            raise ValueError(f"reaction_time_ms must be finite and >= 0, got {self.reaction_time_ms}")

    @classmethod
    def observe(cls, timestamp: float, reaction_time_ms: float) -> "ReactionSample":
        """Build a sample with flags derived from the configured thresholds."""

        rt = float(reaction_time_ms)
        return cls(
            timestamp=timestamp,
            reaction_time_ms=rt,
            is_false_start=rt < PVT_FALSE_START_FLOOR_MS,
            is_lapse=rt > PVT_LAPSE_THRESHOLD_MS,
        )


@dataclass(frozen=True)
class MemoryRoundResult:
    level: int; success: bool; sequence_length: int; avg_click_latency_ms: float

    def __post_init__(self):
        if self.sequence_length < 0:
            raise ValueError(f"sequence_length must be >= 0, got {self.sequence_length}")
        if not math.isfinite(self.avg_click_latency_ms) or self.avg_click_latency_ms < 0:
            raise ValueError(f"avg_click_latency_ms must be finite and >= 0, got {self.avg_click_latency_ms}")


@dataclass(frozen=True)
class QuestionBankItem:
    id: int; category: Category; text: str
    options: tuple[str, ...]
    correct_index: int = 0
    weight: float = 1.0

    def __post_init__(self):
        # lists from JSON become tuples so the item stays hashable
        object.__setattr__(self, "options", tuple(self.options))
        if self.category not in CATEGORIES:
            raise ValueError(f"item {self.id}: unknown category {self.category!r}")
        if len(self.options) < 2:
            raise ValueError(f"item {self.id}: needs at least 2 options, got {len(self.options)}")
        if not (math.isfinite(self.weight) and self.weight > 0):
            raise ValueError(f"item {self.id}: weight must be finite and > 0, got {self.weight}")
        if not 0 <= self.correct_index < len(self.options):
            raise ValueError(f"item {self.id}: correct_index {self.correct_index} out of range")


@dataclass(frozen=True)
class QuestionResponseLogEntry:
    patient_id: str; question_id: int; category: str
    score_normalized: float
    timestamp: float = 0.0

    def __post_init__(self):
        if not 0.0 <= self.score_normalized <= 1.0:
            raise ValueError(f"question {self.question_id}: score_normalized must be in [0, 1], got {self.score_normalized}")

    def to_dict(self) -> Dict[str, object]:
        return asdict(self)

    @classmethod
    def from_dict(cls, raw: Dict[str, object]) -> "QuestionResponseLogEntry":
        return cls(
            patient_id=str(raw.get("patient_id", "")),
            question_id=int(raw.get("question_id", 0)),
            category=str(raw.get("category", "")),
            score_normalized=float(raw.get("score_normalized", 0.0)),
            timestamp=float(raw.get("timestamp", 0.0) or 0.0),
        )


@dataclass(frozen=True)
class CompositeAssessmentRecord:
    patient_id: str
    date: float
    attention_index: float
    memory_index: float
    functional_index: float
    global_index: float
    risk_level: str
    raw_metrics: Dict[str, float] = field(default_factory=dict)
    validity_flags: Dict[str, bool] = field(default_factory=dict)
    insight_text: str = ""
    alerts: List[str] = field(default_factory=list)
    category_scores: Dict[str, float] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, object]:
        """JSON-friendly representation used for persistence."""

        return asdict(self)

    @classmethod
    def from_dict(cls, raw: Dict[str, object]) -> "CompositeAssessmentRecord":
        return cls(
            patient_id=str(raw.get("patient_id", "")),
            date=float(raw.get("date", 0.0) or 0.0),
            attention_index=float(raw.get("attention_index", 0.0)),
            memory_index=float(raw.get("memory_index", 0.0)),
            functional_index=float(raw.get("functional_index", 0.0)),
            global_index=float(raw.get("global_index", 0.0)),
            risk_level=str(raw.get("risk_level", "")),
            raw_metrics=dict(raw.get("raw_metrics") or {}),
            validity_flags=dict(raw.get("validity_flags") or {}),
            insight_text=str(raw.get("insight_text", "")),
            alerts=list(raw.get("alerts") or []),
            category_scores=dict(raw.get("category_scores") or {}),
        )


@dataclass(frozen=True)
class TrendResult:
    status: str
    direction: Literal["up", "down", "flat"]
    delta: Optional[float] = None
