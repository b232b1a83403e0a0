# neuro_core/engine.py
from __future__ import annotations
from typing import Dict, List, Mapping, Optional, Sequence
import logging, time

from .types import (
    CompositeAssessmentRecord,
    MemoryRoundResult,
    QuestionBankItem,
    QuestionResponseLogEntry,
    ReactionSample,
)
from .metrics import (
    AttentionMetrics,
    MemoryMetrics,
    extract_attention,
    extract_functional,
    extract_memory,
    item_score,
)
from .validators import gate
from .scoring import score_attention, score_memory, score_functional, _clamp
from .insights import insight_text
from .risk import risk_level
from .config import GLOBAL_WEIGHTS, DEBUG_TRACE


log = logging.getLogger(__name__)


def global_index(attention: float, memory: float, functional: float) -> float:
    """Penalized composite: an invalid domain enters the sum as 0, weights are never renormalized."""

    w = GLOBAL_WEIGHTS
    return _clamp(w["attention"] * attention + w["memory"] * memory + w["functional"] * functional)


def _raw_metrics(att: AttentionMetrics, mem: MemoryMetrics) -> Dict[str, float]:
    return {
        "mean_rt": att.mean_rt,
        "sd_rt": att.sd_rt,
        "cov": att.cov,
        "lapses": att.lapses,
        "fatigue_index": att.fatigue_index,
        "false_starts": att.false_starts,
        "valid_reactions": att.valid_count,
        "max_span": mem.max_span,
        "avg_recall_latency_ms": mem.avg_recall_latency_ms,
        "throughput": mem.throughput,
    }


def compute_session(
    reaction_samples: Sequence[ReactionSample],
    memory_rounds: Sequence[MemoryRoundResult],
    answered_questions: Mapping[int, int],
    active_question_set: Sequence[QuestionBankItem],
    *,
    patient_id: str = "",
    date: Optional[float] = None,
) -> CompositeAssessmentRecord:
    att = extract_attention(reaction_samples)
    mem = extract_memory(memory_rounds)
    fn = extract_functional(answered_questions, active_question_set)
    validity = gate(att, mem, fn)

    if not validity.attention:
        att = AttentionMetrics()

    attention, att_parts = score_attention(att) if validity.attention else (0.0, {})
    memory, mem_parts = score_memory(mem) if validity.memory else (0.0, {})
    functional, _ = score_functional(fn) if validity.functional else (0.0, {})
    composite = global_index(attention, memory, functional)

    log.debug(
        "session patient=%s attention=%.2f %s memory=%.2f %s functional=%.2f global=%.2f alerts=%s",
        patient_id, attention, att_parts, memory, mem_parts, functional, composite, validity.alerts,
    )
    if DEBUG_TRACE:
        log.info("trace attention=%s memory=%s functional_answered=%d", att.to_dict(), mem.to_dict(), fn.answered)

    return CompositeAssessmentRecord(
        patient_id=patient_id,
        date=time.time() if date is None else float(date),
        attention_index=attention,
        memory_index=memory,
        functional_index=functional,
        global_index=composite,
        risk_level=risk_level(composite),
        raw_metrics=_raw_metrics(att, mem),
        validity_flags=validity.flags(),
        insight_text=insight_text(att, mem, validity),
        alerts=list(validity.alerts),
        category_scores=dict(fn.category_scores),
    )


def response_log_entries(
    patient_id: str,
    answered_questions: Mapping[int, int],
    active_question_set: Sequence[QuestionBankItem],
    timestamp: Optional[float] = None,
) -> List[QuestionResponseLogEntry]:
    """Log rows for the answered items, fed back into the next adaptive selection."""

    ts = time.time() if timestamp is None else float(timestamp)
    out: List[QuestionResponseLogEntry] = []
    seen: set[int] = set()
    for item in active_question_set:
        if item.id not in answered_questions or item.id in seen:
            continue
        seen.add(item.id)
        out.append(
            QuestionResponseLogEntry(
                patient_id=patient_id,
                question_id=item.id,
                category=item.category,
                score_normalized=item_score(item, answered_questions[item.id]),
                timestamp=ts,
            )
        )
    return out
