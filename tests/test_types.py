from __future__ import annotations

import pytest

from neuro_core.types import (
    CompositeAssessmentRecord,
    MemoryRoundResult,
    QuestionBankItem,
    QuestionResponseLogEntry,
    ReactionSample,
)


def _item(**overrides):
    base = dict(id=1, category="Safety", text="q", options=["a", "b", "c"], correct_index=0, weight=1.0)
    base.update(overrides)
    return QuestionBankItem(**base)


def test_options_are_frozen_to_tuple():
    it = _item()
    assert it.options == ("a", "b", "c")
    hash(it)


@pytest.mark.parametrize(
    "overrides",
    [
        {"options": ["only"]},
        {"weight": 0.0},
        {"weight": -1.0},
        {"category": "Sleep"},
        {"correct_index": 3},
        {"correct_index": -1},
    ],
)
def test_bank_item_contract_violations(overrides):
    with pytest.raises(ValueError):
        _item(**overrides)


def test_negative_reaction_time_rejected():
    with pytest.raises(ValueError):
        ReactionSample(0.0, -1.0)


@pytest.mark.parametrize("length,latency", [(-1, 100.0), (3, -5.0)])
def test_negative_memory_values_rejected(length, latency):
    with pytest.raises(ValueError):
        MemoryRoundResult(level=1, success=True, sequence_length=length, avg_click_latency_ms=latency)


def test_log_entry_dict_roundtrip_tolerates_missing_timestamp():
    raw = {"patient_id": "p", "question_id": "7", "category": "Mood", "score_normalized": 0.5}
    entry = QuestionResponseLogEntry.from_dict(raw)
    assert entry.question_id == 7
    assert entry.timestamp == 0.0
    assert QuestionResponseLogEntry.from_dict(entry.to_dict()) == entry


def test_record_from_partial_dict_fills_defaults():
    rec = CompositeAssessmentRecord.from_dict({"patient_id": "p", "global_index": 55})
    assert rec.global_index == 55.0
    assert rec.alerts == []
    assert rec.raw_metrics == {}


@pytest.mark.parametrize("rt", [float("nan"), float("inf"), float("-inf")])
def test_non_finite_reaction_time_rejected(rt):
    with pytest.raises(ValueError):
        ReactionSample(0.0, rt)
    with pytest.raises(ValueError):
        ReactionSample.observe(0.0, rt)


@pytest.mark.parametrize("latency", [float("nan"), float("inf")])
def test_non_finite_recall_latency_rejected(latency):
    with pytest.raises(ValueError):
        MemoryRoundResult(level=3, success=True, sequence_length=3, avg_click_latency_ms=latency)


@pytest.mark.parametrize("weight", [float("nan"), float("inf")])
def test_non_finite_item_weight_rejected(weight):
    with pytest.raises(ValueError):
        _item(weight=weight)


@pytest.mark.parametrize("score", [-0.1, 1.5, 7.0, float("nan")])
def test_log_entry_score_outside_unit_interval_rejected(score):
    with pytest.raises(ValueError):
        QuestionResponseLogEntry("p", 1, "Safety", score)
    with pytest.raises(ValueError):
        QuestionResponseLogEntry.from_dict(
            {"patient_id": "p", "question_id": 1, "category": "Safety", "score_normalized": score}
        )
