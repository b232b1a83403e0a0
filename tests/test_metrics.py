from __future__ import annotations

import math

import pytest

from neuro_core.metrics import (
    extract_attention,
    extract_functional,
    extract_memory,
    item_score,
    mean,
    sample_sd,
)
from neuro_core.types import MemoryRoundResult, ReactionSample

from tests.conftest import build_synthetic_bank, memory_round, reactions


def test_sd_of_empty_and_single_is_zero():
    assert sample_sd([]) == 0.0
    assert sample_sd([420.0]) == 0.0
    assert mean([]) == 0.0


def test_sd_uses_bessel_correction():
    values = [450.0, 460.0, 440.0, 1200.0, 455.0]
    assert mean(values) == pytest.approx(601.0)
    assert sample_sd(values) == pytest.approx(math.sqrt(448720.0 / 4))


def test_lapses_counted_over_all_samples_including_false_starts():
    samples = [
        ReactionSample(0.0, 300.0),
        ReactionSample(1.0, 650.0, is_lapse=True),
        ReactionSample(2.0, 700.0, is_false_start=True, is_lapse=True),
    ]
    m = extract_attention(samples)
    assert m.valid_count == 2
    assert m.lapses == 2
    assert m.false_starts == 1
    assert m.mean_rt == pytest.approx(475.0)


def test_fatigue_splits_valid_sequence_at_floor_midpoint():
    m = extract_attention(reactions(400, 420, 500, 520, 540))
    # first half [400, 420], second half [500, 520, 540]
    assert m.fatigue_index == pytest.approx(520.0 - 410.0)
    assert m.cov == pytest.approx(m.sd_rt / m.mean_rt * 100.0)


def test_fatigue_zero_when_no_valid_reactions():
    m = extract_attention(reactions(false_starts=3))
    assert m.valid_count == 0
    assert m.fatigue_index == 0.0
    assert m.cov == 0.0


def test_observe_derives_flags_from_thresholds():
    assert ReactionSample.observe(0.0, 99.0).is_false_start
    assert not ReactionSample.observe(0.0, 100.0).is_false_start
    assert ReactionSample.observe(0.0, 501.0).is_lapse
    assert not ReactionSample.observe(0.0, 500.0).is_lapse


def test_memory_span_and_throughput():
    rounds = [memory_round(3, latency=800), memory_round(4, latency=1000), memory_round(5, success=False, latency=1200)]
    m = extract_memory(rounds)
    assert m.max_span == 4
    assert m.avg_recall_latency_ms == pytest.approx(1000.0)
    assert m.throughput == pytest.approx(4.0)


def test_memory_without_success_or_latency():
    m = extract_memory([MemoryRoundResult(level=3, success=False, sequence_length=3, avg_click_latency_ms=0.0)])
    assert m.max_span == 0
    assert m.throughput == 0.0


def test_item_score_maps_first_option_to_one():
    item = build_synthetic_bank(per_category=1)[0]
    assert item_score(item, 0) == 1.0
    assert item_score(item, 3) == 0.0
    assert item_score(item, 1) == pytest.approx(2 / 3)
    with pytest.raises(ValueError):
        item_score(item, 4)


def test_functional_accumulates_per_category_and_ignores_unanswered():
    bank = build_synthetic_bank(per_category=2)
    safety, memory = bank[0], bank[2]
    answers = {safety.id: 0, memory.id: 3}
    m = extract_functional(answers, bank)
    assert m.answered == 2
    assert m.total_weight == pytest.approx(safety.weight + memory.weight)
    assert m.total_weighted == pytest.approx(safety.weight)
    assert set(m.category_scores) == {"Safety", "Memory", "Executive", "Mood"}
    assert m.category_scores["Safety"] == pytest.approx(safety.weight)
    assert m.category_scores["Memory"] == 0.0
    assert m.category_scores["Mood"] == 0.0
