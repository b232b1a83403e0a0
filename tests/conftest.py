from __future__ import annotations

import pytest

from neuro_core.types import CATEGORIES, MemoryRoundResult, QuestionBankItem, ReactionSample


def build_synthetic_bank(
    *,
    categories: list[str] | None = None,
    per_category: int = 6,
    n_options: int = 4,
) -> list[QuestionBankItem]:
    """Create a deterministic synthetic bank for tests."""

    items: list[QuestionBankItem] = []
    target = categories or list(CATEGORIES)
    for c_idx, category in enumerate(target, start=1):
        for idx in range(per_category):
            items.append(
                QuestionBankItem(
                    id=c_idx * 1000 + idx,
                    category=category,
                    text=f"{category} question #{idx}",
                    options=tuple(f"opt{k}" for k in range(n_options)),
                    correct_index=0,
                    weight=1.0 + 0.1 * idx,
                )
            )
    return items


def reactions(*rts: float, false_starts: int = 0) -> list[ReactionSample]:
    out = [ReactionSample.observe(float(i), rt) for i, rt in enumerate(rts)]
    out.extend(
        ReactionSample(timestamp=float(len(rts) + k), reaction_time_ms=50.0, is_false_start=True)
        for k in range(false_starts)
    )
    return out


def memory_round(span: int, success: bool = True, latency: float = 900.0) -> MemoryRoundResult:
    return MemoryRoundResult(level=span, success=success, sequence_length=span, avg_click_latency_ms=latency)


@pytest.fixture
def synthetic_bank() -> list[QuestionBankItem]:
    return build_synthetic_bank()
