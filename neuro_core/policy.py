# neuro_core/policy.py
from __future__ import annotations

from typing import Dict, List, Sequence, Set, Tuple
import logging
import random

from .types import CATEGORIES, QuestionBankItem, QuestionResponseLogEntry
from .config import (
    HISTORY_WINDOW,
    POOR_SCORE_BELOW,
    WEAK_CATEGORY_BOOST,
    MASTERED_CATEGORY_DECAY,
    CATEGORY_WEIGHT_FLOOR,
)

log = logging.getLogger(__name__)


def category_weights(
    response_log: Sequence[QuestionResponseLogEntry],
    window: int = HISTORY_WINDOW,
) -> Tuple[Dict[str, float], Set[int]]:
    """Sampling weight per category plus the ids seen in the recent window.

    ``response_log`` is most recent first. Poor answers (< 0.5) raise the
    category weight by 0.5; good answers decay it by 0.1 down to 0.5.
    """

    weights: Dict[str, float] = {c: 1.0 for c in CATEGORIES}
    recent: Set[int] = set()
    for entry in list(response_log)[: max(window, 0)]:
        recent.add(entry.question_id)
        cat = entry.category
        if cat not in weights:
            continue
        if entry.score_normalized < POOR_SCORE_BELOW:
            weights[cat] += WEAK_CATEGORY_BOOST
        else:
            weights[cat] = max(CATEGORY_WEIGHT_FLOOR, weights[cat] - MASTERED_CATEGORY_DECAY)
    return weights, recent


class AdaptiveSelector:
    """Weighted-without-replacement category sampler with a coverage pre-pass.

    Pools hold indices into the immutable bank, one removable list per
    category, so draws never copy bank entries.
    """

    def __init__(self, bank: Sequence[QuestionBankItem], rng: random.Random):
        self.rng = rng
        self.bank: List[QuestionBankItem] = []
        seen: Set[int] = set()
        for it in bank:
            if it.id in seen:
                continue
            seen.add(it.id)
            self.bank.append(it)

    def _pools(self, exclude: Set[int], target_count: int) -> Dict[str, List[int]]:
        fresh = [i for i, it in enumerate(self.bank) if it.id not in exclude]
        if len(fresh) < target_count:
            # recency exclusion must never starve a session
            fresh = list(range(len(self.bank)))
        pools: Dict[str, List[int]] = {c: [] for c in CATEGORIES}
        for i in fresh:
            pools[self.bank[i].category].append(i)
        return pools

    def _draw(self, pool: List[int]) -> int:
        return pool.pop(self.rng.randrange(len(pool)))

    def _roulette(self, weights: Dict[str, float], pools: Dict[str, List[int]]) -> str:
        total = sum(weights[c] for c in CATEGORIES)
        r = self.rng.random() * total
        chosen = CATEGORIES[-1]
        for cat in CATEGORIES:
            r -= weights[cat]
            if r <= 0:
                chosen = cat
                break
        if not pools[chosen]:
            alive = [c for c in CATEGORIES if pools[c]]
            chosen = self.rng.choice(alive)
        return chosen

    def select(
        self,
        weights: Dict[str, float],
        recent: Set[int],
        target_count: int,
    ) -> List[QuestionBankItem]:
        if target_count <= 0:
            raise ValueError(f"target_count must be > 0, got {target_count}")

        pools = self._pools(recent, target_count)
        picked: List[int] = []

        for cat in CATEGORIES:
            if len(picked) >= target_count:
                break
            if pools[cat]:
                picked.append(self._draw(pools[cat]))

        while len(picked) < target_count and any(pools[c] for c in CATEGORIES):
            cat = self._roulette(weights, pools)
            picked.append(self._draw(pools[cat]))

        return [self.bank[i] for i in picked]


def select_adaptive_questions(
    patient_id: str,
    response_log: Sequence[QuestionResponseLogEntry],
    bank: Sequence[QuestionBankItem],
    target_count: int,
    rng: random.Random,
) -> List[QuestionBankItem]:
    if target_count <= 0:
        raise ValueError(f"target_count must be > 0, got {target_count}")
    weights, recent = category_weights(response_log)
    items = AdaptiveSelector(bank, rng).select(weights, recent, target_count)
    log.debug(
        "adaptive_selection patient=%s weights=%s recent=%d picked=%s",
        patient_id,
        {k: round(v, 2) for k, v in weights.items()},
        len(recent),
        [it.id for it in items],
    )
    return items
