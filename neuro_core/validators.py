from __future__ import annotations
from dataclasses import dataclass, field
from typing import Dict, List
from . import config
from .metrics import AttentionMetrics, FunctionalMetrics, MemoryMetrics

ATTENTION_INVALID = "ATTENTION TEST INVALID (Insufficient Responses)"
MEMORY_SKIPPED = "MEMORY TEST SKIPPED"
FUNCTIONAL_INCOMPLETE = "FUNCTIONAL REVIEW INCOMPLETE"


@dataclass
class ValidityReport:
    attention: bool = False
    memory: bool = False
    functional: bool = False
    alerts: List[str] = field(default_factory=list)

    def flags(self) -> Dict[str, bool]:
        return {"attention": self.attention, "memory": self.memory, "functional": self.functional}


def attention_valid(m: AttentionMetrics) -> bool:
    return m.valid_count >= config.MIN_PVT_RESPONSES


def memory_valid(m: MemoryMetrics) -> bool:
    return m.rounds > 0


def functional_valid(m: FunctionalMetrics) -> bool:
    return m.answered > 0


def gate(att: AttentionMetrics, mem: MemoryMetrics, fn: FunctionalMetrics) -> ValidityReport:
    rep = ValidityReport(attention_valid(att), memory_valid(mem), functional_valid(fn))
    if not rep.attention: rep.alerts.append(ATTENTION_INVALID)
    if not rep.memory: rep.alerts.append(MEMORY_SKIPPED)
    if not rep.functional: rep.alerts.append(FUNCTIONAL_INCOMPLETE)
    return rep
