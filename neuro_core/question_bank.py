from __future__ import annotations
import json
from pathlib import Path
from typing import Dict, Iterable, List
from .types import QuestionBankItem

BANK_PATH = Path(__file__).with_name("data") / "bank.json"


def load_bank(path: Path | None = None) -> List[QuestionBankItem]:
    raw = json.loads((path or BANK_PATH).read_text(encoding="utf-8"))
    return [QuestionBankItem(**r) for r in raw]


def index_by_id(items: Iterable[QuestionBankItem]) -> Dict[int, QuestionBankItem]:
    return {it.id: it for it in items}

