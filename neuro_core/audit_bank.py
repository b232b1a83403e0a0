from __future__ import annotations

import json
from pathlib import Path
from typing import Iterable

from . import config
from .question_bank import load_bank
from .types import CATEGORIES, QuestionBankItem


def _blank_category() -> dict[str, object]:
    return {"items": 0, "weight_total": 0.0, "option_counts": {}}


def audit_items(items: Iterable[QuestionBankItem]) -> dict[str, object]:
    coverage: dict[str, dict[str, object]] = {cat: _blank_category() for cat in CATEGORIES}
    totals = {"items": 0, "duplicate_ids": 0}
    seen: set[int] = set()
    duplicates: list[int] = []

    for item in items:
        if item.id in seen:
            duplicates.append(item.id)
            totals["duplicate_ids"] += 1
            continue
        seen.add(item.id)
        totals["items"] += 1

        data = coverage[item.category]
        data["items"] += 1  # type: ignore[operator]
        data["weight_total"] = round(float(data["weight_total"]) + item.weight, 4)  # type: ignore[arg-type]
        counts: dict[str, int] = data["option_counts"]  # type: ignore[assignment]
        key = str(len(item.options))
        counts[key] = counts.get(key, 0) + 1

    warnings: list[str] = []
    for cat in CATEGORIES:
        n = coverage[cat]["items"]
        if n < config.BANK_MIN_PER_CATEGORY:
            warnings.append(f"{cat} has {n} items (<{config.BANK_MIN_PER_CATEGORY})")
    if totals["items"] < config.QA_QUESTIONS_PER_SESSION:
        warnings.append(
            f"bank has {totals['items']} items, fewer than a {config.QA_QUESTIONS_PER_SESSION}-question session"
        )
    for qid in duplicates:
        warnings.append(f"duplicate question id {qid}")

    return {"coverage": coverage, "warnings": warnings, "totals": totals}


def print_report(summary: dict[str, object]) -> None:
    coverage: dict[str, dict[str, object]] = summary["coverage"]  # type: ignore[assignment]
    print("=== Bank Coverage ===")
    for cat in CATEGORIES:
        data = coverage[cat]
        print(f"  {cat:<10} items={data['items']:3d}  weight={data['weight_total']}  options={data['option_counts']}")

    warnings: list[str] = summary["warnings"]  # type: ignore[assignment]
    if warnings:
        print("\nWarnings:")
        for msg in warnings:
            print(f" - {msg}")
    else:
        print("\nNo warnings.")

    print("\nTotals:", summary["totals"])


def write_summary(summary: dict[str, object], path: Path = Path("bank_audit.json")) -> str:
    text = json.dumps(summary, indent=2, sort_keys=True)
    path.write_text(text + "\n", encoding="utf-8")
    return text


def main(argv: list[str] | None = None) -> int:
    items = load_bank()
    summary = audit_items(items)
    print_report(summary)
    if argv:
        write_summary(summary, Path(argv[0]))
    return 2 if summary["warnings"] else 0


if __name__ == "__main__":
    import sys

    raise SystemExit(main(sys.argv[1:]))
