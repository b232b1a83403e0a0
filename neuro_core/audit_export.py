"""Helpers to export assessment histories in JSON/CSV formats."""
from __future__ import annotations

from typing import Iterable, List, Dict, Any
import csv
import io

_FIELDS: tuple[str, ...] = (
    "patient_id",
    "date",
    "global_index",
    "attention_index",
    "memory_index",
    "functional_index",
    "risk_level",
    "mean_rt",
    "sd_rt",
    "cov",
    "fatigue_index",
    "lapses",
    "false_starts",
    "max_span",
    "avg_recall_latency_ms",
    "throughput",
    "insight_text",
)

_RAW_KEYS = {
    "mean_rt", "sd_rt", "cov", "fatigue_index", "lapses", "false_starts",
    "max_span", "avg_recall_latency_ms", "throughput",
}
_INT_KEYS = {"lapses", "false_starts", "max_span"}


def _normalize_record(record: Dict[str, Any]) -> Dict[str, Any]:
    raw = record.get("raw_metrics") or {}
    out: Dict[str, Any] = {}
    for key in _FIELDS:
        val = raw.get(key) if key in _RAW_KEYS else record.get(key)
        if key in _INT_KEYS:
            try:
                out[key] = int(val)
            except (TypeError, ValueError):
                out[key] = 0
        elif key in _RAW_KEYS or key.endswith("_index") or key == "date":
            try:
                out[key] = round(float(val), 3)
            except (TypeError, ValueError):
                out[key] = 0.0
        else:
            out[key] = "" if val is None else str(val)
    return out


def _as_dict(record: Any) -> Dict[str, Any]:
    if hasattr(record, "to_dict"):
        return record.to_dict()
    return dict(record or {})


def to_json(records: Iterable[Any]) -> Dict[str, Any]:
    """Return a JSON-safe payload for history export."""

    normalized: List[Dict[str, Any]] = [_normalize_record(_as_dict(r)) for r in records]
    return {"records": normalized}


def to_csv(records: Iterable[Any]) -> str:
    """Render assessment records as CSV with a fixed header."""

    normalized = [_normalize_record(_as_dict(r)) for r in records]
    buf = io.StringIO()
    writer = csv.DictWriter(buf, fieldnames=_FIELDS)
    writer.writeheader()
    for row in normalized:
        writer.writerow(row)
    return buf.getvalue()


__all__ = ["to_json", "to_csv"]
