from __future__ import annotations

import csv
import io

from neuro_core.audit_export import to_csv, to_json
from neuro_core.engine import compute_session
from neuro_core.question_bank import load_bank

from tests.conftest import memory_round, reactions


def _records():
    active = load_bank()[:4]
    good = compute_session(
        reactions(300, 320, 310, 305),
        [memory_round(5)],
        {it.id: 0 for it in active},
        active,
        patient_id="p1",
        date=200.0,
    )
    empty = compute_session([], [], {}, [], patient_id="p1", date=100.0)
    return [good, empty]


def test_json_export_flattens_raw_metrics():
    payload = to_json(_records())
    rows = payload["records"]
    assert len(rows) == 2
    first = rows[0]
    assert first["patient_id"] == "p1"
    assert first["date"] == 200.0
    assert first["max_span"] == 5
    assert first["mean_rt"] == 308.75
    assert isinstance(first["lapses"], int)
    assert rows[1]["risk_level"] == "High"
    assert rows[1]["mean_rt"] == 0.0


def test_csv_export_has_fixed_header_and_one_row_per_record():
    text = to_csv(_records())
    rows = list(csv.DictReader(io.StringIO(text)))
    assert len(rows) == 2
    header = text.splitlines()[0].split(",")
    assert header[0] == "patient_id"
    assert header[-1] == "insight_text"
    assert rows[1]["insight_text"].startswith("Reflexes task data discarded")


def test_export_accepts_plain_dicts():
    rows = to_json([{"patient_id": "x", "global_index": "55.5", "raw_metrics": {"lapses": "2"}}])["records"]
    assert rows[0]["global_index"] == 55.5
    assert rows[0]["lapses"] == 2
    assert rows[0]["max_span"] == 0
    assert rows[0]["insight_text"] == ""
