"""Utility helpers for persisting patients, assessments and response logs.

Records are JSON files on disk under ``DATA_DIR``; a process-local lock
serializes writes so that concurrent requests for the same patient see a
consistent history.
"""

from __future__ import annotations

import json
import logging
import os
import random
import re
import threading
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional

from neuro_core.types import CompositeAssessmentRecord, QuestionResponseLogEntry


log = logging.getLogger(__name__)

DATA_ROOT = Path(os.getenv("DATA_DIR", "data")).resolve()
PATIENTS_PATH = DATA_ROOT / "patients.json"
ASSESSMENTS_DIR = DATA_ROOT / "assessments"
RESPONSES_DIR = DATA_ROOT / "responses"

_LOCK = threading.Lock()
_SAFE_RX = re.compile(r"[^A-Za-z0-9_.-]")
_ID_CHARS = "ABCDEFGHJKLMNPQRSTUVWXYZ23456789"


def _ensure_dirs() -> None:
    DATA_ROOT.mkdir(parents=True, exist_ok=True)
    ASSESSMENTS_DIR.mkdir(parents=True, exist_ok=True)
    RESPONSES_DIR.mkdir(parents=True, exist_ok=True)


def _read_json(path: Path, default: Any) -> Any:
    if not path.exists():
        return default
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError) as exc:
        log.warning("unreadable storage file %s: %s", path, exc)
        return default


def _write_json(path: Path, payload: Any) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp = path.with_suffix(path.suffix + ".tmp")
    tmp.write_text(json.dumps(payload, indent=2, sort_keys=True), encoding="utf-8")
    tmp.replace(path)


def _patient_file(root: Path, patient_id: str) -> Path:
    return root / f"{_SAFE_RX.sub('_', patient_id)}.json"


def _own_rows(root: Path, patient_id: str) -> List[Dict[str, Any]]:
    # sanitized names can collide (PID:1 and PID_1), so rows carry the real id
    rows = _read_json(_patient_file(root, patient_id), [])
    return [r for r in rows if isinstance(r, dict) and r.get("patient_id") == patient_id]


def utcnow_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def generate_patient_id(rng: random.Random | None = None) -> str:
    """Short clinical id of the form ``PID-XXX-XXX``."""

    r = rng or random.SystemRandom()
    left = "".join(r.choice(_ID_CHARS) for _ in range(3))
    right = "".join(r.choice(_ID_CHARS) for _ in range(3))
    return f"PID-{left}-{right}"


# ---- patients ----

def save_patient(patient: Dict[str, Any]) -> None:
    _ensure_dirs()
    with _LOCK:
        patients: Dict[str, Dict[str, Any]] = _read_json(PATIENTS_PATH, {})
        patients[patient["id"]] = patient
        _write_json(PATIENTS_PATH, patients)
    log.info("patient saved: %s", patient["id"])


def load_patient(patient_id: str) -> Optional[Dict[str, Any]]:
    patients: Dict[str, Dict[str, Any]] = _read_json(PATIENTS_PATH, {})
    return patients.get(patient_id)


def list_patients() -> List[Dict[str, Any]]:
    patients: Dict[str, Dict[str, Any]] = _read_json(PATIENTS_PATH, {})
    out = list(patients.values())
    out.sort(key=lambda p: p.get("created_at", 0), reverse=True)
    return out


def delete_patient(patient_id: str) -> bool:
    with _LOCK:
        patients: Dict[str, Dict[str, Any]] = _read_json(PATIENTS_PATH, {})
        if patient_id not in patients:
            return False
        patients.pop(patient_id, None)
        _write_json(PATIENTS_PATH, patients)
    log.info("patient deleted: %s", patient_id)
    return True


# ---- assessments ----

def persist(record: CompositeAssessmentRecord) -> None:
    """Append a finished record to the patient's history."""

    _ensure_dirs()
    path = _patient_file(ASSESSMENTS_DIR, record.patient_id)
    with _LOCK:
        rows: List[Dict[str, Any]] = _read_json(path, [])
        rows.append(record.to_dict())
        _write_json(path, rows)
    log.info("assessment saved: patient=%s global=%.1f", record.patient_id, record.global_index)


def load_history(patient_id: str) -> List[CompositeAssessmentRecord]:
    """Most recent first."""

    records = [CompositeAssessmentRecord.from_dict(r) for r in _own_rows(ASSESSMENTS_DIR, patient_id)]
    records.sort(key=lambda r: r.date, reverse=True)
    return records


def count_assessments(patient_id: str) -> int:
    return len(_own_rows(ASSESSMENTS_DIR, patient_id))


def load_all_assessments() -> List[CompositeAssessmentRecord]:
    out: List[CompositeAssessmentRecord] = []
    if ASSESSMENTS_DIR.exists():
        for path in sorted(ASSESSMENTS_DIR.glob("*.json")):
            out.extend(CompositeAssessmentRecord.from_dict(r) for r in _read_json(path, []))
    out.sort(key=lambda r: r.date, reverse=True)
    return out


# ---- response log ----

def append_responses(entries: Iterable[QuestionResponseLogEntry]) -> int:
    by_patient: Dict[str, List[Dict[str, Any]]] = {}
    for e in entries:
        by_patient.setdefault(e.patient_id, []).append(e.to_dict())
    if not by_patient:
        return 0
    _ensure_dirs()
    with _LOCK:
        for pid, new_rows in by_patient.items():
            path = _patient_file(RESPONSES_DIR, pid)
            rows: List[Dict[str, Any]] = _read_json(path, [])
            rows.extend(new_rows)
            _write_json(path, rows)
    return sum(len(v) for v in by_patient.values())


def load_response_log(patient_id: str) -> List[QuestionResponseLogEntry]:
    """Most recent first; entries sharing a timestamp keep reverse insertion order."""

    entries: List[QuestionResponseLogEntry] = []
    for row in reversed(_own_rows(RESPONSES_DIR, patient_id)):
        try:
            entries.append(QuestionResponseLogEntry.from_dict(row))
        except (TypeError, ValueError) as exc:
            log.warning("skipping response row for %s: %s", patient_id, exc)
    entries.sort(key=lambda e: e.timestamp, reverse=True)
    return entries


# ---- maintenance ----

def database_stats() -> Dict[str, int]:
    patients = list_patients()
    assessments = load_all_assessments()
    return {
        "patientCount": len(patients),
        "assessmentCount": len(assessments),
        "totalRecords": len(patients) + len(assessments),
    }


def export_database() -> Dict[str, Any]:
    responses: List[Dict[str, Any]] = []
    if RESPONSES_DIR.exists():
        for path in sorted(RESPONSES_DIR.glob("*.json")):
            responses.extend(_read_json(path, []))
    return {
        "patients": list_patients(),
        "assessments": [r.to_dict() for r in load_all_assessments()],
        "responses": responses,
        "exportDate": utcnow_iso(),
    }


def _rows(payload: Dict[str, Any], key: str) -> List[Dict[str, Any]]:
    rows = payload.get(key) or []
    if not isinstance(rows, list) or not all(isinstance(r, dict) for r in rows):
        raise ValueError(f"{key} must be a list of objects")
    return rows


def import_database(payload: Dict[str, Any]) -> Dict[str, int]:
    """Restore a backup; the whole payload is validated before anything is written."""

    patients = _rows(payload, "patients")
    for p in patients:
        if not isinstance(p.get("id"), str) or not p["id"]:
            raise ValueError("every patient needs a non-empty string id")
    records = [CompositeAssessmentRecord.from_dict(r) for r in _rows(payload, "assessments")]
    entries = [QuestionResponseLogEntry.from_dict(r) for r in _rows(payload, "responses")]

    for p in patients:
        save_patient(p)
    for rec in records:
        persist(rec)
    n_resp = append_responses(entries)
    log.info("imported %d patients, %d assessments, %d responses", len(patients), len(records), n_resp)
    return {"patients": len(patients), "assessments": len(records), "responses": n_resp}

def clear_database() -> None:
    with _LOCK:
        for folder in (ASSESSMENTS_DIR, RESPONSES_DIR):
            if folder.exists():
                for path in folder.glob("*.json"):
                    path.unlink()
        if PATIENTS_PATH.exists():
            PATIENTS_PATH.unlink()
    log.info("database cleared")
