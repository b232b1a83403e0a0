from __future__ import annotations
from fastapi import FastAPI, HTTPException, Body, Response
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field
import os, time, typing as t

# ---- Engine imports ----
from neuro_core import question_bank
from neuro_core.config import load_config, make_rng, QA_QUESTIONS_PER_SESSION
from neuro_core.engine import compute_session, response_log_entries
from neuro_core.policy import select_adaptive_questions
from neuro_core.trend import classify_trend
from neuro_core.types import MemoryRoundResult, QuestionBankItem, ReactionSample
from neuro_core.audit_export import to_json as history_to_json, to_csv as history_to_csv
from .storage import (
    append_responses,
    clear_database,
    count_assessments,
    database_stats,
    delete_patient,
    export_database,
    generate_patient_id,
    import_database,
    list_patients,
    load_history,
    load_patient,
    load_response_log,
    persist,
    save_patient,
)

app = FastAPI(title="Neuro Assessment API")

ALLOWED_ORIGINS = [o for o in os.getenv("ALLOWED_ORIGINS", "http://localhost:3000").split(",") if o]

app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOWED_ORIGINS,
    allow_methods=["*"],
    allow_headers=["*"],
    allow_credentials=False,
)


@app.get("/")
def root():
    return {"status": "ok", "service": "neuro-assessment-api"}


# ---- Schemas ----
class PatientReq(BaseModel):
    name: str
    age: int = Field(ge=0)
    gender: str = ""
    notes: str = ""
    id: str | None = None

class QuestionsReq(BaseModel):
    count: int | None = None

class ReactionIn(BaseModel):
    timestamp: float = 0.0
    reaction_time_ms: float
    is_false_start: bool | None = None   # derived from thresholds when both flags are omitted
    is_lapse: bool | None = None

class MemoryRoundIn(BaseModel):
    level: int
    success: bool
    sequence_length: int
    avg_click_latency_ms: float

class SessionReq(BaseModel):
    reactions: list[ReactionIn] = []
    memory_rounds: list[MemoryRoundIn] = []
    answers: dict[int, int] = {}
    question_ids: list[int] = []
    date: float | None = None


# ---- Helpers ----
def _serialize_item(it: QuestionBankItem) -> dict[str, t.Any]:
    return {
        "id": it.id,
        "category": it.category,
        "text": it.text,
        "options": list(it.options),
        "weight": it.weight,
    }


def _require_patient(pid: str) -> dict[str, t.Any]:
    patient = load_patient(pid)
    if not patient:
        raise HTTPException(404, "patient not found")
    return patient


def _reaction(r: ReactionIn) -> ReactionSample:
    if r.is_false_start is None and r.is_lapse is None:
        return ReactionSample.observe(r.timestamp, r.reaction_time_ms)
    return ReactionSample(
        timestamp=r.timestamp,
        reaction_time_ms=r.reaction_time_ms,
        is_false_start=bool(r.is_false_start),
        is_lapse=bool(r.is_lapse),
    )


def _trend_payload(history) -> dict[str, t.Any]:
    trend = classify_trend(history)
    return {"status": trend.status, "direction": trend.direction, "delta": trend.delta}


# ---- Health ----
@app.get("/health")
def health():
    bank = question_bank.load_bank()
    return {"bank_items": len(bank), "questions_per_session": QA_QUESTIONS_PER_SESSION}


# ---- Patients ----
@app.post("/patients")
def create_patient(req: PatientReq):
    patient = {
        "id": req.id or generate_patient_id(),
        "name": req.name,
        "age": req.age,
        "gender": req.gender,
        "notes": req.notes,
        "created_at": time.time(),
    }
    existing = load_patient(patient["id"])
    if existing:
        patient["created_at"] = existing.get("created_at", patient["created_at"])
    save_patient(patient)
    return patient


@app.get("/patients")
def get_patients():
    return {"patients": list_patients()}


@app.get("/patients/{pid}")
def get_patient(pid: str):
    patient = _require_patient(pid)
    return {**patient, "assessment_count": count_assessments(pid)}


@app.delete("/patients/{pid}")
def remove_patient(pid: str):
    if not delete_patient(pid):
        raise HTTPException(404, "patient not found")
    return {"ok": True}


# ---- Adaptive questionnaire ----
@app.post("/patients/{pid}/questions")
def next_questions(pid: str, req: QuestionsReq | None = None):
    _require_patient(pid)
    cfg = load_config()
    count = req.count if req is not None else None
    target = count if count is not None else int(cfg.get("QA_QUESTIONS_PER_SESSION", QA_QUESTIONS_PER_SESSION))
    try:
        items = select_adaptive_questions(
            pid, load_response_log(pid), question_bank.load_bank(), target, make_rng(cfg)
        )
    except ValueError as exc:
        raise HTTPException(422, str(exc))
    return {"patient_id": pid, "questions": [_serialize_item(it) for it in items]}


# ---- Sessions ----
@app.post("/patients/{pid}/sessions")
def submit_session(pid: str, req: SessionReq):
    _require_patient(pid)
    by_id = question_bank.index_by_id(question_bank.load_bank())
    unknown = [qid for qid in req.question_ids if qid not in by_id]
    if unknown:
        raise HTTPException(422, f"unknown question ids: {unknown}")
    active = [by_id[qid] for qid in req.question_ids]

    try:
        reactions = [_reaction(r) for r in req.reactions]
        rounds = [MemoryRoundResult(**r.model_dump()) for r in req.memory_rounds]
        record = compute_session(reactions, rounds, req.answers, active, patient_id=pid, date=req.date)
        entries = response_log_entries(pid, req.answers, active, timestamp=record.date)
    except ValueError as exc:
        raise HTTPException(422, str(exc))

    persist(record)
    append_responses(entries)
    return {"record": record.to_dict(), "trend": _trend_payload(load_history(pid))}


@app.get("/patients/{pid}/history")
def history(pid: str):
    _require_patient(pid)
    records = load_history(pid)
    return {"patient_id": pid, "records": [r.to_dict() for r in records]}


@app.get("/patients/{pid}/history.json")
def history_json(pid: str):
    _require_patient(pid)
    return {"patient_id": pid, **history_to_json(load_history(pid))}


@app.get("/patients/{pid}/history.csv")
def history_csv(pid: str):
    _require_patient(pid)
    body = history_to_csv(load_history(pid))
    return Response(
        content=body,
        media_type="text/csv",
        headers={"Content-Disposition": f"attachment; filename=\"{pid}_history.csv\""},
    )


@app.get("/patients/{pid}/trend")
def trend(pid: str):
    _require_patient(pid)
    return {"patient_id": pid, **_trend_payload(load_history(pid))}


# ---- Maintenance ----
@app.get("/stats")
def stats():
    return database_stats()


@app.get("/export")
def export():
    return export_database()


@app.post("/import")
def import_backup(payload: dict[str, t.Any] = Body(...)):
    try:
        counts = import_database(payload)
    except (KeyError, TypeError, ValueError) as exc:
        raise HTTPException(422, f"invalid backup: {exc}")
    return {"ok": True, **counts}


@app.delete("/database")
def wipe_database():
    clear_database()
    return {"ok": True}
