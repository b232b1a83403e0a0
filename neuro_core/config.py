from __future__ import annotations
import os, json, pathlib, random


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw.strip())
    except ValueError:
        return default


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return float(raw.strip())
    except ValueError:
        return default


# psychomotor vigilance task
PVT_LAPSE_THRESHOLD_MS: float = 500.0
PVT_FALSE_START_FLOOR_MS: float = 100.0
MIN_PVT_RESPONSES: int = 3

SPEED_SCALE: float = 25.0
STABILITY_SENSITIVITY: float = 2.0
LAPSE_PENALTY: float = 10.0
FALSE_START_PENALTY: float = 5.0

ATTENTION_WEIGHTS = {"speed": 0.4, "stability": 0.3, "vigilance": 0.3}

# memory span
MEM_GRID_SIZE: int = 9
MEM_THROUGHPUT_CEILING: float = 3.0  # items/sec that saturates efficiency

MEMORY_WEIGHTS = {"span": 0.6, "efficiency": 0.4}

# composite
GLOBAL_WEIGHTS = {"attention": 0.3, "memory": 0.3, "functional": 0.4}
RISK_HIGH_BELOW: float = 50.0
RISK_MODERATE_BELOW: float = 70.0

# insight thresholds
INSIGHT_FALSE_STARTS_MAX: int = 2
INSIGHT_SD_RT_MAX_MS: float = 150.0
INSIGHT_FATIGUE_MAX_MS: float = 50.0
INSIGHT_SPAN_MIN: int = 4

# adaptive questionnaire
QA_QUESTIONS_PER_SESSION: int = 10
HISTORY_WINDOW_MAX: int = 50
HISTORY_WINDOW: int = HISTORY_WINDOW_MAX
POOR_SCORE_BELOW: float = 0.5
WEAK_CATEGORY_BOOST: float = 0.5
MASTERED_CATEGORY_DECAY: float = 0.1
CATEGORY_WEIGHT_FLOOR: float = 0.5

# trend
TREND_THRESHOLD: float = 5.0

# bank audit
BANK_MIN_PER_CATEGORY: int = 3

DEBUG_SEED: int | None = None

# // env overrides for staging/ops; scoring weights stay fixed.
QA_QUESTIONS_PER_SESSION = _env_int("QA_QUESTIONS_PER_SESSION", QA_QUESTIONS_PER_SESSION)
HISTORY_WINDOW = min(_env_int("HISTORY_WINDOW", HISTORY_WINDOW), HISTORY_WINDOW_MAX)
MIN_PVT_RESPONSES = _env_int("MIN_PVT_RESPONSES", MIN_PVT_RESPONSES)
BANK_MIN_PER_CATEGORY = _env_int("BANK_MIN_PER_CATEGORY", BANK_MIN_PER_CATEGORY)
TREND_THRESHOLD = _env_float("TREND_THRESHOLD", TREND_THRESHOLD)
if os.getenv("DEBUG_SEED"):
    DEBUG_SEED = _env_int("DEBUG_SEED", 0)
DEBUG_TRACE: bool = _env_bool("DEBUG_TRACE", False)


def load_config() -> dict:
    cfg = {}
    p = pathlib.Path("config.json")
    if p.exists():
        try: cfg = json.loads(p.read_text(encoding="utf-8"))
        except (OSError, ValueError): cfg = {}
    e = os.environ
    if e.get("SEED"): cfg["SEED"] = int(e.get("SEED"))
    if e.get("QA_QUESTIONS_PER_SESSION"):
        cfg["QA_QUESTIONS_PER_SESSION"] = _env_int("QA_QUESTIONS_PER_SESSION", QA_QUESTIONS_PER_SESSION)
    return cfg


def make_rng(cfg: dict) -> random.Random:
    s = cfg.get("SEED", DEBUG_SEED)
    if s is not None:
        return random.Random(int(s))
    return random.Random()
