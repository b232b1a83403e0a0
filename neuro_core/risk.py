# neuro_core/risk.py
from . import config

HIGH = "High"
MODERATE = "Moderate"
LOW = "Low Risk"


def risk_level(global_index: float) -> str:
    s = float(global_index)
    if s < config.RISK_HIGH_BELOW: return HIGH
    if s < config.RISK_MODERATE_BELOW: return MODERATE
    return LOW
