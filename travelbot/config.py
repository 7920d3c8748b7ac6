# Role: Central configuration module. Loads .env into environment variables and computes runtime flags (DEBUG).
# Importers read travelbot.config.DEBUG to control debug tracing without threading flags through every call.

from __future__ import annotations

import os
from dotenv import load_dotenv

DEBUG: bool = False

DEFAULT_MIN_BUDGET_PER_PASSENGER = 500.0
DEFAULT_SESSION_TTL_HOURS = 24


def load_env() -> None:
    """
    Load .env into os.environ, then recompute DEBUG.
    This makes DEBUG correct even if load_env() is called after import.
    """
    global DEBUG
    load_dotenv()
    # Key line: accept common truthy values.
    DEBUG = os.getenv("DEBUG", "0").lower() in {"1", "true", "yes"}


def get_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def get_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def min_budget_per_passenger() -> float:
    return get_float("MIN_BUDGET_PER_PASSENGER", DEFAULT_MIN_BUDGET_PER_PASSENGER)


def session_ttl_hours() -> int:
    return get_int("SESSION_TTL_HOURS", DEFAULT_SESSION_TTL_HOURS)
