"""
Configuration for the attention engine.

Values come from the environment (optionally a .env file in the project
root). Scoring weights are a plain value passed into the scorer so alternate
tunings can be tested without touching code.
"""

import json
import logging
import os
from pathlib import Path
from typing import Dict

from dotenv import load_dotenv
from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)

project_root = Path(__file__).resolve().parent.parent
env_path = project_root / ".env"
if env_path.exists():
    load_dotenv(env_path)
else:
    load_dotenv()


class ScoringWeights(BaseModel):
    """Tunable constants for the attention score."""
    severity_base: float = 10
    severity_multipliers: Dict[str, float] = Field(default_factory=lambda: {
        "low": 1.0,
        "medium": 1.25,
        "high": 1.5,
        "critical": 2.0,
    })
    overdue_days_multiplier: float = 10
    due_soon_days_threshold: float = 3
    due_soon_bonus: float = 20
    owner_bonus: float = 15
    assigned_bonus: float = 10
    decision_required_bonus: float = 30
    action_required_bonus: float = 20
    blocking_bonus: float = 25
    recent_activity_threshold_hours: float = 24
    recent_activity_bonus: float = 10
    stale_activity_threshold_hours: float = 72
    stale_activity_penalty: float = -5


class EngineSettings(BaseModel):
    """Runtime settings for feed computation and the request surface."""
    default_window_hours: int = 24
    max_window_hours: int = 720
    collector_timeout_seconds: float = 5.0
    fail_fast_collectors: bool = False  # True: any collector failure fails the feed
    user_header: str = "X-User-Id"
    log_level: str = "INFO"
    weights: ScoringWeights = Field(default_factory=ScoringWeights)


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


def load_weights() -> ScoringWeights:
    """Default weights, overridden by the JSON object in ATTENTION_SCORING_WEIGHTS."""
    raw = os.getenv("ATTENTION_SCORING_WEIGHTS")
    if not raw:
        return ScoringWeights()
    try:
        overrides = json.loads(raw)
    except json.JSONDecodeError as e:
        raise ValueError(f"ATTENTION_SCORING_WEIGHTS is not valid JSON: {e}") from e
    weights = ScoringWeights(**overrides)
    logger.info(f"Loaded scoring weight overrides: {sorted(overrides)}")
    return weights


def load_settings() -> EngineSettings:
    """Build settings from the environment."""
    return EngineSettings(
        default_window_hours=int(os.getenv("ATTENTION_DEFAULT_WINDOW_HOURS", "24")),
        max_window_hours=int(os.getenv("ATTENTION_MAX_WINDOW_HOURS", "720")),
        collector_timeout_seconds=float(os.getenv("ATTENTION_COLLECTOR_TIMEOUT", "5.0")),
        fail_fast_collectors=_env_bool("ATTENTION_FAIL_FAST", False),
        user_header=os.getenv("ATTENTION_USER_HEADER", "X-User-Id"),
        log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        weights=load_weights(),
    )
