# config.py
import os
from dataclasses import dataclass
from pathlib import Path

# ---------- Project Paths ----------
BASE_DIR = Path(__file__).resolve().parent
LOG_DIR = Path(os.getenv("TASK_RECOMMENDER_LOG_DIR", BASE_DIR / "logs"))
LOG_FILE = LOG_DIR / "app.log"

PLAN_CACHE_FILE = BASE_DIR / "plan_llm_cache.json"

# ---------- MongoDB ----------
MONGO_URI = os.getenv("MONGO_URI", "mongodb://localhost:27017")
DB_NAME = os.getenv("DB_NAME", "task_recommender_db")

USER_COLLECTION = "users"
PROJECT_COLLECTION = "projects"
TASK_COLLECTION = "tasks"
RECOMMENDATION_COLLECTION = "recommendations"
ACTIVITY_COLLECTION = "activity_logs"
NOTIFICATION_COLLECTION = "notifications"
LOG_COLLECTION = "logs"

# ---------- LLM ----------
AZURE_OPENAI_API_KEY = os.getenv("AZURE_OPENAI_API_KEY")
AZURE_OPENAI_ENDPOINT = os.getenv("AZURE_OPENAI_ENDPOINT")
AZURE_OPENAI_DEPLOYMENT = os.getenv("AZURE_OPENAI_DEPLOYMENT", "gpt-4o-mini")
AZURE_OPENAI_API_VERSION = os.getenv("AZURE_OPENAI_API_VERSION", "2024-06-01")

OPENAI_API_KEY = os.getenv("OPENAI_API_KEY")
OPENAI_MODEL = os.getenv("OPENAI_MODEL", "gpt-4o-mini")

LLM_RATE_LIMIT_SECONDS = float(os.getenv("LLM_RATE_LIMIT_SECONDS", "0"))

# ---------- Scoring Weights ----------
SKILL_WEIGHT = 0.5
CAPACITY_WEIGHT = 0.3
SENIORITY_WEIGHT = 0.2

# Minimum best-human score before AI automation is recommended instead
MIN_RECOMMEND_SCORE = 0.3
MAX_CANDIDATES_RETURNED = 3

# ---------- Seniority Heuristic ----------
SENIOR_MIN_EFFORT_HOURS = 6
SENIOR_MIN_SKILLS = 3
MID_MIN_EFFORT_HOURS = 4
MID_MIN_SKILLS = 2

OVER_QUALIFIED_SCORE = 0.8
UNDER_QUALIFIED_SCORE = 0.5

# ---------- Planning ----------
MAX_TASK_EFFORT_HOURS = 8.0
MIN_TASK_EFFORT_HOURS = 0.5


@dataclass(frozen=True)
class ScoringConfig:
    skill_weight: float = SKILL_WEIGHT
    capacity_weight: float = CAPACITY_WEIGHT
    seniority_weight: float = SENIORITY_WEIGHT
    min_recommend_score: float = MIN_RECOMMEND_SCORE
    max_candidates_returned: int = MAX_CANDIDATES_RETURNED

    def __post_init__(self) -> None:
        weights = (self.skill_weight, self.capacity_weight, self.seniority_weight)
        if any(w < 0 for w in weights):
            raise ValueError("Scoring weights must be non-negative")
        if abs(sum(weights) - 1.0) > 1e-9:
            raise ValueError(f"Scoring weights must sum to 1.0, got {sum(weights)}")
        if self.max_candidates_returned < 1:
            raise ValueError("max_candidates_returned must be at least 1")


DEFAULT_SCORING = ScoringConfig()
