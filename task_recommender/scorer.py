# scorer.py
from dataclasses import dataclass
from typing import Sequence, Tuple

from .config import (
    DEFAULT_SCORING,
    MID_MIN_EFFORT_HOURS,
    MID_MIN_SKILLS,
    OVER_QUALIFIED_SCORE,
    SENIOR_MIN_EFFORT_HOURS,
    SENIOR_MIN_SKILLS,
    UNDER_QUALIFIED_SCORE,
    ScoringConfig,
)
from .models import (
    SENIORITY_ORDER,
    ZERO_SCORE,
    Employee,
    ScoreBreakdown,
    Seniority,
    Task,
)


@dataclass(frozen=True)
class SkillOverlap:
    score: float
    matched: Tuple[str, ...]
    missing: Tuple[str, ...]


@dataclass(frozen=True)
class CapacityFit:
    score: float
    available_capacity: float


# ---------- Skill Score ----------
def score_skill_overlap(
    task_skills: Sequence[str],
    candidate_skills: Sequence[str],
) -> SkillOverlap:
    """Fraction of the task's skills the candidate has, case-insensitively.

    Matched and missing lists keep the casing used on the task.
    """
    if not task_skills:
        return SkillOverlap(score=1.0, matched=(), missing=())

    candidate_lower = {s.lower() for s in candidate_skills}

    matched = tuple(s for s in task_skills if s.lower() in candidate_lower)
    missing = tuple(s for s in task_skills if s.lower() not in candidate_lower)

    return SkillOverlap(
        score=len(matched) / len(task_skills),
        matched=matched,
        missing=missing,
    )


# ---------- Capacity Score ----------
def score_capacity(
    weekly_capacity_hours: float,
    committed_hours: float,
    task_effort_hours: float,
) -> CapacityFit:
    committed_hours = max(committed_hours, 0.0)

    if weekly_capacity_hours <= 0:
        return CapacityFit(score=0.0, available_capacity=0.0)

    available = weekly_capacity_hours - committed_hours
    if available <= 0:
        return CapacityFit(score=0.0, available_capacity=0.0)

    if available < task_effort_hours:
        # partial fit
        return CapacityFit(
            score=available / task_effort_hours,
            available_capacity=available,
        )

    # Full fit: mildly prefer the less utilised candidate
    utilization = committed_hours / weekly_capacity_hours
    score = 1 - utilization * 0.5

    return CapacityFit(score=min(score, 1.0), available_capacity=available)


# ---------- Seniority Score ----------
def required_seniority(task_effort_hours: float, task_skill_count: int) -> Seniority:
    if task_effort_hours >= SENIOR_MIN_EFFORT_HOURS and task_skill_count >= SENIOR_MIN_SKILLS:
        return Seniority.SENIOR
    if task_effort_hours >= MID_MIN_EFFORT_HOURS or task_skill_count >= MID_MIN_SKILLS:
        return Seniority.MID
    return Seniority.JUNIOR


def score_seniority(
    task_effort_hours: float,
    task_skill_count: int,
    candidate_seniority: Seniority,
) -> float:
    required = required_seniority(task_effort_hours, task_skill_count)

    if required == candidate_seniority:
        return 1.0

    if SENIORITY_ORDER.index(candidate_seniority) > SENIORITY_ORDER.index(required):
        return OVER_QUALIFIED_SCORE

    return UNDER_QUALIFIED_SCORE


# ---------- Final Score ----------
def score_employee(
    employee: Employee,
    task: Task,
    config: ScoringConfig = DEFAULT_SCORING,
) -> ScoreBreakdown:
    profile = employee.profile
    if profile is None:
        return ZERO_SCORE

    skill = score_skill_overlap(task.skills, profile.skills)
    capacity = score_capacity(
        profile.capacity_hours_per_week,
        employee.committed_hours,
        task.estimated_effort_hours,
    )
    seniority = score_seniority(
        task.estimated_effort_hours,
        len(task.skills),
        profile.seniority,
    )

    total = (
        skill.score * config.skill_weight
        + capacity.score * config.capacity_weight
        + seniority * config.seniority_weight
    )

    return ScoreBreakdown(
        skill_overlap_score=skill.score,
        capacity_score=capacity.score,
        seniority_score=seniority,
        total_score=min(max(total, 0.0), 1.0),
        skills_matched=skill.matched,
        skills_missing=skill.missing,
        available_capacity=capacity.available_capacity,
    )
