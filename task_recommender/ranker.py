# ranker.py
import logging
from typing import Iterable, List, Sequence

from tabulate import tabulate

from .config import DEFAULT_SCORING, ScoringConfig
from .models import (
    ZERO_SCORE,
    AssigneeType,
    Employee,
    Recommendation,
    RecommendationResult,
    ScoreBreakdown,
    Task,
)
from .scorer import score_employee

logger = logging.getLogger(__name__)

NO_EMPLOYEES_RATIONALE = "No employees available in team. Recommend AI automation."
AI_HINT_RATIONALE = "Task is suitable for AI automation based on initial analysis."


def _percent(value: float, digits: int) -> str:
    return f"{value * 100:.{digits}f}%"


# ---------- Rationale ----------
def build_rationale(employee_name: str, score: ScoreBreakdown, rank: int) -> str:
    parts = [
        f"Rank #{rank} candidate: {employee_name}",
        f"Overall score: {_percent(score.total_score, 1)}",
    ]

    if score.skills_matched:
        parts.append(f"Matching skills: {', '.join(score.skills_matched)}")

    if score.skills_missing:
        parts.append(f"Missing skills: {', '.join(score.skills_missing)}")

    parts.append(f"Available capacity: {score.available_capacity:.1f} hours/week")
    parts.append(f"Seniority match: {_percent(score.seniority_score, 0)}")

    return ". ".join(parts) + "."


def _ai_recommendation(task: Task, rationale: str) -> Recommendation:
    return Recommendation(
        task_id=task.task_id,
        recommended_assignee_type=AssigneeType.AI,
        score=ZERO_SCORE,
        rationale=rationale,
        rank=1,
    )


# ---------- Ranking ----------
def rank_candidates(
    task: Task,
    employees: Sequence[Employee],
    config: ScoringConfig = DEFAULT_SCORING,
) -> List[Recommendation]:
    """Rank employees for a task and decide whether AI automation leads.

    Returns recommendations in final rank order. Ranks are contiguous from 1;
    when AI automation is surfaced it takes rank 1 and the humans follow.
    Nothing here raises for degenerate business data: profile-less employees
    score zero and an empty team yields a single AI recommendation.
    """
    if not employees:
        logger.info("No employees available for task %s; recommending AI", task.task_id)
        return [_ai_recommendation(task, NO_EMPLOYEES_RATIONALE)]

    scored = [(employee, score_employee(employee, task, config)) for employee in employees]

    # sorted() is stable with reverse=True, so ties keep team order
    scored = sorted(scored, key=lambda item: item[1].total_score, reverse=True)
    top = scored[: config.max_candidates_returned]

    best_score = top[0][1].total_score
    hinted = task.suggested_assignee_type == AssigneeType.AI
    below_threshold = best_score < config.min_recommend_score

    recommendations: List[Recommendation] = []

    if hinted or below_threshold:
        if hinted:
            rationale = AI_HINT_RATIONALE
        else:
            rationale = (
                f"Best employee match score ({_percent(best_score, 1)}) "
                "is below threshold. Recommend AI automation."
            )
        recommendations.append(_ai_recommendation(task, rationale))

    offset = len(recommendations)
    for idx, (employee, score) in enumerate(top):
        rank = idx + 1 + offset
        recommendations.append(
            Recommendation(
                task_id=task.task_id,
                recommended_assignee_type=AssigneeType.EMPLOYEE,
                recommended_assignee_user_id=employee.user_id,
                employee_name=employee.name,
                score=score,
                rationale=build_rationale(employee.name, score, rank),
                rank=rank,
            )
        )

    logger.debug(
        "Ranked %d employees for task %s (best=%.4f, ai=%s)",
        len(employees),
        task.task_id,
        best_score,
        bool(offset),
    )
    return recommendations


# ---------- Display ----------
def format_recommendations(results: Iterable[RecommendationResult]) -> str:
    table = []
    for result in results:
        for rec in result.recommendations:
            assignee = (
                rec.employee_name or rec.recommended_assignee_user_id
                if rec.recommended_assignee_type == AssigneeType.EMPLOYEE
                else "AI automation"
            )
            table.append(
                [
                    result.task_title,
                    rec.rank,
                    assignee,
                    rec.recommended_assignee_type.value,
                    round(rec.score.total_score, 4),
                    round(rec.score.skill_overlap_score, 4),
                    round(rec.score.capacity_score, 4),
                    rec.score.seniority_score,
                ]
            )

    return tabulate(
        table,
        headers=[
            "Task",
            "Rank",
            "Assignee",
            "Type",
            "Total",
            "Skill",
            "Capacity",
            "Seniority",
        ],
        tablefmt="github",
    )
