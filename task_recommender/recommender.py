# recommender.py
import logging
from typing import Dict, List, Optional

from .access import assert_project_access, require_role
from .config import DEFAULT_SCORING, ScoringConfig
from .db import MongoDBManager
from .models import AssigneeType, Employee, RecommendationResult, Task, UserRole
from .ranker import rank_candidates

logger = logging.getLogger(__name__)

RECOMMENDER_ROLES = (UserRole.EXECUTIVE, UserRole.MANAGER)


def load_team(db: MongoDBManager, team_id: str) -> List[Employee]:
    """Team employees with their committed hours filled in."""
    docs = db.get_team_employees(team_id)
    if not docs:
        return []
    workload = db.get_committed_hours([d["user_id"] for d in docs])
    return [Employee.from_document(d, workload.get(d["user_id"], 0.0)) for d in docs]


def recommend_for_task(
    task_doc: Dict,
    team_id: str,
    db: Optional[MongoDBManager] = None,
    config: ScoringConfig = DEFAULT_SCORING,
    team: Optional[List[Employee]] = None,
) -> RecommendationResult:
    db = db or MongoDBManager()
    task = Task.from_document(task_doc)
    if team is None:
        team = load_team(db, team_id)

    return RecommendationResult(
        task_id=task.task_id,
        task_title=task.title,
        recommendations=tuple(rank_candidates(task, team, config)),
    )


def _project_team_id(db: MongoDBManager, project: Dict) -> str:
    manager = db.get_user(project.get("manager_id"))
    if not manager or not manager.get("team_id"):
        raise ValueError("Project manager has no team")
    return manager["team_id"]


def recommend_for_project(
    project_id: str,
    db: Optional[MongoDBManager] = None,
    config: ScoringConfig = DEFAULT_SCORING,
) -> List[RecommendationResult]:
    """Recommendations for every unassigned task in a project."""
    db = db or MongoDBManager()

    project = db.get_project(project_id)
    if not project:
        raise ValueError(f"Project not found: {project_id}")

    team_id = _project_team_id(db, project)

    # one workload snapshot shared by every task in the run
    team = load_team(db, team_id)

    return [
        recommend_for_task(task_doc, team_id, db, config, team=team)
        for task_doc in db.get_unassigned_tasks(project_id)
    ]


def save_recommendations(
    project_id: str,
    actor: Dict,
    db: Optional[MongoDBManager] = None,
    config: ScoringConfig = DEFAULT_SCORING,
) -> List[Dict]:
    """Compute and store a fresh batch of recommendations for a project."""
    require_role(actor, RECOMMENDER_ROLES)
    db = db or MongoDBManager()

    project = db.get_project(project_id)
    if not project:
        raise ValueError(f"Project not found: {project_id}")
    assert_project_access(actor, project, db)

    results = recommend_for_project(project_id, db, config)

    docs = [
        {**rec.to_document(), "project_id": project_id}
        for result in results
        for rec in result.recommendations
    ]
    saved = db.insert_recommendations(docs)

    db.log_activity(
        actor_id=actor["user_id"],
        entity_type="project",
        entity_id=project_id,
        action="generated_recommendations",
        payload={
            "task_count": len(results),
            "total_recommendations": len(saved),
        },
    )
    logger.info(
        "Saved %d recommendations for %d tasks in project %s",
        len(saved),
        len(results),
        project_id,
    )
    db.log(
        level="INFO",
        module="recommender",
        message="Recommendations generated",
        meta={
            "project_id": project_id,
            "actor_id": actor["user_id"],
            "count": len(saved),
        },
    )
    return saved


def list_recommendations(
    project_id: str,
    actor: Dict,
    db: Optional[MongoDBManager] = None,
) -> List[Dict]:
    """Stored recommendations for a project grouped by task, newest batch first."""
    require_role(actor, RECOMMENDER_ROLES)
    db = db or MongoDBManager()

    project = db.get_project(project_id)
    if not project:
        raise ValueError(f"Project not found: {project_id}")
    assert_project_access(actor, project, db)

    grouped: Dict[str, Dict] = {}
    for rec in db.get_project_recommendations(project_id):
        task_id = rec["task_id"]
        if task_id not in grouped:
            task = db.get_task(task_id) or {}
            grouped[task_id] = {
                "task_id": task_id,
                "task_title": task.get("title"),
                "recommendations": [],
            }
        grouped[task_id]["recommendations"].append(rec)
    return list(grouped.values())


def apply_recommendation(
    recommendation_id: str,
    actor: Dict,
    db: Optional[MongoDBManager] = None,
) -> Dict:
    """Assign the recommended candidate to the task and notify them."""
    require_role(actor, RECOMMENDER_ROLES)
    db = db or MongoDBManager()

    recommendation = db.get_recommendation(recommendation_id)
    if not recommendation:
        raise ValueError(f"Recommendation not found: {recommendation_id}")

    task = db.get_task(recommendation["task_id"])
    if not task:
        raise ValueError(f"Task not found: {recommendation['task_id']}")

    project = db.get_project(task["project_id"])
    if not project:
        raise ValueError(f"Project not found: {task['project_id']}")
    assert_project_access(actor, project, db)

    assignee_type = recommendation["recommended_assignee_type"]
    assignee_user_id = recommendation.get("recommended_assignee_user_id")

    updated = db.update_task_assignment(
        task["task_id"],
        assignee_type,
        assignee_user_id,
        reviewer_id=actor["user_id"],
    )

    db.log_activity(
        actor_id=actor["user_id"],
        entity_type="task",
        entity_id=task["task_id"],
        action="applied_recommendation",
        payload={
            "recommendation_id": recommendation_id,
            "assignee_type": assignee_type,
            "assignee_user_id": assignee_user_id,
            "rationale": recommendation.get("rationale"),
            "score": recommendation.get("score"),
        },
    )

    if assignee_type == AssigneeType.EMPLOYEE.value and assignee_user_id:
        db.create_notification(
            user_id=assignee_user_id,
            type="assignment",
            payload={
                "task_id": task["task_id"],
                "task_title": task.get("title"),
                "project_id": task["project_id"],
                "assigned_by": actor.get("name"),
                "rationale": recommendation.get("rationale"),
            },
        )

    logger.info(
        "Applied recommendation %s to task %s (%s)",
        recommendation_id,
        task["task_id"],
        assignee_type,
    )
    db.log(
        level="INFO",
        module="recommender",
        message="Recommendation applied",
        meta={
            "recommendation_id": recommendation_id,
            "task_id": task["task_id"],
            "assignee_type": assignee_type,
        },
    )
    return {"task": updated, "recommendation": recommendation}
