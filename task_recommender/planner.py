# planner.py
import json
import logging
from dataclasses import asdict
from typing import Any, Dict, List, Optional

from .access import require_role
from .config import MAX_TASK_EFFORT_HOURS, MIN_TASK_EFFORT_HOURS
from .db import MongoDBManager
from .models import ProjectPlan, TaskPlan, TaskStatus, UserRole
from .utils import SIMULATE_LLM, llm_configured, llm_plan_generate

logger = logging.getLogger(__name__)

ASSIGNEE_KINDS = ("employee", "ai")


# ---------- Prompt ----------
SYSTEM_PROMPT = f"""You are an expert project manager and technical architect. Your job is to decompose project requests into actionable tasks.

CRITICAL RULES:
1. Each task MUST have estimated_effort_hours <= {MAX_TASK_EFFORT_HOURS:g}. If a task is larger, split it into multiple smaller tasks.
2. Each task MUST include:
   - title: Clear, actionable title
   - description: Detailed description of what needs to be done
   - acceptance_criteria: Array of specific, testable criteria (minimum 1)
   - skills: Array of required skills (minimum 1)
   - estimated_effort_hours: Number between {MIN_TASK_EFFORT_HOURS:g} and {MAX_TASK_EFFORT_HOURS:g}
   - dependencies: Array of task titles that must be completed first (can be empty)
   - suggested_assignee_type: "employee" or "ai" (use "ai" for automated tasks like data processing, testing, monitoring)
   - suggested_reviewer_role: Usually "manager"
3. Consider dependencies carefully - tasks should be ordered logically.
4. Be specific about skills needed (e.g., "React", "PostgreSQL", "Python", "UX Design").
5. Acceptance criteria should be testable and specific.

Return ONLY valid JSON in this exact format:

{{
  "project_title": "",
  "overview": "",
  "tasks": [
    {{
      "title": "",
      "description": "",
      "acceptance_criteria": [],
      "skills": [],
      "estimated_effort_hours": 0,
      "dependencies": [],
      "suggested_assignee_type": "employee",
      "suggested_reviewer_role": "manager"
    }}
  ]
}}"""


def build_plan_prompt(prompt: str) -> str:
    return f"Generate a project plan for: {prompt}"


def build_fix_prompt(original_prompt: str, previous_response: str, error: str) -> str:
    return f"""The previous response failed validation. Error: {error}

Previous response:
{previous_response}

Please fix the response to match the exact schema requirements:
- Each task must have estimated_effort_hours <= {MAX_TASK_EFFORT_HOURS:g}
- acceptance_criteria must be an array with at least 1 item
- skills must be an array with at least 1 item
- suggested_assignee_type must be exactly "employee" or "ai"
- All required fields must be present

Original prompt was: {original_prompt}

Respond with corrected JSON only."""


# ---------- Validation ----------
def _non_empty_str(value: Any) -> bool:
    return isinstance(value, str) and bool(value.strip())


def _str_list(value: Any) -> Optional[List[str]]:
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        return None
    return [v.strip() for v in value if v.strip()]


def _normalize_task(idx: int, item: Any, errors: List[str]) -> Optional[TaskPlan]:
    where = f"tasks[{idx}]"
    if not isinstance(item, dict):
        errors.append(f"{where} must be an object")
        return None

    count = len(errors)

    for key in ("title", "description"):
        if not _non_empty_str(item.get(key)):
            errors.append(f"{where}.{key} is required")

    criteria = _str_list(item.get("acceptance_criteria"))
    if not criteria:
        errors.append(f"{where}.acceptance_criteria needs at least 1 item")

    skills = _str_list(item.get("skills"))
    if not skills:
        errors.append(f"{where}.skills needs at least 1 item")

    effort = item.get("estimated_effort_hours")
    if isinstance(effort, bool) or not isinstance(effort, (int, float)):
        errors.append(f"{where}.estimated_effort_hours must be a number")
    elif not MIN_TASK_EFFORT_HOURS <= effort <= MAX_TASK_EFFORT_HOURS:
        errors.append(
            f"{where}.estimated_effort_hours must be between "
            f"{MIN_TASK_EFFORT_HOURS:g} and {MAX_TASK_EFFORT_HOURS:g}"
        )

    dependencies = _str_list(item.get("dependencies") or [])
    if dependencies is None:
        errors.append(f"{where}.dependencies must be an array of strings")

    kind = item.get("suggested_assignee_type")
    if not isinstance(kind, str) or kind.strip().lower() not in ASSIGNEE_KINDS:
        errors.append(f"{where}.suggested_assignee_type must be 'employee' or 'ai'")

    if len(errors) > count:
        return None

    return TaskPlan(
        title=item["title"].strip(),
        description=item["description"].strip(),
        acceptance_criteria=criteria,
        skills=skills,
        estimated_effort_hours=float(effort),
        dependencies=dependencies,
        suggested_assignee_type=kind.strip().lower(),
        suggested_reviewer_role=item.get("suggested_reviewer_role") or "manager",
    )


def plan_from_dict(data: Any) -> ProjectPlan:
    """Validate a decoded plan; raises ValueError listing every problem."""
    if not isinstance(data, dict):
        raise ValueError("Plan must be a JSON object")

    errors: List[str] = []

    for key in ("project_title", "overview"):
        if not _non_empty_str(data.get(key)):
            errors.append(f"{key} is required")

    raw_tasks = data.get("tasks")
    tasks: List[TaskPlan] = []
    if not isinstance(raw_tasks, list) or not raw_tasks:
        errors.append("tasks needs at least 1 item")
    else:
        for idx, item in enumerate(raw_tasks):
            task = _normalize_task(idx, item, errors)
            if task:
                tasks.append(task)

    if errors:
        raise ValueError("; ".join(errors))

    return ProjectPlan(
        project_title=data["project_title"].strip(),
        overview=data["overview"].strip(),
        tasks=tasks,
    )


def normalize_plan(llm_output: str) -> ProjectPlan:
    try:
        data = json.loads(llm_output)
    except json.JSONDecodeError as exc:
        raise ValueError(f"Response is not valid JSON: {exc}") from exc
    return plan_from_dict(data)


def plan_to_dict(plan: ProjectPlan) -> Dict:
    return asdict(plan)


# ---------- Stub ----------
def stub_project_plan(prompt: str) -> ProjectPlan:
    return ProjectPlan(
        project_title=f"Project: {prompt[:50]}",
        overview=(
            "This is a stub project plan because no LLM is configured. "
            f"Prompt was: {prompt}"
        ),
        tasks=[
            TaskPlan(
                title="Setup project structure",
                description="Initialize the project repository and basic structure",
                acceptance_criteria=[
                    "Repository created",
                    "Basic folder structure in place",
                    "README with initial documentation",
                ],
                skills=["Git", "Project Management"],
                estimated_effort_hours=2,
            ),
            TaskPlan(
                title="Implement core functionality",
                description="Build the main features as described in the project prompt",
                acceptance_criteria=[
                    "Core features implemented",
                    "Unit tests passing",
                    "Code reviewed",
                ],
                skills=["Programming", "Testing"],
                estimated_effort_hours=8,
                dependencies=["Setup project structure"],
            ),
            TaskPlan(
                title="Setup automated testing",
                description="Configure CI/CD pipeline and automated test suite",
                acceptance_criteria=[
                    "CI/CD pipeline configured",
                    "Automated tests running on every commit",
                ],
                skills=["DevOps", "Testing"],
                estimated_effort_hours=4,
                dependencies=["Implement core functionality"],
                suggested_assignee_type="ai",
            ),
        ],
    )


# ---------- Public API ----------
def generate_project_plan(prompt: str) -> ProjectPlan:
    if SIMULATE_LLM or not llm_configured():
        logger.info("Returning stub project plan")
        return stub_project_plan(prompt)

    response = llm_plan_generate(
        SYSTEM_PROMPT, build_plan_prompt(prompt), validate=normalize_plan
    )
    if not response:
        raise RuntimeError("LLM failed to generate a project plan")

    try:
        return normalize_plan(response)
    except ValueError as exc:
        logger.warning("Plan failed validation on first attempt: %s", exc)
        error = str(exc)

    # one retry with the validation errors quoted back
    retry = llm_plan_generate(
        SYSTEM_PROMPT,
        build_fix_prompt(prompt, response, error),
        validate=normalize_plan,
    )
    if not retry:
        raise RuntimeError("LLM returned no response on retry")

    return normalize_plan(retry)


def approve_plan(
    plan: ProjectPlan,
    manager_id: str,
    actor: Dict,
    db: Optional[MongoDBManager] = None,
    original_prompt: Optional[str] = None,
) -> Dict:
    """Create the project and its tasks from an accepted plan."""
    require_role(actor, [UserRole.EXECUTIVE, UserRole.MANAGER])
    db = db or MongoDBManager()

    manager = db.get_user(manager_id)
    if not manager or manager.get("role") != UserRole.MANAGER.value:
        raise ValueError(f"Manager not found: {manager_id}")

    project = db.insert_project(
        {
            "title": plan.project_title,
            "description": plan.overview,
            "prompt": original_prompt,
            "created_by_id": actor["user_id"],
            "manager_id": manager_id,
            "status": "ACTIVE",
        }
    )

    tasks = []
    for task in plan.tasks:
        tasks.append(
            db.insert_task(
                {
                    "project_id": project["project_id"],
                    "title": task.title,
                    "description": task.description,
                    "estimated_effort_hours": task.estimated_effort_hours,
                    "skills": list(task.skills),
                    "acceptance_criteria": list(task.acceptance_criteria),
                    "dependencies": list(task.dependencies),
                    "priority": 0,
                    "suggested_assignee_type": task.suggested_assignee_type.upper(),
                    "suggested_reviewer_role": task.suggested_reviewer_role,
                    "status": TaskStatus.NOT_STARTED.value,
                    "assignee_type": None,
                    "assignee_user_id": None,
                }
            )
        )

    db.log_activity(
        actor_id=actor["user_id"],
        entity_type="project",
        entity_id=project["project_id"],
        action="created_from_ai_plan",
        payload={
            "original_prompt": original_prompt,
            "original_plan": plan_to_dict(plan),
            "task_count": len(tasks),
        },
    )
    logger.info("Created project %s with %d tasks", project["project_id"], len(tasks))
    db.log(
        level="INFO",
        module="planner",
        message="Project created from plan",
        meta={"project_id": project["project_id"], "task_count": len(tasks)},
    )

    return {**project, "tasks": tasks}
