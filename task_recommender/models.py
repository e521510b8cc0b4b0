# models.py
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple


class Seniority(str, Enum):
    JUNIOR = "JUNIOR"
    MID = "MID"
    SENIOR = "SENIOR"


SENIORITY_ORDER = (Seniority.JUNIOR, Seniority.MID, Seniority.SENIOR)


class AssigneeType(str, Enum):
    EMPLOYEE = "EMPLOYEE"
    AI = "AI"


class UserRole(str, Enum):
    EXECUTIVE = "EXECUTIVE"
    MANAGER = "MANAGER"
    EMPLOYEE = "EMPLOYEE"


class TaskStatus(str, Enum):
    NOT_STARTED = "NOT_STARTED"
    IN_PROGRESS = "IN_PROGRESS"
    BLOCKED = "BLOCKED"
    DONE = "DONE"


OPEN_TASK_STATUSES = (
    TaskStatus.NOT_STARTED,
    TaskStatus.IN_PROGRESS,
    TaskStatus.BLOCKED,
)


def _skill_list(value: Any) -> Tuple[str, ...]:
    # Non-list fields become empty; blank or non-string entries are dropped
    if not isinstance(value, (list, tuple)):
        return ()
    return tuple(str(s) for s in value if isinstance(s, str) and s.strip())


def parse_assignee_type(value: Any) -> Optional[AssigneeType]:
    if isinstance(value, AssigneeType):
        return value
    if not isinstance(value, str):
        return None
    try:
        return AssigneeType(value.strip().upper())
    except ValueError:
        return None


@dataclass(frozen=True)
class EmployeeProfile:
    skills: Tuple[str, ...]
    capacity_hours_per_week: float
    seniority: Seniority

    @classmethod
    def from_document(cls, doc: Optional[Dict]) -> Optional["EmployeeProfile"]:
        if not doc:
            return None
        try:
            seniority = Seniority(str(doc.get("seniority", "")).upper())
        except ValueError:
            return None
        return cls(
            skills=_skill_list(doc.get("skills")),
            capacity_hours_per_week=float(doc.get("capacity_hours_per_week") or 0),
            seniority=seniority,
        )


@dataclass(frozen=True)
class Employee:
    user_id: str
    name: str
    email: str = ""
    profile: Optional[EmployeeProfile] = None
    committed_hours: float = 0.0

    @classmethod
    def from_document(cls, doc: Dict, committed_hours: float = 0.0) -> "Employee":
        return cls(
            user_id=doc["user_id"],
            name=doc.get("name", ""),
            email=doc.get("email", ""),
            profile=EmployeeProfile.from_document(doc.get("profile")),
            committed_hours=float(committed_hours or 0),
        )


@dataclass(frozen=True)
class Task:
    task_id: str
    title: str
    skills: Tuple[str, ...] = ()
    estimated_effort_hours: float = 0.0
    suggested_assignee_type: Optional[AssigneeType] = None

    @classmethod
    def from_document(cls, doc: Dict) -> "Task":
        return cls(
            task_id=doc["task_id"],
            title=doc.get("title", ""),
            skills=_skill_list(doc.get("skills")),
            estimated_effort_hours=float(doc.get("estimated_effort_hours") or 0),
            suggested_assignee_type=parse_assignee_type(
                doc.get("suggested_assignee_type")
            ),
        )


@dataclass(frozen=True)
class ScoreBreakdown:
    skill_overlap_score: float = 0.0
    capacity_score: float = 0.0
    seniority_score: float = 0.0
    total_score: float = 0.0
    skills_matched: Tuple[str, ...] = ()
    skills_missing: Tuple[str, ...] = ()
    available_capacity: float = 0.0

    def to_document(self) -> Dict:
        return {
            "skill_overlap_score": self.skill_overlap_score,
            "capacity_score": self.capacity_score,
            "seniority_score": self.seniority_score,
            "total_score": self.total_score,
            "skills_matched": list(self.skills_matched),
            "skills_missing": list(self.skills_missing),
            "available_capacity": self.available_capacity,
        }


ZERO_SCORE = ScoreBreakdown()


@dataclass(frozen=True)
class Recommendation:
    task_id: str
    recommended_assignee_type: AssigneeType
    score: ScoreBreakdown
    rationale: str
    rank: int
    recommended_assignee_user_id: Optional[str] = None
    employee_name: Optional[str] = None

    def to_document(self) -> Dict:
        return {
            "task_id": self.task_id,
            "recommended_assignee_type": self.recommended_assignee_type.value,
            "recommended_assignee_user_id": self.recommended_assignee_user_id,
            "employee_name": self.employee_name,
            "score": self.score.to_document(),
            "rationale": self.rationale,
            "rank": self.rank,
        }


@dataclass(frozen=True)
class RecommendationResult:
    task_id: str
    task_title: str
    recommendations: Tuple[Recommendation, ...] = field(default_factory=tuple)


@dataclass
class TaskPlan:
    title: str
    description: str
    acceptance_criteria: List[str]
    skills: List[str]
    estimated_effort_hours: float
    dependencies: List[str] = field(default_factory=list)
    suggested_assignee_type: str = "employee"
    suggested_reviewer_role: str = "manager"


@dataclass
class ProjectPlan:
    project_title: str
    overview: str
    tasks: List[TaskPlan]
