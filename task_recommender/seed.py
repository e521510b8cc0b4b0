# seed.py
import logging
from typing import Dict, List, Optional

from .db import MongoDBManager
from .models import Seniority, UserRole

logger = logging.getLogger(__name__)

SAMPLE_TEAM_ID = "team-alpha"

SAMPLE_USERS: List[Dict] = [
    {
        "user_id": "exec-sarah",
        "name": "Sarah Executive",
        "email": "exec@workplace.com",
        "role": UserRole.EXECUTIVE.value,
        "team_id": None,
        "profile": None,
    },
    {
        "user_id": "manager-mike",
        "name": "Mike Manager",
        "email": "manager@workplace.com",
        "role": UserRole.MANAGER.value,
        "team_id": SAMPLE_TEAM_ID,
        "profile": None,
    },
    {
        "user_id": "employee-alice",
        "name": "Alice Engineer",
        "email": "alice@workplace.com",
        "role": UserRole.EMPLOYEE.value,
        "team_id": SAMPLE_TEAM_ID,
        "profile": {
            "skills": ["React", "TypeScript", "Node.js", "PostgreSQL"],
            "weaknesses": ["DevOps", "Mobile Development"],
            "capacity_hours_per_week": 40,
            "seniority": Seniority.SENIOR.value,
            "preferences": {
                "preferred_task_types": ["frontend", "fullstack"],
                "working_hours": "flexible",
            },
        },
    },
    {
        "user_id": "employee-bob",
        "name": "Bob Developer",
        "email": "bob@workplace.com",
        "role": UserRole.EMPLOYEE.value,
        "team_id": SAMPLE_TEAM_ID,
        "profile": {
            "skills": ["Python", "FastAPI", "Docker", "Kubernetes", "AWS"],
            "weaknesses": ["Frontend", "Design"],
            "capacity_hours_per_week": 35,
            "seniority": Seniority.MID.value,
            "preferences": {
                "preferred_task_types": ["backend", "devops"],
                "working_hours": "standard",
            },
        },
    },
    {
        "user_id": "employee-charlie",
        "name": "Charlie Junior",
        "email": "charlie@workplace.com",
        "role": UserRole.EMPLOYEE.value,
        "team_id": SAMPLE_TEAM_ID,
        "profile": {
            "skills": ["JavaScript", "HTML", "CSS", "React"],
            "weaknesses": ["Backend", "Database Design", "System Architecture"],
            "capacity_hours_per_week": 40,
            "seniority": Seniority.JUNIOR.value,
            "preferences": {
                "preferred_task_types": ["frontend", "ui"],
                "working_hours": "standard",
            },
        },
    },
]


def seed_database(db: Optional[MongoDBManager] = None) -> List[str]:
    db = db or MongoDBManager()

    seeded = []
    for user in SAMPLE_USERS:
        db.upsert_user(dict(user))
        seeded.append(user["user_id"])
        logger.info("Seeded %s user %s", user["role"].lower(), user["email"])

    return seeded
