# db.py
from typing import Dict, Iterable, List, Optional
from datetime import datetime, timezone
from uuid import uuid4

from pymongo import ASCENDING, DESCENDING, MongoClient, errors

from .config import (
    MONGO_URI,
    DB_NAME,
    USER_COLLECTION,
    PROJECT_COLLECTION,
    TASK_COLLECTION,
    RECOMMENDATION_COLLECTION,
    ACTIVITY_COLLECTION,
    NOTIFICATION_COLLECTION,
    LOG_COLLECTION,
)
from .models import OPEN_TASK_STATUSES, UserRole


def _now() -> datetime:
    return datetime.now(timezone.utc)


class MongoDBManager:
    def __init__(self, client: Optional[MongoClient] = None) -> None:
        try:
            self.client = client if client is not None else MongoClient(MONGO_URI)
            self.db = self.client[DB_NAME]

            self.users = self.db[USER_COLLECTION]
            self.projects = self.db[PROJECT_COLLECTION]
            self.tasks = self.db[TASK_COLLECTION]
            self.recommendations = self.db[RECOMMENDATION_COLLECTION]
            self.activity_logs = self.db[ACTIVITY_COLLECTION]
            self.notifications = self.db[NOTIFICATION_COLLECTION]
            self.logs = self.db[LOG_COLLECTION]

        except errors.PyMongoError as exc:
            raise RuntimeError(f"MongoDB connection failed: {exc}") from exc

    # ---------- Users ----------
    def upsert_user(self, user: Dict) -> None:
        user["updated_at"] = _now()
        self.users.replace_one({"user_id": user["user_id"]}, user, upsert=True)

    def get_user(self, user_id: str) -> Optional[Dict]:
        return self.users.find_one({"user_id": user_id}, {"_id": 0})

    def get_team_employees(self, team_id: str) -> List[Dict]:
        return list(
            self.users.find(
                {
                    "team_id": team_id,
                    "role": UserRole.EMPLOYEE.value,
                    "profile": {"$ne": None},
                },
                {"_id": 0},
            )
        )

    # ---------- Workload ----------
    def get_committed_hours(self, user_ids: Iterable[str]) -> Dict[str, float]:
        """Sum estimated effort of each user's tasks that are not done yet."""
        pipeline = [
            {
                "$match": {
                    "assignee_user_id": {"$in": list(user_ids)},
                    "status": {"$in": [s.value for s in OPEN_TASK_STATUSES]},
                }
            },
            {
                "$group": {
                    "_id": "$assignee_user_id",
                    "hours": {"$sum": "$estimated_effort_hours"},
                }
            },
        ]
        hours: Dict[str, float] = {}
        for row in self.tasks.aggregate(pipeline):
            if row.get("_id"):
                hours[row["_id"]] = float(row.get("hours") or 0)
        return hours

    # ---------- Projects ----------
    def insert_project(self, project: Dict) -> Dict:
        project.setdefault("project_id", str(uuid4()))
        project["created_at"] = _now()
        self.projects.insert_one(project)
        project.pop("_id", None)
        return project

    def get_project(self, project_id: str) -> Optional[Dict]:
        return self.projects.find_one({"project_id": project_id}, {"_id": 0})

    # ---------- Tasks ----------
    def insert_task(self, task: Dict) -> Dict:
        task.setdefault("task_id", str(uuid4()))
        task["created_at"] = _now()
        self.tasks.insert_one(task)
        task.pop("_id", None)
        return task

    def get_task(self, task_id: str) -> Optional[Dict]:
        return self.tasks.find_one({"task_id": task_id}, {"_id": 0})

    def get_unassigned_tasks(self, project_id: str) -> List[Dict]:
        return list(
            self.tasks.find(
                {"project_id": project_id, "assignee_user_id": None},
                {"_id": 0},
            )
        )

    def update_task_assignment(
        self,
        task_id: str,
        assignee_type: str,
        assignee_user_id: Optional[str],
        reviewer_id: Optional[str] = None,
    ) -> Optional[Dict]:
        self.tasks.update_one(
            {"task_id": task_id},
            {
                "$set": {
                    "assignee_type": assignee_type,
                    "assignee_user_id": assignee_user_id,
                    "reviewer_manager_id": reviewer_id,
                    "updated_at": _now(),
                }
            },
        )
        return self.get_task(task_id)

    # ---------- Recommendations ----------
    def insert_recommendations(self, recommendations: List[Dict]) -> List[Dict]:
        """Store one batch; earlier batches are never modified."""
        if not recommendations:
            return []
        batch_id = str(uuid4())
        created_at = _now()
        docs = [
            {
                **rec,
                "recommendation_id": str(uuid4()),
                "batch_id": batch_id,
                "created_at": created_at,
            }
            for rec in recommendations
        ]
        self.recommendations.insert_many(docs)
        for doc in docs:
            doc.pop("_id", None)
        return docs

    def get_recommendation(self, recommendation_id: str) -> Optional[Dict]:
        return self.recommendations.find_one(
            {"recommendation_id": recommendation_id}, {"_id": 0}
        )

    def get_project_recommendations(self, project_id: str) -> List[Dict]:
        return list(
            self.recommendations.find({"project_id": project_id}, {"_id": 0}).sort(
                [("created_at", DESCENDING), ("rank", ASCENDING)]
            )
        )

    # ---------- Activity ----------
    def log_activity(
        self,
        actor_id: str,
        entity_type: str,
        entity_id: str,
        action: str,
        payload: Optional[Dict] = None,
    ) -> None:
        self.activity_logs.insert_one(
            {
                "actor_id": actor_id,
                "entity_type": entity_type,
                "entity_id": entity_id,
                "action": action,
                "payload": payload or {},
                "created_at": _now(),
            }
        )

    # ---------- Notifications ----------
    def create_notification(self, user_id: str, type: str, payload: Dict) -> Dict:
        notification = {
            "notification_id": str(uuid4()),
            "user_id": user_id,
            "type": type,
            "payload": payload,
            "read": False,
            "created_at": _now(),
        }
        self.notifications.insert_one(notification)
        notification.pop("_id", None)
        return notification

    def get_notification(self, notification_id: str) -> Optional[Dict]:
        return self.notifications.find_one(
            {"notification_id": notification_id}, {"_id": 0}
        )

    def get_notifications(
        self, user_id: str, unread_only: bool = False, limit: int = 50
    ) -> List[Dict]:
        query: Dict = {"user_id": user_id}
        if unread_only:
            query["read"] = False
        return list(
            self.notifications.find(query, {"_id": 0})
            .sort("created_at", DESCENDING)
            .limit(limit)
        )

    def mark_notification_read(self, notification_id: str) -> Optional[Dict]:
        self.notifications.update_one(
            {"notification_id": notification_id}, {"$set": {"read": True}}
        )
        return self.get_notification(notification_id)

    # ---------- Operational log ----------
    def log(self, level: str, module: str, message: str, meta: Optional[Dict] = None) -> None:
        """Record an operational event alongside the domain collections."""
        self.logs.insert_one(
            {
                "level": level.upper(),
                "module": module,
                "message": message,
                "meta": meta or {},
                "created_at": _now(),
            }
        )
