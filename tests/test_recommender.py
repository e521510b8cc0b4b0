"""Tests for project-level recommendation, persistence and apply."""

import pytest

from task_recommender.models import AssigneeType
from task_recommender.recommender import (
    apply_recommendation,
    list_recommendations,
    load_team,
    recommend_for_project,
    recommend_for_task,
    save_recommendations,
)
from task_recommender.seed import SAMPLE_TEAM_ID


class TestLoadTeam:
    def test_committed_hours_count_open_tasks_only(self, seeded_db) -> None:
        seeded_db.insert_task(
            {
                "project_id": "other",
                "assignee_user_id": "employee-alice",
                "status": "IN_PROGRESS",
                "estimated_effort_hours": 6,
            }
        )
        seeded_db.insert_task(
            {
                "project_id": "other",
                "assignee_user_id": "employee-alice",
                "status": "DONE",
                "estimated_effort_hours": 8,
            }
        )

        team = {e.user_id: e for e in load_team(seeded_db, SAMPLE_TEAM_ID)}

        assert set(team) == {"employee-alice", "employee-bob", "employee-charlie"}
        assert team["employee-alice"].committed_hours == 6
        assert team["employee-bob"].committed_hours == 0

    def test_unknown_team_is_empty(self, seeded_db) -> None:
        assert load_team(seeded_db, "nobody") == []


class TestRecommendForTask:
    def test_react_task_goes_to_react_developers(self, seeded_db) -> None:
        result = recommend_for_task(seeded_db.get_task("task-ui"), SAMPLE_TEAM_ID, seeded_db)

        assert result.task_title == "Build React dashboard"
        ids = [r.recommended_assignee_user_id for r in result.recommendations]
        assert ids[0] == "employee-alice"
        assert "employee-bob" in ids

    def test_empty_team_falls_back_to_ai(self, seeded_db) -> None:
        result = recommend_for_task(seeded_db.get_task("task-ui"), "nobody", seeded_db)

        assert len(result.recommendations) == 1
        assert result.recommendations[0].recommended_assignee_type == AssigneeType.AI


class TestRecommendForProject:
    def test_only_unassigned_tasks(self, seeded_db) -> None:
        seeded_db.update_task_assignment("task-etl", "EMPLOYEE", "employee-bob")

        results = recommend_for_project("project-web", seeded_db)

        assert [r.task_id for r in results] == ["task-ui"]

    def test_ai_hinted_task_recommends_ai(self, seeded_db) -> None:
        results = {r.task_id: r for r in recommend_for_project("project-web", seeded_db)}
        etl = results["task-etl"].recommendations

        assert etl[0].recommended_assignee_type == AssigneeType.AI
        assert "suitable for AI automation" in etl[0].rationale
        assert [r.rank for r in etl] == [1, 2, 3, 4]

    def test_missing_project(self, seeded_db) -> None:
        with pytest.raises(ValueError, match="Project not found"):
            recommend_for_project("nope", seeded_db)

    def test_manager_without_team(self, seeded_db) -> None:
        seeded_db.insert_project({"project_id": "solo", "manager_id": "exec-sarah"})
        with pytest.raises(ValueError, match="no team"):
            recommend_for_project("solo", seeded_db)


class TestSaveRecommendations:
    def test_persists_batch_and_logs(self, seeded_db, manager) -> None:
        saved = save_recommendations("project-web", manager, seeded_db)

        assert saved
        assert all(doc["project_id"] == "project-web" for doc in saved)
        assert len({doc["batch_id"] for doc in saved}) == 1
        activity = seeded_db.activity_logs[-1]
        assert activity["action"] == "generated_recommendations"
        assert activity["payload"] == {"task_count": 2, "total_recommendations": len(saved)}
        assert seeded_db.logs[-1]["message"] == "Recommendations generated"
        assert seeded_db.logs[-1]["meta"]["count"] == len(saved)

    def test_second_run_appends_new_batch(self, seeded_db, manager) -> None:
        first = save_recommendations("project-web", manager, seeded_db)
        second = save_recommendations("project-web", manager, seeded_db)

        assert len(seeded_db.recommendations) == len(first) + len(second)
        assert first[0]["batch_id"] != second[0]["batch_id"]

    def test_employee_cannot_generate(self, seeded_db) -> None:
        with pytest.raises(PermissionError):
            save_recommendations("project-web", seeded_db.get_user("employee-bob"), seeded_db)

    def test_manager_from_another_team_is_rejected(self, seeded_db) -> None:
        seeded_db.upsert_user(
            {"user_id": "manager-zoe", "role": "MANAGER", "team_id": "team-beta", "name": "Zoe"}
        )
        with pytest.raises(PermissionError):
            save_recommendations("project-web", seeded_db.get_user("manager-zoe"), seeded_db)

    def test_manager_on_same_team_is_allowed(self, seeded_db) -> None:
        seeded_db.upsert_user(
            {"user_id": "manager-lee", "role": "MANAGER", "team_id": SAMPLE_TEAM_ID, "name": "Lee"}
        )
        assert save_recommendations("project-web", seeded_db.get_user("manager-lee"), seeded_db)

    def test_executive_has_access(self, seeded_db, executive) -> None:
        assert save_recommendations("project-web", executive, seeded_db)


class TestApplyRecommendation:
    def _saved(self, seeded_db, manager, task_id, assignee_type):
        docs = save_recommendations("project-web", manager, seeded_db)
        return next(
            d
            for d in docs
            if d["task_id"] == task_id and d["recommended_assignee_type"] == assignee_type
        )

    def test_applies_employee_and_notifies(self, seeded_db, manager) -> None:
        rec = self._saved(seeded_db, manager, "task-ui", "EMPLOYEE")

        result = apply_recommendation(rec["recommendation_id"], manager, seeded_db)

        task = result["task"]
        assert task["assignee_type"] == "EMPLOYEE"
        assert task["assignee_user_id"] == rec["recommended_assignee_user_id"]
        assert task["reviewer_manager_id"] == "manager-mike"
        notification = seeded_db.notifications[-1]
        assert notification["user_id"] == rec["recommended_assignee_user_id"]
        assert notification["type"] == "assignment"
        assert notification["payload"]["assigned_by"] == "Mike Manager"
        assert seeded_db.activity_logs[-1]["action"] == "applied_recommendation"
        assert seeded_db.logs[-1]["meta"]["recommendation_id"] == rec["recommendation_id"]

    def test_applies_ai_without_notification(self, seeded_db, manager) -> None:
        rec = self._saved(seeded_db, manager, "task-etl", "AI")

        result = apply_recommendation(rec["recommendation_id"], manager, seeded_db)

        assert result["task"]["assignee_type"] == "AI"
        assert result["task"]["assignee_user_id"] is None
        assert seeded_db.notifications == []

    def test_unknown_recommendation(self, seeded_db, manager) -> None:
        with pytest.raises(ValueError, match="Recommendation not found"):
            apply_recommendation("missing", manager, seeded_db)

    def test_requires_role(self, seeded_db, manager) -> None:
        rec = self._saved(seeded_db, manager, "task-ui", "EMPLOYEE")
        with pytest.raises(PermissionError):
            apply_recommendation(
                rec["recommendation_id"], seeded_db.get_user("employee-alice"), seeded_db
            )


class TestListRecommendations:
    def test_groups_by_task_newest_batch_first(self, seeded_db, manager) -> None:
        save_recommendations("project-web", manager, seeded_db)
        latest = save_recommendations("project-web", manager, seeded_db)

        groups = {g["task_id"]: g for g in list_recommendations("project-web", manager, seeded_db)}

        assert set(groups) == {"task-ui", "task-etl"}
        ui = groups["task-ui"]
        assert ui["task_title"] == "Build React dashboard"
        assert len(ui["recommendations"]) == 2 * sum(1 for d in latest if d["task_id"] == "task-ui")
        assert ui["recommendations"][0]["batch_id"] == latest[0]["batch_id"]
        assert ui["recommendations"][0]["rank"] == 1

    def test_nothing_stored(self, seeded_db, executive) -> None:
        assert list_recommendations("project-web", executive, seeded_db) == []

    def test_other_team_manager_is_rejected(self, seeded_db) -> None:
        seeded_db.upsert_user(
            {"user_id": "manager-zoe", "role": "MANAGER", "team_id": "team-beta", "name": "Zoe"}
        )
        with pytest.raises(PermissionError):
            list_recommendations("project-web", seeded_db.get_user("manager-zoe"), seeded_db)
