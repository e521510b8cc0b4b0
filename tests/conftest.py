"""Shared fixtures."""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest

from task_recommender import utils
from task_recommender.seed import seed_database
from tests.fakes import FakeDatabase


@pytest.fixture
def fake_db() -> FakeDatabase:
    return FakeDatabase()


@pytest.fixture
def seeded_db(fake_db: FakeDatabase) -> FakeDatabase:
    """Sample team plus one project managed by the sample manager."""
    seed_database(fake_db)
    fake_db.insert_project(
        {
            "project_id": "project-web",
            "title": "Customer portal",
            "manager_id": "manager-mike",
            "status": "ACTIVE",
        }
    )
    fake_db.insert_task(
        {
            "task_id": "task-ui",
            "project_id": "project-web",
            "title": "Build React dashboard",
            "skills": ["React", "TypeScript"],
            "estimated_effort_hours": 4,
            "status": "NOT_STARTED",
        }
    )
    fake_db.insert_task(
        {
            "task_id": "task-etl",
            "project_id": "project-web",
            "title": "Nightly Airflow export",
            "skills": ["Airflow", "Spark", "Scala"],
            "estimated_effort_hours": 8,
            "suggested_assignee_type": "AI",
            "status": "NOT_STARTED",
        }
    )
    return fake_db


@pytest.fixture
def manager(seeded_db: FakeDatabase):
    return seeded_db.get_user("manager-mike")


@pytest.fixture
def executive(seeded_db: FakeDatabase):
    return seeded_db.get_user("exec-sarah")


@pytest.fixture
def llm_client(tmp_path, monkeypatch) -> MagicMock:
    """A configured model client whose completions each test scripts."""
    client = MagicMock()
    monkeypatch.setattr(utils, "PLAN_CACHE_FILE", tmp_path / "plan_cache.json")
    monkeypatch.setattr(utils, "SIMULATE_LLM", False)
    monkeypatch.setattr(utils, "LLM_RATE_LIMIT_SECONDS", 0)
    monkeypatch.setattr(utils, "llm_configured", lambda: True)
    monkeypatch.setattr(utils, "llm_model_name", lambda: "test-model")
    monkeypatch.setattr(utils, "get_llm_client", lambda: client)
    return client
