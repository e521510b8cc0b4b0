"""Tests for reading and acknowledging notifications."""

import pytest

from task_recommender.notifications import list_notifications, mark_read


@pytest.fixture
def bob(seeded_db):
    return seeded_db.get_user("employee-bob")


class TestListNotifications:
    def test_newest_first_for_the_actor_only(self, seeded_db, bob) -> None:
        seeded_db.create_notification("employee-bob", "assignment", {"task_id": "t1"})
        seeded_db.create_notification("employee-alice", "assignment", {"task_id": "t2"})
        seeded_db.create_notification("employee-bob", "mention", {"task_id": "t3"})

        notifications = list_notifications(bob, seeded_db)

        assert [n["payload"]["task_id"] for n in notifications] == ["t3", "t1"]

    def test_unread_only(self, seeded_db, bob) -> None:
        first = seeded_db.create_notification("employee-bob", "assignment", {})
        seeded_db.create_notification("employee-bob", "assignment", {})
        seeded_db.mark_notification_read(first["notification_id"])

        unread = list_notifications(bob, seeded_db, unread_only=True)

        assert len(unread) == 1
        assert unread[0]["notification_id"] != first["notification_id"]

    def test_requires_a_user(self, seeded_db) -> None:
        with pytest.raises(PermissionError):
            list_notifications(None, seeded_db)


class TestMarkRead:
    def test_marks_own_notification(self, seeded_db, bob) -> None:
        created = seeded_db.create_notification("employee-bob", "assignment", {})

        updated = mark_read(created["notification_id"], bob, seeded_db)

        assert updated["read"] is True
        assert list_notifications(bob, seeded_db, unread_only=True) == []

    def test_someone_elses_notification_is_not_found(self, seeded_db, bob) -> None:
        created = seeded_db.create_notification("employee-alice", "assignment", {})

        with pytest.raises(ValueError, match="Notification not found"):
            mark_read(created["notification_id"], bob, seeded_db)
        assert seeded_db.get_notification(created["notification_id"])["read"] is False

    def test_unknown_notification(self, seeded_db, bob) -> None:
        with pytest.raises(ValueError, match="Notification not found"):
            mark_read("missing", bob, seeded_db)
