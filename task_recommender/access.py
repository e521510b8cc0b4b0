# access.py
from typing import Dict, Iterable, Optional

from .models import UserRole


def require_role(actor: Optional[Dict], allowed_roles: Iterable[UserRole]) -> Dict:
    if not actor:
        raise PermissionError("Authentication required")

    allowed = [r.value for r in allowed_roles]
    if actor.get("role") not in allowed:
        raise PermissionError(f"Requires one of roles: {', '.join(allowed)}")

    return actor


def assert_project_access(actor: Dict, project: Dict, db) -> None:
    """Executives see every project; managers see their own and their team's."""
    role = actor.get("role")

    if role == UserRole.EXECUTIVE.value:
        return

    if role == UserRole.MANAGER.value:
        if project.get("manager_id") == actor.get("user_id"):
            return
        manager = db.get_user(project.get("manager_id")) or {}
        if actor.get("team_id") and manager.get("team_id") == actor.get("team_id"):
            return

    raise PermissionError("No access to this project")
