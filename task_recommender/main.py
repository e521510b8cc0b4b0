import argparse
import json
import logging
import sys
from pathlib import Path
from typing import List, Optional

from .config import LOG_DIR, LOG_FILE

# Heavy modules are imported lazily inside CLI branches to avoid import-time failures


# ---------- Logging Setup ----------
def setup_logging() -> None:
    LOG_DIR.mkdir(parents=True, exist_ok=True)

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
        handlers=[
            logging.FileHandler(LOG_FILE),
            logging.StreamHandler(),
        ],
    )


def _load_json(path: Path):
    if not path.exists():
        raise FileNotFoundError(f"File not found: {path}")
    return json.loads(path.read_text(encoding="utf-8"))


def _actor(db, actor_id: str):
    actor = db.get_user(actor_id)
    if not actor:
        raise ValueError(f"User not found: {actor_id}")
    return actor


# ---------- Commands ----------
def cmd_score(task_file: Path, team_file: Path, as_json: bool) -> None:
    from .models import Employee, Task, RecommendationResult
    from .ranker import format_recommendations, rank_candidates

    task_doc = _load_json(task_file)
    team_docs = _load_json(team_file)
    if not isinstance(team_docs, list):
        raise ValueError("Team file must contain a JSON array of employees")

    task = Task.from_document(task_doc)
    team = [Employee.from_document(d, d.get("committed_hours", 0.0)) for d in team_docs]
    recommendations = rank_candidates(task, team)

    if as_json:
        print(json.dumps([r.to_document() for r in recommendations], indent=2))
    else:
        result = RecommendationResult(task.task_id, task.title, tuple(recommendations))
        print(format_recommendations([result]))


def cmd_plan(prompt: str, out: Optional[Path]) -> None:
    from .planner import generate_project_plan, plan_to_dict

    plan = generate_project_plan(prompt)
    text = json.dumps({**plan_to_dict(plan), "original_prompt": prompt}, indent=2)
    if out:
        out.write_text(text, encoding="utf-8")
        print(f"Plan with {len(plan.tasks)} tasks written to {out}")
    else:
        print(text)


def cmd_approve_plan(plan_file: Path, manager_id: str, actor_id: str) -> None:
    from .db import MongoDBManager
    from .planner import approve_plan, plan_from_dict

    data = _load_json(plan_file)
    plan = plan_from_dict(data)

    db = MongoDBManager()
    project = approve_plan(
        plan,
        manager_id,
        _actor(db, actor_id),
        db,
        original_prompt=data.get("original_prompt"),
    )
    print(f"Created project {project['project_id']} with {len(project['tasks'])} tasks")


def cmd_recommend(
    project_id: str, save: bool, list_saved: bool, actor_id: Optional[str]
) -> None:
    from .db import MongoDBManager
    from .ranker import format_recommendations
    from .recommender import (
        list_recommendations,
        recommend_for_project,
        save_recommendations,
    )

    db = MongoDBManager()

    if list_saved:
        if not actor_id:
            raise ValueError("--actor-id is required with --list")
        groups = list_recommendations(project_id, _actor(db, actor_id), db)
        if not groups:
            print("No stored recommendations.")
        for group in groups:
            print(f"{group['task_id']}  {group['task_title']}")
            for doc in group["recommendations"]:
                print(f"  {doc['recommendation_id']}  #{doc['rank']}  {doc['rationale']}")
        return

    if save:
        if not actor_id:
            raise ValueError("--actor-id is required with --save")
        saved = save_recommendations(project_id, _actor(db, actor_id), db)
        for doc in saved:
            print(f"{doc['recommendation_id']}  #{doc['rank']}  {doc['rationale']}")
        return

    results = recommend_for_project(project_id, db)
    if not results:
        print("No unassigned tasks found.")
        return
    print(format_recommendations(results))


def cmd_apply(recommendation_id: str, actor_id: str) -> None:
    from .db import MongoDBManager
    from .recommender import apply_recommendation

    db = MongoDBManager()
    result = apply_recommendation(recommendation_id, _actor(db, actor_id), db)
    task = result["task"] or {}
    print(
        f"Task {task.get('task_id')} assigned to "
        f"{task.get('assignee_user_id') or 'AI automation'}"
    )


def cmd_notifications(
    user_id: str, unread_only: bool, mark_read_id: Optional[str]
) -> None:
    from .db import MongoDBManager
    from .notifications import list_notifications, mark_read

    db = MongoDBManager()
    actor = _actor(db, user_id)

    if mark_read_id:
        mark_read(mark_read_id, actor, db)
        print(f"Notification {mark_read_id} marked read")
        return

    for n in list_notifications(actor, db, unread_only=unread_only):
        flag = " " if n["read"] else "*"
        print(f"{flag} {n['notification_id']}  {n['type']}  {json.dumps(n['payload'], default=str)}")


def cmd_seed() -> None:
    from .seed import seed_database

    seeded = seed_database()
    print(f"Seeded {len(seeded)} users")


# ---------- CLI ----------
def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Task assignment recommendation CLI"
    )
    subparsers = parser.add_subparsers(dest="command")

    # ---- seed ----
    subparsers.add_parser("seed", help="Load the sample team into the database")

    # ---- score ----
    score_parser = subparsers.add_parser(
        "score", help="Rank a team for a task from JSON files (no database)"
    )
    score_parser.add_argument("--task-file", required=True, help="Task JSON document")
    score_parser.add_argument(
        "--team-file", required=True, help="JSON array of employee documents"
    )
    score_parser.add_argument(
        "--json", action="store_true", help="Print recommendations as JSON"
    )

    # ---- plan ----
    plan_parser = subparsers.add_parser(
        "plan", help="Generate an AI project plan from a prompt"
    )
    plan_parser.add_argument("--prompt", required=True, help="Project request")
    plan_parser.add_argument("--out", help="Write the plan JSON to this file")

    # ---- approve-plan ----
    approve_parser = subparsers.add_parser(
        "approve-plan", help="Create a project and tasks from a plan file"
    )
    approve_parser.add_argument("--file", required=True, help="Plan JSON file")
    approve_parser.add_argument("--manager-id", required=True, help="Project manager")
    approve_parser.add_argument("--actor-id", required=True, help="Approving user")

    # ---- recommend ----
    rec_parser = subparsers.add_parser(
        "recommend", help="Recommend assignees for a project's unassigned tasks"
    )
    rec_parser.add_argument("--project-id", required=True, help="Project ID")
    rec_parser.add_argument(
        "--save", action="store_true", help="Persist the recommendations"
    )
    rec_parser.add_argument(
        "--list", action="store_true", help="Show stored recommendations instead"
    )
    rec_parser.add_argument("--actor-id", help="User generating the recommendations")

    # ---- notifications ----
    notif_parser = subparsers.add_parser(
        "notifications", help="List or acknowledge a user's notifications"
    )
    notif_parser.add_argument("--user-id", required=True)
    notif_parser.add_argument("--unread", action="store_true", help="Only unread")
    notif_parser.add_argument("--mark-read", help="Notification ID to mark read")

    # ---- apply ----
    apply_parser = subparsers.add_parser(
        "apply", help="Apply a stored recommendation to its task"
    )
    apply_parser.add_argument("--recommendation-id", required=True)
    apply_parser.add_argument("--actor-id", required=True)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    setup_logging()

    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        if args.command == "seed":
            cmd_seed()
        elif args.command == "score":
            cmd_score(Path(args.task_file), Path(args.team_file), args.json)
        elif args.command == "plan":
            cmd_plan(args.prompt, Path(args.out) if args.out else None)
        elif args.command == "approve-plan":
            cmd_approve_plan(Path(args.file), args.manager_id, args.actor_id)
        elif args.command == "recommend":
            cmd_recommend(args.project_id, args.save, args.list, args.actor_id)
        elif args.command == "apply":
            cmd_apply(args.recommendation_id, args.actor_id)
        elif args.command == "notifications":
            cmd_notifications(args.user_id, args.unread, args.mark_read)
        else:
            parser.print_help()

    except Exception as exc:
        logging.error("Command failed", exc_info=exc)
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
