# Rev 0.2.0

"""Demo data: five users, one project, five tasks, four activities.

Written straight through the repositories so ids come out as 1..N on an
empty store and the canned activity texts are kept as-is.
"""
from __future__ import annotations
from datetime import datetime, timezone

from taskhub.models.types import ActivityType, TaskPriority, TaskStatus
from taskhub.repositories.base import Storage
from taskhub.utils.logging_setup import get_logger

log = get_logger("seed")

USERS = [
    ("mwilson", "Margaret Wilson", "Project Manager", "MW", "#0078D4"),
    ("rjohnson", "Robert Johnson", "Sustainability Specialist", "RJ", "#D83B01"),
    ("dparker", "David Parker", "Energy Expert", "DP", "#107C10"),
    ("sjones", "Sarah Jones", "Community Educator", "SJ", "#605E5C"),
    ("tgreen", "Thomas Green", "Environmental Specialist", "TG", "#605E5C"),
]

PROJECT = ("Community Sustainability Project", "Initiatives for building sustainable community practices")

# title, description, status, priority, due date, assignee (index into USERS)
TASKS = [
    ("Solar Panel Installation Guidelines", "Create documentation for community solar installation",
     TaskStatus.IN_PROGRESS, TaskPriority.HIGH, "2023-07-15", 1),
    ("Community Garden Planning", "Design layouts for seasonal planting schedule",
     TaskStatus.COMPLETED, TaskPriority.MEDIUM, "2023-06-30", 0),
    ("Rainwater Collection System", "Research and design efficient collection solutions",
     TaskStatus.NEW, TaskPriority.LOW, "2023-08-05", 4),
    ("Composting Workshop", "Organize educational session for community members",
     TaskStatus.OVERDUE, TaskPriority.MEDIUM, "2023-06-10", 3),
    ("Energy Audit Guidelines", "Develop standards for community home energy assessments",
     TaskStatus.IN_PROGRESS, TaskPriority.HIGH, "2023-07-20", 2),
]

# type, description, user (index), task (index)
ACTIVITIES = [
    (ActivityType.TASK_COMPLETED, "completed Community Garden Planning", 0, 1),
    (ActivityType.COMMENT_ADDED, "commented on Solar Panel Installation Guidelines", 1, 0),
    (ActivityType.TASK_UPDATED, "updated the due date for Energy Audit Guidelines", 2, 4),
    (ActivityType.TASK_CREATED, "created a new task Rainwater Collection System", 4, 2),
]


def _day(value: str) -> datetime:
    return datetime.fromisoformat(value).replace(tzinfo=timezone.utc)


def seed_demo(storage: Storage) -> bool:
    """Load the demo set into an empty store. Returns False if users already exist."""
    if storage.users.list_users():
        log.info("Seed skipped: store already has users")
        return False

    with storage.transaction():
        users = [
            storage.users.create_user(
                username=username, full_name=full_name, role=role,
                initials=initials, avatar_color=color, email=None,
            )
            for username, full_name, role, initials, color in USERS
        ]
        project = storage.projects.create_project(name=PROJECT[0], description=PROJECT[1])
        tasks = [
            storage.tasks.create_task(
                title=title, description=description, status=status, priority=priority,
                due_date=_day(due), project_id=project.id, assignee_id=users[assignee].id,
            )
            for title, description, status, priority, due, assignee in TASKS
        ]
        for kind, text, user, task in ACTIVITIES:
            storage.activities.add_activity(
                kind, text, user_id=users[user].id, task_id=tasks[task].id, project_id=project.id
            )

    log.info("Seeded %d users, 1 project, %d tasks, %d activities", len(USERS), len(TASKS), len(ACTIVITIES))
    return True
