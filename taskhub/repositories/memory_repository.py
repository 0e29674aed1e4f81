# Rev 0.2.0
"""In-memory backend: dict maps plus monotonic id counters on one store object.

One InMemoryStorage is built per process (or per test); nothing lives at
module level.
"""
from __future__ import annotations

import threading
from contextlib import contextmanager
from dataclasses import dataclass, field, replace
from typing import Any, Dict, Iterator, List, Optional

from taskhub.models.entities import Activity, Project, Task, User
from taskhub.models.types import ActivityType
from taskhub.utils.clock import Clock, utc_now


@dataclass
class _State:
    users: Dict[int, User] = field(default_factory=dict)
    projects: Dict[int, Project] = field(default_factory=dict)
    tasks: Dict[int, Task] = field(default_factory=dict)
    activities: Dict[int, Activity] = field(default_factory=dict)
    counters: Dict[str, int] = field(
        default_factory=lambda: {"user": 1, "project": 1, "task": 1, "activity": 1}
    )

    def next_id(self, kind: str) -> int:
        value = self.counters[kind]
        self.counters[kind] = value + 1
        return value

    def snapshot(self) -> "_State":
        # records are never mutated in place, so shallow copies are enough
        return _State(
            users=dict(self.users),
            projects=dict(self.projects),
            tasks=dict(self.tasks),
            activities=dict(self.activities),
            counters=dict(self.counters),
        )

    def restore(self, snap: "_State") -> None:
        self.users = snap.users
        self.projects = snap.projects
        self.tasks = snap.tasks
        self.activities = snap.activities
        self.counters = snap.counters


class MemoryUserRepository:
    def __init__(self, state: _State):
        self._state = state

    def list_users(self) -> List[User]:
        return list(self._state.users.values())

    def get_user(self, user_id: int) -> Optional[User]:
        return self._state.users.get(user_id)

    def get_user_by_username(self, username: str) -> Optional[User]:
        return next((u for u in self._state.users.values() if u.username == username), None)

    def create_user(self, **fields: Any) -> User:
        user = User(id=self._state.next_id("user"), **fields)
        self._state.users[user.id] = user
        return user

    def update_user(self, user_id: int, **fields: Any) -> Optional[User]:
        user = self._state.users.get(user_id)
        if user is None:
            return None
        updated = replace(user, **fields)
        self._state.users[user_id] = updated
        return updated

    def delete_user(self, user_id: int) -> bool:
        return self._state.users.pop(user_id, None) is not None


class MemoryProjectRepository:
    def __init__(self, state: _State, clock: Clock):
        self._state = state
        self._clock = clock

    def list_projects(self) -> List[Project]:
        return list(self._state.projects.values())

    def list_child_projects(self, parent_id: int) -> List[Project]:
        return [p for p in self._state.projects.values() if p.parent_id == parent_id]

    def get_project(self, project_id: int) -> Optional[Project]:
        return self._state.projects.get(project_id)

    def create_project(self, **fields: Any) -> Project:
        now = self._clock()
        project = Project(
            id=self._state.next_id("project"), created_at=now, updated_at=now, **fields
        )
        self._state.projects[project.id] = project
        return project

    def update_project(self, project_id: int, **fields: Any) -> Optional[Project]:
        project = self._state.projects.get(project_id)
        if project is None:
            return None
        updated = replace(project, **fields, updated_at=self._clock())
        self._state.projects[project_id] = updated
        return updated

    def delete_project(self, project_id: int) -> bool:
        return self._state.projects.pop(project_id, None) is not None


class MemoryTaskRepository:
    def __init__(self, state: _State, clock: Clock):
        self._state = state
        self._clock = clock

    def list_tasks(
        self,
        *,
        project_id: Optional[int] = None,
        parent_task_id: Optional[int] = None,
    ) -> List[Task]:
        out = list(self._state.tasks.values())
        if project_id is not None:
            out = [t for t in out if t.project_id == project_id]
        if parent_task_id is not None:
            out = [t for t in out if t.parent_task_id == parent_task_id]
        return out

    def get_task(self, task_id: int) -> Optional[Task]:
        return self._state.tasks.get(task_id)

    def create_task(self, **fields: Any) -> Task:
        now = self._clock()
        task = Task(id=self._state.next_id("task"), created_at=now, updated_at=now, **fields)
        self._state.tasks[task.id] = task
        return task

    def update_task(self, task_id: int, **fields: Any) -> Optional[Task]:
        task = self._state.tasks.get(task_id)
        if task is None:
            return None
        updated = replace(task, **fields, updated_at=self._clock())
        self._state.tasks[task_id] = updated
        return updated

    def delete_task(self, task_id: int) -> bool:
        return self._state.tasks.pop(task_id, None) is not None

    def clear_user_references(self, user_id: int) -> int:
        changed = 0
        for task in list(self._state.tasks.values()):
            fields: Dict[str, Any] = {}
            if task.assignee_id == user_id:
                fields["assignee_id"] = None
            if task.reporter_id == user_id:
                fields["reporter_id"] = None
            if fields:
                self._state.tasks[task.id] = replace(task, **fields)
                changed += 1
        return changed


class MemoryActivityRepository:
    def __init__(self, state: _State, clock: Clock):
        self._state = state
        self._clock = clock

    def add_activity(
        self,
        type: ActivityType,
        description: str,
        *,
        user_id: Optional[int] = None,
        task_id: Optional[int] = None,
        project_id: Optional[int] = None,
    ) -> Activity:
        activity = Activity(
            id=self._state.next_id("activity"),
            type=ActivityType(type),
            description=description,
            created_at=self._clock(),
            user_id=user_id,
            task_id=task_id,
            project_id=project_id,
        )
        self._state.activities[activity.id] = activity
        return activity

    def list_recent_activities(self, limit: int) -> List[Activity]:
        # stable: equal timestamps keep insertion order
        ordered = sorted(self._state.activities.values(), key=lambda a: a.created_at, reverse=True)
        return ordered[: max(limit, 0)]

    def list_activities_for_user(self, user_id: int) -> List[Activity]:
        mine = [a for a in self._state.activities.values() if a.user_id == user_id]
        return sorted(mine, key=lambda a: a.created_at, reverse=True)


class InMemoryStorage:
    """Map-backed Storage; transaction() snapshots and restores on error."""

    def __init__(self, clock: Clock = utc_now):
        self._state = _State()
        self._lock = threading.RLock()
        self.users = MemoryUserRepository(self._state)
        self.projects = MemoryProjectRepository(self._state, clock)
        self.tasks = MemoryTaskRepository(self._state, clock)
        self.activities = MemoryActivityRepository(self._state, clock)

    @contextmanager
    def transaction(self) -> Iterator[None]:
        with self._lock:
            snap = self._state.snapshot()
            try:
                yield
            except BaseException:
                self._state.restore(snap)
                raise

    def close(self) -> None:
        pass
