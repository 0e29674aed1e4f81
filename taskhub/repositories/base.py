# Rev 0.2.0
"""Storage interface shared by the in-memory and SQLite backends.

Hierarchy, dashboard and activity logic only ever talk to these protocols,
never to a concrete backend.

Contract (every entity):
  get_*     -> record | None
  create_*  -> record (id and timestamps assigned by the store)
  update_*  -> updated record | None; partial, only supplied fields change
  delete_*  -> True on first delete, False when the id is already gone
"""
from __future__ import annotations
from typing import Any, ContextManager, List, Optional, Protocol

from taskhub.models.entities import Activity, Project, Task, User
from taskhub.models.types import ActivityType


class UserRepository(Protocol):
    def list_users(self) -> List[User]: ...
    def get_user(self, user_id: int) -> Optional[User]: ...
    def get_user_by_username(self, username: str) -> Optional[User]: ...
    def create_user(self, **fields: Any) -> User: ...
    def update_user(self, user_id: int, **fields: Any) -> Optional[User]: ...
    def delete_user(self, user_id: int) -> bool: ...


class ProjectRepository(Protocol):
    def list_projects(self) -> List[Project]: ...
    def list_child_projects(self, parent_id: int) -> List[Project]: ...
    def get_project(self, project_id: int) -> Optional[Project]: ...
    def create_project(self, **fields: Any) -> Project: ...
    def update_project(self, project_id: int, **fields: Any) -> Optional[Project]: ...
    def delete_project(self, project_id: int) -> bool: ...


class TaskRepository(Protocol):
    def list_tasks(
        self,
        *,
        project_id: Optional[int] = None,
        parent_task_id: Optional[int] = None,
    ) -> List[Task]: ...
    def get_task(self, task_id: int) -> Optional[Task]: ...
    def create_task(self, **fields: Any) -> Task: ...
    def update_task(self, task_id: int, **fields: Any) -> Optional[Task]: ...
    def delete_task(self, task_id: int) -> bool: ...
    def clear_user_references(self, user_id: int) -> int: ...


class ActivityRepository(Protocol):
    def add_activity(
        self,
        type: ActivityType,
        description: str,
        *,
        user_id: Optional[int] = None,
        task_id: Optional[int] = None,
        project_id: Optional[int] = None,
    ) -> Activity: ...
    def list_recent_activities(self, limit: int) -> List[Activity]: ...
    def list_activities_for_user(self, user_id: int) -> List[Activity]: ...


class Storage(Protocol):
    users: UserRepository
    projects: ProjectRepository
    tasks: TaskRepository
    activities: ActivityRepository

    def transaction(self) -> ContextManager[None]:
        """All-or-nothing block. Nested blocks roll back on their own."""
        ...

    def close(self) -> None: ...
