# Rev 0.2.0
"""Append-only activity feed entries for tracked mutations.

Callers invoke the recorder inside the same storage transaction as the
mutation. In "transactional" mode a failed insert propagates and rolls the
mutation back; in "best_effort" mode the insert runs in a nested
transaction and a failure is logged while the mutation still commits.
"""
from __future__ import annotations
from typing import Optional

from taskhub.models.entities import Activity, Project, Task
from taskhub.models.types import ActivityType, TaskStatus
from taskhub.repositories.base import Storage
from taskhub.utils.logging_setup import get_logger

log = get_logger("activity")

TRANSACTIONAL = "transactional"
BEST_EFFORT = "best_effort"


class ActivityRecorder:
    def __init__(self, storage: Storage, *, mode: str = TRANSACTIONAL):
        if mode not in (TRANSACTIONAL, BEST_EFFORT):
            raise ValueError(f"unknown activity logging mode {mode!r}")
        self._storage = storage
        self.mode = mode

    def record(
        self,
        type: ActivityType,
        description: str,
        *,
        user_id: Optional[int] = None,
        task_id: Optional[int] = None,
        project_id: Optional[int] = None,
    ) -> Optional[Activity]:
        if self.mode == TRANSACTIONAL:
            return self._append(type, description, user_id, task_id, project_id)
        try:
            with self._storage.transaction():
                return self._append(type, description, user_id, task_id, project_id)
        except Exception:
            log.exception("Activity %s not recorded: %s", ActivityType(type).value, description)
            return None

    def _append(self, type, description, user_id, task_id, project_id) -> Activity:
        activity = self._storage.activities.add_activity(
            type, description, user_id=user_id, task_id=task_id, project_id=project_id
        )
        log.debug("activity #%s %s: %s", activity.id, activity.type.value, description)
        return activity

    # ---- tasks ------------------------------------------------------------

    def task_created(self, task: Task, user_id: Optional[int]) -> Optional[Activity]:
        return self.record(
            ActivityType.TASK_CREATED,
            f"created a new task: {task.title}",
            user_id=user_id if user_id is not None else task.assignee_id,
            task_id=task.id,
            project_id=task.project_id,
        )

    def task_updated(self, task: Task, user_id: Optional[int]) -> Optional[Activity]:
        if task.status == TaskStatus.COMPLETED:
            kind, text = ActivityType.TASK_COMPLETED, f"completed task: {task.title}"
        else:
            kind, text = ActivityType.TASK_UPDATED, f"updated task: {task.title}"
        return self.record(kind, text, user_id=user_id, task_id=task.id, project_id=task.project_id)

    def task_status_changed(self, task: Task, user_id: Optional[int]) -> Optional[Activity]:
        if task.status == TaskStatus.COMPLETED:
            kind, text = ActivityType.TASK_COMPLETED, f"completed {task.title}"
        else:
            kind = ActivityType.TASK_UPDATED
            text = f"updated status of {task.title} to {task.status.value}"
        return self.record(kind, text, user_id=user_id, task_id=task.id, project_id=task.project_id)

    def task_deleted(self, task: Task, user_id: Optional[int]) -> Optional[Activity]:
        project_id = task.project_id
        if project_id is not None and self._storage.projects.get_project(project_id) is None:
            project_id = None
        return self.record(
            ActivityType.TASK_DELETED,
            f"deleted task: {task.title}",
            user_id=user_id,
            project_id=project_id,
        )

    # ---- projects ---------------------------------------------------------

    def project_created(self, project: Project, user_id: Optional[int]) -> Optional[Activity]:
        return self.record(
            ActivityType.PROJECT_CREATED,
            f"created a new project: {project.name}",
            user_id=user_id,
            project_id=project.id,
        )

    def project_updated(self, project: Project, user_id: Optional[int]) -> Optional[Activity]:
        return self.record(
            ActivityType.PROJECT_UPDATED,
            f"updated project: {project.name}",
            user_id=user_id,
            project_id=project.id,
        )

    def project_deleted(self, project: Project, user_id: Optional[int]) -> Optional[Activity]:
        return self.record(
            ActivityType.PROJECT_DELETED,
            f"deleted project: {project.name}",
            user_id=user_id,
        )
