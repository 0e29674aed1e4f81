# Rev 0.2.0

"""Task commands: validate, write, cascade, log, all in one storage transaction.

Status changes through the dedicated endpoint use a request/result pair so
callers can tell an unknown task from a rejected transition without
catching exceptions.
"""
from __future__ import annotations
from dataclasses import dataclass
from typing import Any, List, Optional

from taskhub.errors import NotFoundError, ValidationError
from taskhub.models.entities import TASK_FIELDS, Activity, Task, TaskNode
from taskhub.models.types import TaskPriority, TaskStatus
from taskhub.repositories.base import Storage
from taskhub.utils.logging_setup import get_logger
from .activity_recorder import ActivityRecorder
from .hierarchy import HierarchyService
from .status_rules import PERMISSIVE, StatusPolicy, parse_status
from .validation import FieldChecker

log = get_logger("tasks")


@dataclass
class StatusChangeRequest:
    task_id: int
    target_status: Any
    user_id: Optional[int] = None


@dataclass
class StatusChangeResult:
    ok: bool
    code: str          # applied | invalid_status | invalid_transition | invalid_user | entity_not_found
    message: str = ""
    task: Optional[Task] = None
    activity: Optional[Activity] = None


class TaskService:
    def __init__(
        self,
        storage: Storage,
        hierarchy: HierarchyService,
        recorder: ActivityRecorder,
        *,
        policy: StatusPolicy = PERMISSIVE,
    ):
        self._storage = storage
        self._hierarchy = hierarchy
        self._recorder = recorder
        self.policy = policy

    # ---- queries
    def list_tasks(self, *, project_id: Optional[int] = None,
                   parent_task_id: Optional[int] = None) -> List[Task]:
        return self._storage.tasks.list_tasks(project_id=project_id, parent_task_id=parent_task_id)

    def get_task(self, task_id: int) -> Task:
        task = self._storage.tasks.get_task(task_id)
        if task is None:
            raise NotFoundError("task", task_id)
        return task

    def tree(self, project_id: Optional[int] = None) -> List[TaskNode]:
        return self._hierarchy.task_tree(project_id)

    # ---- commands
    def create_task(self, *, user_id: Optional[int] = None, **fields: Any) -> Task:
        chk = self._check(fields, creating=True)
        status = chk.data.get("status", TaskStatus.NEW)
        if not self.policy.is_valid_initial(status):
            raise ValidationError.for_field("status", f"A task cannot start as {status.value}")
        with self._storage.transaction():
            self._check_actor(user_id)
            self._check_references(chk.data)
            self._hierarchy.validate_task_parent(None, chk.data.get("parent_task_id"))
            task = self._storage.tasks.create_task(**chk.data)
            self._recorder.task_created(task, user_id)
        log.info("Created task #%s %r project=%s parent=%s",
                 task.id, task.title, task.project_id, task.parent_task_id)
        return task

    def update_task(self, task_id: int, *, user_id: Optional[int] = None, **fields: Any) -> Task:
        chk = self._check(fields, creating=False)
        with self._storage.transaction():
            current = self._storage.tasks.get_task(task_id)
            if current is None:
                raise NotFoundError("task", task_id)
            self._check_actor(user_id)
            if "status" in chk.data:
                allowed, reason = self.policy.can_change(current.status, chk.data["status"])
                if not allowed:
                    raise ValidationError.for_field("status", reason)
            self._check_references(chk.data)
            if "parent_task_id" in chk.data:
                self._hierarchy.validate_task_parent(task_id, chk.data["parent_task_id"])
            task = self._storage.tasks.update_task(task_id, **chk.data)
            self._recorder.task_updated(task, user_id)
        log.info("Updated task #%s fields=%s", task_id, sorted(chk.data))
        return task

    def delete_task(self, task_id: int, *, user_id: Optional[int] = None) -> bool:
        with self._storage.transaction():
            task = self._storage.tasks.get_task(task_id)
            if task is None:
                return False
            self._check_actor(user_id)
            deleted = self._hierarchy.delete_task(task_id)
            self._recorder.task_deleted(task, user_id)
        log.info("Deleted task #%s (+%d subtasks)", task_id, max(len(deleted) - 1, 0))
        return bool(deleted)

    def change_status(self, req: StatusChangeRequest) -> StatusChangeResult:
        with self._storage.transaction():
            current = self._storage.tasks.get_task(req.task_id)
            if current is None:
                return StatusChangeResult(False, "entity_not_found", "Task not found")
            target = parse_status(req.target_status)
            if target is None:
                return StatusChangeResult(False, "invalid_status", f"unknown status {req.target_status!r}")
            if req.user_id is not None and self._storage.users.get_user(req.user_id) is None:
                return StatusChangeResult(False, "invalid_user", f"User {req.user_id} does not exist")

            allowed, reason = self.policy.can_change(current.status, target)
            if not allowed:
                log.info("Task #%s status change rejected: %s", req.task_id, reason)
                return StatusChangeResult(False, "invalid_transition", reason, task=current)

            task = self._storage.tasks.update_task(req.task_id, status=target)
            activity = self._recorder.task_status_changed(task, req.user_id)

        log.info("Task #%s status %s -> %s", task.id, current.status.value, task.status.value)
        return StatusChangeResult(True, "applied", task=task, activity=activity)

    # ---- internals
    def _check(self, fields: dict, *, creating: bool) -> FieldChecker:
        chk = FieldChecker(dict(fields))
        chk.reject_unknown(TASK_FIELDS)
        chk.text("title", required=creating, max_length=300)
        if not creating and "title" in chk.data and not chk.data["title"]:
            chk.fail("title", "Must not be empty")
        chk.text("description")
        chk.choice("status", TaskStatus)
        chk.choice("priority", TaskPriority)
        chk.integer("progress", minimum=0, maximum=100, nullable=False)
        chk.integer("estimated_hours", minimum=0)
        chk.integer("spent_hours", minimum=0, nullable=False)
        chk.timestamp("due_date")
        chk.timestamp("start_date")
        for ref in ("project_id", "assignee_id", "reporter_id", "parent_task_id"):
            chk.integer(ref, minimum=1)
        chk.raise_if_failed("Invalid task data")
        return chk

    def _check_references(self, data: dict) -> None:
        chk = FieldChecker(data)
        if data.get("project_id") is not None and self._storage.projects.get_project(data["project_id"]) is None:
            chk.fail("project_id", f"Project {data['project_id']} does not exist")
        for ref in ("assignee_id", "reporter_id"):
            if data.get(ref) is not None and self._storage.users.get_user(data[ref]) is None:
                chk.fail(ref, f"User {data[ref]} does not exist")
        chk.raise_if_failed("Invalid task data")

    def _check_actor(self, user_id: Optional[int]) -> None:
        if user_id is not None and self._storage.users.get_user(user_id) is None:
            raise ValidationError.for_field("userId", f"User {user_id} does not exist")
