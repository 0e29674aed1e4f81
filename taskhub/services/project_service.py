# Rev 0.2.0
from __future__ import annotations
from typing import Any, List, Optional

from taskhub.errors import NotFoundError, ValidationError
from taskhub.models.entities import PROJECT_FIELDS, Project, ProjectNode
from taskhub.models.types import ProjectStatus
from taskhub.repositories.base import Storage
from taskhub.utils.logging_setup import get_logger
from .activity_recorder import ActivityRecorder
from .hierarchy import HierarchyService
from .validation import FieldChecker

log = get_logger("projects")


class ProjectService:
    def __init__(self, storage: Storage, hierarchy: HierarchyService, recorder: ActivityRecorder):
        self._storage = storage
        self._hierarchy = hierarchy
        self._recorder = recorder

    # ---- queries
    def list_projects(self, parent_id: Optional[int] = None) -> List[Project]:
        if parent_id is not None:
            return self._storage.projects.list_child_projects(parent_id)
        return self._storage.projects.list_projects()

    def get_project(self, project_id: int) -> Project:
        project = self._storage.projects.get_project(project_id)
        if project is None:
            raise NotFoundError("project", project_id)
        return project

    def tree(self) -> List[ProjectNode]:
        return self._hierarchy.project_tree()

    # ---- commands
    def create_project(self, *, user_id: Optional[int] = None, **fields: Any) -> Project:
        chk = self._check(fields, creating=True)
        with self._storage.transaction():
            self._check_actor(user_id)
            self._hierarchy.validate_project_parent(None, chk.data.get("parent_id"))
            project = self._storage.projects.create_project(**chk.data)
            self._recorder.project_created(project, user_id)
        log.info("Created project #%s %r parent=%s", project.id, project.name, project.parent_id)
        return project

    def update_project(self, project_id: int, *, user_id: Optional[int] = None, **fields: Any) -> Project:
        chk = self._check(fields, creating=False)
        with self._storage.transaction():
            if self._storage.projects.get_project(project_id) is None:
                raise NotFoundError("project", project_id)
            self._check_actor(user_id)
            if "parent_id" in chk.data:
                self._hierarchy.validate_project_parent(project_id, chk.data["parent_id"])
            project = self._storage.projects.update_project(project_id, **chk.data)
            self._recorder.project_updated(project, user_id)
        log.info("Updated project #%s fields=%s", project_id, sorted(chk.data))
        return project

    def delete_project(self, project_id: int, *, user_id: Optional[int] = None) -> bool:
        with self._storage.transaction():
            project = self._storage.projects.get_project(project_id)
            if project is None:
                return False
            self._check_actor(user_id)
            result = self._hierarchy.delete_project(project_id)
            self._recorder.project_deleted(project, user_id)
        log.info(
            "Deleted project #%s (%d tasks, subprojects deleted=%s detached=%s)",
            project_id, len(result.deleted_task_ids),
            [p for p in result.deleted_project_ids if p != project_id], result.detached_project_ids,
        )
        return result.found

    # ---- internals
    def _check(self, fields: dict, *, creating: bool) -> FieldChecker:
        chk = FieldChecker(dict(fields))
        chk.reject_unknown(PROJECT_FIELDS)
        chk.text("name", required=creating, max_length=200)
        if not creating and "name" in chk.data and not chk.data["name"]:
            chk.fail("name", "Must not be empty")
        chk.text("description")
        chk.text("icon")
        chk.choice("status", ProjectStatus)
        chk.integer("parent_id", minimum=1)
        chk.boolean("is_public")
        chk.raise_if_failed("Invalid project data")
        return chk

    def _check_actor(self, user_id: Optional[int]) -> None:
        if user_id is not None and self._storage.users.get_user(user_id) is None:
            raise ValidationError.for_field("userId", f"User {user_id} does not exist")
