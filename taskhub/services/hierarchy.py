# Rev 0.2.0

"""Project forest and task trees: parent validation, cascade delete, display trees.

Cascade rules
- project delete: every task with project_id == project goes, each with its
  whole subtask tree; subprojects are detached (parent_id -> None) unless
  cascade_subprojects is on, in which case they go the same way
- task delete: the task and every task below it via parent_task_id

All walks keep a visited set, so rows already forming a cycle cannot make
them loop.
"""
from __future__ import annotations
from collections import defaultdict
from dataclasses import dataclass, field
from typing import Callable, Dict, Iterable, List, Optional, TypeVar

from taskhub.errors import ValidationError
from taskhub.models.entities import Project, ProjectNode, Task, TaskNode
from taskhub.repositories.base import Storage
from taskhub.utils.logging_setup import get_logger

log = get_logger("hierarchy")

T = TypeVar("T")
N = TypeVar("N")


@dataclass
class CascadeResult:
    found: bool
    deleted_project_ids: List[int] = field(default_factory=list)
    deleted_task_ids: List[int] = field(default_factory=list)
    detached_project_ids: List[int] = field(default_factory=list)

    def __bool__(self) -> bool:
        return self.found


def _build_forest(
    items: Iterable[T],
    item_id: Callable[[T], int],
    parent_of: Callable[[T], Optional[int]],
    make_node: Callable[[T], N],
    children_of: Callable[[N], List[N]],
) -> List[N]:
    items = list(items)
    known = {item_id(i) for i in items}
    kids: Dict[int, List[T]] = defaultdict(list)
    roots: List[T] = []
    for item in items:
        parent = parent_of(item)
        if parent is None or parent not in known or parent == item_id(item):
            roots.append(item)
        else:
            kids[parent].append(item)

    placed: set[int] = set()

    def attach(item: T) -> N:
        node = make_node(item)
        placed.add(item_id(item))
        for child in kids[item_id(item)]:
            if item_id(child) not in placed:
                children_of(node).append(attach(child))
        return node

    forest = [attach(r) for r in roots]
    # rows caught in a stored cycle are unreachable from any root
    for item in items:
        if item_id(item) not in placed:
            forest.append(attach(item))
    return forest


def build_project_tree(projects: Iterable[Project]) -> List[ProjectNode]:
    """Roots are projects with no parent or a parent that does not exist."""
    return _build_forest(
        projects,
        lambda p: p.id,
        lambda p: p.parent_id,
        ProjectNode,
        lambda n: n.children,
    )


def build_task_tree(tasks: Iterable[Task]) -> List[TaskNode]:
    return _build_forest(
        tasks,
        lambda t: t.id,
        lambda t: t.parent_task_id,
        TaskNode,
        lambda n: n.children,
    )


class HierarchyService:
    def __init__(self, storage: Storage, *, cascade_subprojects: bool = False):
        self._storage = storage
        self.cascade_subprojects = cascade_subprojects

    # ---- validation -------------------------------------------------------

    def validate_project_parent(self, project_id: Optional[int], parent_id: Optional[int]) -> None:
        if parent_id is None:
            return
        if project_id is not None and parent_id == project_id:
            raise ValidationError.for_field("parentId", "A project cannot be its own parent")
        parent = self._storage.projects.get_project(parent_id)
        if parent is None:
            raise ValidationError.for_field("parentId", f"Parent project {parent_id} does not exist")
        if project_id is None:
            return
        seen = set()
        current: Optional[Project] = parent
        while current is not None and current.id not in seen:
            seen.add(current.id)
            if current.parent_id == project_id:
                log.info("Rejected parent %s for project %s: cycle", parent_id, project_id)
                raise ValidationError.for_field(
                    "parentId", f"Project {parent_id} is a descendant of project {project_id}"
                )
            current = (
                self._storage.projects.get_project(current.parent_id)
                if current.parent_id is not None else None
            )

    def validate_task_parent(self, task_id: Optional[int], parent_task_id: Optional[int]) -> None:
        if parent_task_id is None:
            return
        if task_id is not None and parent_task_id == task_id:
            raise ValidationError.for_field("parentTaskId", "A task cannot be its own parent")
        parent = self._storage.tasks.get_task(parent_task_id)
        if parent is None:
            raise ValidationError.for_field("parentTaskId", f"Parent task {parent_task_id} does not exist")
        if task_id is None:
            return
        seen = set()
        current: Optional[Task] = parent
        while current is not None and current.id not in seen:
            seen.add(current.id)
            if current.parent_task_id == task_id:
                log.info("Rejected parent %s for task %s: cycle", parent_task_id, task_id)
                raise ValidationError.for_field(
                    "parentTaskId", f"Task {parent_task_id} is a subtask of task {task_id}"
                )
            current = (
                self._storage.tasks.get_task(current.parent_task_id)
                if current.parent_task_id is not None else None
            )

    # ---- walks ------------------------------------------------------------

    def collect_descendant_task_ids(self, task_id: int) -> List[int]:
        """Subtask ids below task_id, breadth-first, task_id itself excluded."""
        out: List[int] = []
        seen = {task_id}
        frontier = [task_id]
        while frontier:
            nxt = []
            for tid in frontier:
                for child in self._storage.tasks.list_tasks(parent_task_id=tid):
                    if child.id not in seen:
                        seen.add(child.id)
                        out.append(child.id)
                        nxt.append(child.id)
            frontier = nxt
        return out

    def collect_descendant_project_ids(self, project_id: int) -> List[int]:
        out: List[int] = []
        seen = {project_id}
        frontier = [project_id]
        while frontier:
            nxt = []
            for pid in frontier:
                for child in self._storage.projects.list_child_projects(pid):
                    if child.id not in seen:
                        seen.add(child.id)
                        out.append(child.id)
                        nxt.append(child.id)
            frontier = nxt
        return out

    # ---- cascades ---------------------------------------------------------

    def delete_task(self, task_id: int) -> List[int]:
        """Delete a task and its subtask tree. Returns deleted ids, [] if unknown."""
        if self._storage.tasks.get_task(task_id) is None:
            return []
        with self._storage.transaction():
            return self._delete_task_tree(task_id, set())

    def _delete_task_tree(self, task_id: int, already: set) -> List[int]:
        ids = [task_id] + self.collect_descendant_task_ids(task_id)
        deleted: List[int] = []
        # children before parents keeps parent_task_id references valid
        for tid in reversed(ids):
            if tid in already:
                continue
            if self._storage.tasks.delete_task(tid):
                deleted.append(tid)
            already.add(tid)
        if len(deleted) > 1:
            log.debug("Task %s cascade removed subtasks %s", task_id, deleted[:-1])
        return deleted

    def delete_project(self, project_id: int) -> CascadeResult:
        if self._storage.projects.get_project(project_id) is None:
            return CascadeResult(found=False)

        result = CascadeResult(found=True)
        with self._storage.transaction():
            if self.cascade_subprojects:
                project_ids = [project_id] + self.collect_descendant_project_ids(project_id)
            else:
                project_ids = [project_id]

            gone: set = set()
            for pid in project_ids:
                for task in self._storage.tasks.list_tasks(project_id=pid):
                    if task.id not in gone:
                        result.deleted_task_ids.extend(self._delete_task_tree(task.id, gone))

            if not self.cascade_subprojects:
                for child in self._storage.projects.list_child_projects(project_id):
                    self._storage.projects.update_project(child.id, parent_id=None)
                    result.detached_project_ids.append(child.id)

            for pid in reversed(project_ids):
                if self._storage.projects.delete_project(pid):
                    result.deleted_project_ids.append(pid)

        log.debug(
            "Project %s cascade: projects=%s tasks=%s detached=%s",
            project_id, result.deleted_project_ids, result.deleted_task_ids,
            result.detached_project_ids,
        )
        return result

    # ---- read side --------------------------------------------------------

    def project_tree(self) -> List[ProjectNode]:
        return build_project_tree(self._storage.projects.list_projects())

    def task_tree(self, project_id: Optional[int] = None) -> List[TaskNode]:
        return build_task_tree(self._storage.tasks.list_tasks(project_id=project_id))
