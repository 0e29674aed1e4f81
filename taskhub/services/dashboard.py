# Rev 0.2.0

"""Dashboard aggregates, recomputed from a full task snapshot on every read.

Two notions of "overdue" coexist:
- count_tasks_by_status().overdue counts the stored status 'overdue'
- is_overdue() compares the due date with now (badges, overdue lists)
TaskCounts carries both so callers can see where they disagree.
"""
from __future__ import annotations
from dataclasses import asdict, dataclass
from datetime import datetime, timedelta
from typing import Iterable, List, Optional

from taskhub.models.entities import Task
from taskhub.models.types import TaskStatus
from taskhub.repositories.base import Storage
from taskhub.utils.clock import Clock, ensure_utc, utc_now

DEFAULT_DUE_SOON_WINDOW = timedelta(days=7)


@dataclass(frozen=True)
class TaskCounts:
    total: int
    in_progress: int
    completed: int
    overdue: int
    overdue_by_due_date: int = 0

    def as_dict(self) -> dict:
        return asdict(self)


def is_overdue(task: Task, now: datetime) -> bool:
    if task.status == TaskStatus.COMPLETED or task.due_date is None:
        return False
    return ensure_utc(task.due_date) < ensure_utc(now)


def is_due_soon(task: Task, now: datetime, window: timedelta = DEFAULT_DUE_SOON_WINDOW) -> bool:
    if task.status == TaskStatus.COMPLETED or task.due_date is None:
        return False
    now = ensure_utc(now)
    return now <= ensure_utc(task.due_date) <= now + window


def count_tasks_by_status(tasks: Iterable[Task], now: Optional[datetime] = None) -> TaskCounts:
    tasks = list(tasks)
    now = now or utc_now()
    return TaskCounts(
        total=len(tasks),
        in_progress=sum(1 for t in tasks if t.status == TaskStatus.IN_PROGRESS),
        completed=sum(1 for t in tasks if t.status == TaskStatus.COMPLETED),
        overdue=sum(1 for t in tasks if t.status == TaskStatus.OVERDUE),
        overdue_by_due_date=sum(1 for t in tasks if is_overdue(t, now)),
    )


def select_due_soon(
    tasks: Iterable[Task], now: datetime, window: timedelta = DEFAULT_DUE_SOON_WINDOW
) -> List[Task]:
    # sorted() is stable: equal due dates keep insertion order
    return sorted((t for t in tasks if is_due_soon(t, now, window)), key=lambda t: ensure_utc(t.due_date))


def select_overdue(tasks: Iterable[Task], now: datetime) -> List[Task]:
    return sorted((t for t in tasks if is_overdue(t, now)), key=lambda t: ensure_utc(t.due_date))


class DashboardService:
    def __init__(self, storage: Storage, *, clock: Clock = utc_now,
                 due_soon_window: timedelta = DEFAULT_DUE_SOON_WINDOW):
        self._storage = storage
        self._clock = clock
        self.due_soon_window = due_soon_window

    def stats(self) -> TaskCounts:
        return count_tasks_by_status(self._storage.tasks.list_tasks(), self._clock())

    def project_summary(self, project_id: int) -> TaskCounts:
        return count_tasks_by_status(self._storage.tasks.list_tasks(project_id=project_id), self._clock())

    def due_soon(self) -> List[Task]:
        return select_due_soon(self._storage.tasks.list_tasks(), self._clock(), self.due_soon_window)

    def overdue(self) -> List[Task]:
        return select_overdue(self._storage.tasks.list_tasks(), self._clock())
