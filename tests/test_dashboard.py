# Rev 0.2.0
from __future__ import annotations

from datetime import datetime, timedelta, timezone

from taskhub.models.entities import Task
from taskhub.models.types import TaskStatus
from taskhub.services.dashboard import (
    count_tasks_by_status,
    is_due_soon,
    is_overdue,
    select_due_soon,
    select_overdue,
)

NOW = datetime(2024, 3, 1, 12, 0, tzinfo=timezone.utc)
WEEK = timedelta(days=7)


def _task(tid, status=TaskStatus.NEW, due=None):
    return Task(id=tid, title=f"T{tid}", created_at=NOW, updated_at=NOW, status=status, due_date=due)


def test_counts_use_stored_status():
    tasks = [
        _task(1, TaskStatus.IN_PROGRESS),
        _task(2, TaskStatus.IN_PROGRESS),
        _task(3, TaskStatus.COMPLETED),
        _task(4, TaskStatus.OVERDUE, due=NOW + timedelta(days=3)),
        _task(5, TaskStatus.NEW, due=NOW - timedelta(days=1)),
    ]
    counts = count_tasks_by_status(tasks, NOW)
    assert (counts.total, counts.in_progress, counts.completed, counts.overdue) == (5, 2, 1, 1)
    # date-based view disagrees on purpose: only #5 is past due
    assert counts.overdue_by_due_date == 1


def test_counts_on_empty_store():
    counts = count_tasks_by_status([], NOW)
    assert counts.as_dict() == {
        "total": 0, "in_progress": 0, "completed": 0, "overdue": 0, "overdue_by_due_date": 0,
    }


def test_due_soon_window_is_inclusive():
    assert is_due_soon(_task(1, due=NOW), NOW, WEEK)
    assert is_due_soon(_task(2, due=NOW + WEEK), NOW, WEEK)
    assert not is_due_soon(_task(3, due=NOW + WEEK + timedelta(seconds=1)), NOW, WEEK)
    assert not is_due_soon(_task(4, due=NOW - timedelta(seconds=1)), NOW, WEEK)
    assert not is_due_soon(_task(5), NOW, WEEK)


def test_completed_tasks_are_never_due_or_overdue():
    done = _task(1, TaskStatus.COMPLETED, due=NOW + timedelta(days=1))
    late = _task(2, TaskStatus.COMPLETED, due=NOW - timedelta(days=1))
    assert not is_due_soon(done, NOW, WEEK)
    assert not is_overdue(late, NOW)


def test_naive_due_dates_read_as_utc():
    naive = _task(1, due=datetime(2024, 3, 2, 12, 0))
    assert is_due_soon(naive, NOW, WEEK)


def test_due_soon_sorted_by_due_date_stable():
    d1 = NOW + timedelta(days=1)
    d3 = NOW + timedelta(days=3)
    tasks = [_task(1, due=d3), _task(2, due=d1), _task(3, due=d3), _task(4, due=NOW + timedelta(days=30))]
    assert [t.id for t in select_due_soon(tasks, NOW, WEEK)] == [2, 1, 3]


def test_overdue_selection():
    tasks = [
        _task(1, due=NOW - timedelta(days=1)),
        _task(2, due=NOW - timedelta(days=5)),
        _task(3, TaskStatus.COMPLETED, due=NOW - timedelta(days=9)),
        _task(4, due=NOW + timedelta(days=1)),
    ]
    assert [t.id for t in select_overdue(tasks, NOW)] == [2, 1]


# --- service over a store ---------------------------------------------------

def test_due_tomorrow_leaves_list_once_completed(ctx, clock):
    task = ctx.tasks.create_task(title="Ship it", due_date=clock() + timedelta(days=1))
    assert [t.id for t in ctx.dashboard.due_soon()] == [task.id]

    ctx.tasks.update_task(task.id, status="completed")
    assert ctx.dashboard.due_soon() == []


def test_stats_total_matches_store(ctx):
    for i in range(4):
        ctx.tasks.create_task(title=f"t{i}", status="in-progress" if i % 2 else "new")
    stats = ctx.dashboard.stats()
    assert stats.total == len(ctx.tasks.list_tasks()) == 4
    assert stats.in_progress == 2


def test_project_summary_counts_only_that_project(ctx):
    a = ctx.projects.create_project(name="A")
    b = ctx.projects.create_project(name="B")
    ctx.tasks.create_task(title="a1", project_id=a.id, status="completed")
    ctx.tasks.create_task(title="a2", project_id=a.id)
    ctx.tasks.create_task(title="b1", project_id=b.id)
    summary = ctx.dashboard.project_summary(a.id)
    assert (summary.total, summary.completed) == (2, 1)


def test_due_soon_window_follows_settings(make_ctx, clock):
    ctx = make_ctx(due_soon_days=2)
    ctx.tasks.create_task(title="soon", due_date=clock() + timedelta(days=1))
    ctx.tasks.create_task(title="later", due_date=clock() + timedelta(days=5))
    assert [t.title for t in ctx.dashboard.due_soon()] == ["soon"]
