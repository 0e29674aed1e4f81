# Rev 0.2.0
from __future__ import annotations
from dataclasses import asdict
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Response

from taskhub.app_context import AppContext
from taskhub.errors import NotFoundError, ValidationError
from taskhub.models.entities import Activity, ProjectNode, Task, TaskNode
from taskhub.services.task_service import StatusChangeRequest
from . import schemas as s
from .app import get_context

router = APIRouter()
health_router = APIRouter()

Ctx = Depends(get_context)


def _deleted(found: bool, entity: str, entity_id: int) -> Response:
    if not found:
        raise NotFoundError(entity, entity_id)
    return Response(status_code=204)


def _project_node(node: ProjectNode) -> s.ProjectTreeOut:
    return s.ProjectTreeOut.model_validate(
        {**asdict(node.project), "children": [_project_node(c) for c in node.children]}
    )


def _task_node(node: TaskNode) -> s.TaskTreeOut:
    return s.TaskTreeOut.model_validate(
        {**asdict(node.task), "children": [_task_node(c) for c in node.children]}
    )


def _with_assignee(ctx: AppContext, task: Task) -> s.TaskWithAssigneeOut:
    assignee = ctx.storage.users.get_user(task.assignee_id) if task.assignee_id is not None else None
    return s.out(s.TaskWithAssigneeOut, task, assignee=s.maybe(assignee))


def _enriched(ctx: AppContext, activity: Activity) -> s.RecentActivityOut:
    user = ctx.storage.users.get_user(activity.user_id) if activity.user_id is not None else None
    task = ctx.storage.tasks.get_task(activity.task_id) if activity.task_id is not None else None
    return s.out(s.RecentActivityOut, activity, user=s.maybe(user), task=s.maybe(task))


# ---- health -----------------------------------------------------------------

@health_router.get("/health", response_model=s.HealthOut)
def health(ctx: AppContext = Ctx):
    return s.HealthOut(status="ok", storage=type(ctx.storage).__name__)


# ---- users ------------------------------------------------------------------

@router.get("/users", response_model=List[s.UserOut])
def list_users(ctx: AppContext = Ctx):
    return [s.out(s.UserOut, u) for u in ctx.users.list_users()]


@router.post("/users", response_model=s.UserOut, status_code=201)
def create_user(body: s.UserCreate, ctx: AppContext = Ctx):
    return s.out(s.UserOut, ctx.users.create_user(**body.model_dump(exclude_unset=True)))


@router.get("/users/{user_id}", response_model=s.UserOut)
def get_user(user_id: int, ctx: AppContext = Ctx):
    return s.out(s.UserOut, ctx.users.get_user(user_id))


@router.patch("/users/{user_id}", response_model=s.UserOut)
def update_user(user_id: int, body: s.UserUpdate, ctx: AppContext = Ctx):
    return s.out(s.UserOut, ctx.users.update_user(user_id, **body.model_dump(exclude_unset=True)))


@router.delete("/users/{user_id}", status_code=204, response_class=Response)
def delete_user(user_id: int, ctx: AppContext = Ctx):
    return _deleted(ctx.users.delete_user(user_id), "user", user_id)


@router.get("/users/{user_id}/activities", response_model=List[s.ActivityOut])
def user_activities(user_id: int, ctx: AppContext = Ctx):
    return [s.out(s.ActivityOut, a) for a in ctx.users.activities_for_user(user_id)]


# ---- projects ---------------------------------------------------------------

@router.get("/projects", response_model=List[s.ProjectOut])
def list_projects(parent_id: Optional[int] = Query(None, alias="parentId"), ctx: AppContext = Ctx):
    return [s.out(s.ProjectOut, p) for p in ctx.projects.list_projects(parent_id)]


@router.get("/projects/tree", response_model=List[s.ProjectTreeOut])
def project_tree(ctx: AppContext = Ctx):
    return [_project_node(n) for n in ctx.projects.tree()]


@router.post("/projects", response_model=s.ProjectOut, status_code=201)
def create_project(body: s.ProjectCreate, ctx: AppContext = Ctx):
    return s.out(s.ProjectOut, ctx.projects.create_project(user_id=body.user_id, **body.fields()))


@router.get("/projects/{project_id}", response_model=s.ProjectOut)
def get_project(project_id: int, ctx: AppContext = Ctx):
    return s.out(s.ProjectOut, ctx.projects.get_project(project_id))


@router.patch("/projects/{project_id}", response_model=s.ProjectOut)
def update_project(project_id: int, body: s.ProjectUpdate, ctx: AppContext = Ctx):
    return s.out(s.ProjectOut, ctx.projects.update_project(project_id, user_id=body.user_id, **body.fields()))


@router.delete("/projects/{project_id}", status_code=204, response_class=Response)
def delete_project(project_id: int, user_id: Optional[int] = Query(None, alias="userId"), ctx: AppContext = Ctx):
    return _deleted(ctx.projects.delete_project(project_id, user_id=user_id), "project", project_id)


@router.get("/projects/{project_id}/summary", response_model=s.StatsOut)
def project_summary(project_id: int, ctx: AppContext = Ctx):
    ctx.projects.get_project(project_id)
    return s.StatsOut.model_validate(ctx.dashboard.project_summary(project_id).as_dict())


# ---- tasks ------------------------------------------------------------------

@router.get("/tasks", response_model=List[s.TaskOut])
def list_tasks(
    project_id: Optional[int] = Query(None, alias="projectId"),
    parent_task_id: Optional[int] = Query(None, alias="parentTaskId"),
    ctx: AppContext = Ctx,
):
    tasks = ctx.tasks.list_tasks(project_id=project_id, parent_task_id=parent_task_id)
    return [s.out(s.TaskOut, t) for t in tasks]


@router.get("/tasks/tree", response_model=List[s.TaskTreeOut])
def task_tree(project_id: Optional[int] = Query(None, alias="projectId"), ctx: AppContext = Ctx):
    return [_task_node(n) for n in ctx.tasks.tree(project_id)]


@router.post("/tasks", response_model=s.TaskOut, status_code=201)
def create_task(body: s.TaskCreate, ctx: AppContext = Ctx):
    return s.out(s.TaskOut, ctx.tasks.create_task(user_id=body.user_id, **body.fields()))


@router.get("/tasks/{task_id}", response_model=s.TaskOut)
def get_task(task_id: int, ctx: AppContext = Ctx):
    return s.out(s.TaskOut, ctx.tasks.get_task(task_id))


@router.patch("/tasks/{task_id}", response_model=s.TaskOut)
def update_task(task_id: int, body: s.TaskUpdate, ctx: AppContext = Ctx):
    return s.out(s.TaskOut, ctx.tasks.update_task(task_id, user_id=body.user_id, **body.fields()))


@router.patch("/tasks/{task_id}/status", response_model=s.TaskOut)
def change_task_status(task_id: int, body: s.StatusChangeBody, ctx: AppContext = Ctx):
    res = ctx.tasks.change_status(StatusChangeRequest(task_id, body.status, body.user_id))
    if res.ok:
        return s.out(s.TaskOut, res.task)
    if res.code == "entity_not_found":
        raise NotFoundError("task", task_id)
    field = "userId" if res.code == "invalid_user" else "status"
    raise ValidationError.for_field(field, res.message)


@router.delete("/tasks/{task_id}", status_code=204, response_class=Response)
def delete_task(task_id: int, user_id: Optional[int] = Query(None, alias="userId"), ctx: AppContext = Ctx):
    return _deleted(ctx.tasks.delete_task(task_id, user_id=user_id), "task", task_id)


# ---- activities & dashboard -------------------------------------------------

@router.get("/activities/recent", response_model=List[s.RecentActivityOut])
def recent_activities(limit: int = Query(10, ge=1, le=100), ctx: AppContext = Ctx):
    return [_enriched(ctx, a) for a in ctx.storage.activities.list_recent_activities(limit)]


@router.get("/dashboard/stats", response_model=s.StatsOut)
def dashboard_stats(ctx: AppContext = Ctx):
    return s.StatsOut.model_validate(ctx.dashboard.stats().as_dict())


@router.get("/dashboard/due-soon", response_model=List[s.TaskWithAssigneeOut])
def due_soon(ctx: AppContext = Ctx):
    return [_with_assignee(ctx, t) for t in ctx.dashboard.due_soon()]


@router.get("/dashboard/overdue", response_model=List[s.TaskWithAssigneeOut])
def overdue(ctx: AppContext = Ctx):
    return [_with_assignee(ctx, t) for t in ctx.dashboard.overdue()]
