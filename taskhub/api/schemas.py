"""
Request and response bodies for the REST API.

Wire format is camelCase; models are populated from entity dataclasses by
field name. Request bodies type enum members, ranges and timestamps so bad
input is rejected before it reaches a service; the services repeat those
checks for direct callers and own the cross-record rules.
"""
from __future__ import annotations
from dataclasses import asdict
from datetime import datetime
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from taskhub.models.types import ActivityType, ProjectStatus, TaskPriority, TaskStatus


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ---- requests ---------------------------------------------------------------

class MutationBody(CamelModel):
    user_id: Optional[int] = Field(None, description="Actor recorded in the activity feed")

    def fields(self) -> dict:
        """Explicitly sent fields, snake_case, without the actor."""
        data = self.model_dump(exclude_unset=True)
        data.pop("user_id", None)
        return data


class UserCreate(CamelModel):
    username: str
    full_name: str
    initials: Optional[str] = None
    avatar_color: Optional[str] = None
    role: Optional[str] = None
    email: Optional[str] = None


class UserUpdate(CamelModel):
    username: Optional[str] = None
    full_name: Optional[str] = None
    initials: Optional[str] = None
    avatar_color: Optional[str] = None
    role: Optional[str] = None
    email: Optional[str] = None


class ProjectCreate(MutationBody):
    name: str
    description: Optional[str] = None
    status: Optional[ProjectStatus] = None
    parent_id: Optional[int] = None
    is_public: Optional[bool] = None
    icon: Optional[str] = None


class ProjectUpdate(MutationBody):
    name: Optional[str] = None
    description: Optional[str] = None
    status: Optional[ProjectStatus] = None
    parent_id: Optional[int] = None
    is_public: Optional[bool] = None
    icon: Optional[str] = None


class TaskCreate(MutationBody):
    title: str
    description: Optional[str] = None
    status: Optional[TaskStatus] = None
    priority: Optional[TaskPriority] = None
    progress: Optional[int] = Field(None, ge=0, le=100)
    estimated_hours: Optional[int] = Field(None, ge=0)
    spent_hours: Optional[int] = Field(None, ge=0)
    due_date: Optional[datetime] = Field(None, description="ISO date or datetime, naive means UTC")
    start_date: Optional[datetime] = Field(None, description="ISO date or datetime, naive means UTC")
    project_id: Optional[int] = None
    assignee_id: Optional[int] = None
    reporter_id: Optional[int] = None
    parent_task_id: Optional[int] = None


class TaskUpdate(MutationBody):
    title: Optional[str] = None
    description: Optional[str] = None
    status: Optional[TaskStatus] = None
    priority: Optional[TaskPriority] = None
    progress: Optional[int] = Field(None, ge=0, le=100)
    estimated_hours: Optional[int] = Field(None, ge=0)
    spent_hours: Optional[int] = Field(None, ge=0)
    due_date: Optional[datetime] = None
    start_date: Optional[datetime] = None
    project_id: Optional[int] = None
    assignee_id: Optional[int] = None
    reporter_id: Optional[int] = None
    parent_task_id: Optional[int] = None


class StatusChangeBody(CamelModel):
    # left as text: an unknown task answers 404 before the status is judged
    status: str
    user_id: int


# ---- responses --------------------------------------------------------------

class UserOut(CamelModel):
    id: int
    username: str
    full_name: str
    initials: str
    avatar_color: str
    role: Optional[str] = None
    email: Optional[str] = None


class ProjectOut(CamelModel):
    id: int
    name: str
    description: Optional[str] = None
    status: ProjectStatus
    parent_id: Optional[int] = None
    is_public: bool
    icon: Optional[str] = None
    created_at: datetime
    updated_at: datetime


class ProjectTreeOut(ProjectOut):
    children: List["ProjectTreeOut"] = Field(default_factory=list)


class TaskOut(CamelModel):
    id: int
    title: str
    description: Optional[str] = None
    status: TaskStatus
    priority: TaskPriority
    progress: int
    estimated_hours: Optional[int] = None
    spent_hours: int
    due_date: Optional[datetime] = None
    start_date: Optional[datetime] = None
    project_id: Optional[int] = None
    assignee_id: Optional[int] = None
    reporter_id: Optional[int] = None
    parent_task_id: Optional[int] = None
    created_at: datetime
    updated_at: datetime


class TaskWithAssigneeOut(TaskOut):
    assignee: Optional[UserOut] = None


class TaskTreeOut(TaskOut):
    children: List["TaskTreeOut"] = Field(default_factory=list)


class ActivityOut(CamelModel):
    id: int
    type: ActivityType
    description: str
    user_id: Optional[int] = None
    task_id: Optional[int] = None
    project_id: Optional[int] = None
    created_at: datetime


class RecentActivityOut(ActivityOut):
    user: Optional[UserOut] = None
    task: Optional[TaskOut] = None


class StatsOut(CamelModel):
    total: int
    in_progress: int
    completed: int
    overdue: int
    overdue_by_due_date: int


class HealthOut(CamelModel):
    status: str
    storage: str


ProjectTreeOut.model_rebuild()
TaskTreeOut.model_rebuild()


def out(model: type, entity: Any, **extra: Any):
    """Build a response model from an entity dataclass plus joined extras."""
    data = asdict(entity)
    data.update(extra)
    return model.model_validate(data)


def maybe(entity: Any) -> Optional[dict]:
    return asdict(entity) if entity is not None else None
