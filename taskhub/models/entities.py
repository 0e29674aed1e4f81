# Rev 0.2.0
"""Entities for users, projects, tasks and the activity feed.

Records are treated as values: repositories hand out copies and build
updated records with dataclasses.replace() instead of mutating in place.
"""
from __future__ import annotations
from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional

from .types import ActivityType, ProjectStatus, TaskPriority, TaskStatus


@dataclass
class User:
    id: int
    username: str
    full_name: str
    initials: str
    avatar_color: str
    role: Optional[str] = None
    email: Optional[str] = None


@dataclass
class Project:
    id: int
    name: str
    created_at: datetime
    updated_at: datetime
    description: Optional[str] = None
    status: ProjectStatus = ProjectStatus.ACTIVE
    parent_id: Optional[int] = None   # forest: None -> root
    is_public: bool = True
    icon: Optional[str] = None


@dataclass
class Task:
    id: int
    title: str
    created_at: datetime
    updated_at: datetime
    description: Optional[str] = None
    status: TaskStatus = TaskStatus.NEW
    priority: TaskPriority = TaskPriority.MEDIUM
    progress: int = 0                 # 0..100
    estimated_hours: Optional[int] = None
    spent_hours: int = 0
    due_date: Optional[datetime] = None
    start_date: Optional[datetime] = None
    project_id: Optional[int] = None
    assignee_id: Optional[int] = None
    reporter_id: Optional[int] = None
    parent_task_id: Optional[int] = None


@dataclass(frozen=True)
class Activity:
    id: int
    type: ActivityType
    description: str
    created_at: datetime
    user_id: Optional[int] = None
    task_id: Optional[int] = None
    project_id: Optional[int] = None


@dataclass
class ProjectNode:
    project: Project
    children: List["ProjectNode"] = field(default_factory=list)


@dataclass
class TaskNode:
    task: Task
    children: List["TaskNode"] = field(default_factory=list)


# Fields callers may pass to create_*/update_*; ids and timestamps are owned
# by the store.
USER_FIELDS = ("username", "full_name", "initials", "avatar_color", "role", "email")
PROJECT_FIELDS = ("name", "description", "status", "parent_id", "is_public", "icon")
TASK_FIELDS = (
    "title", "description", "status", "priority", "progress",
    "estimated_hours", "spent_hours", "due_date", "start_date",
    "project_id", "assignee_id", "reporter_id", "parent_task_id",
)
