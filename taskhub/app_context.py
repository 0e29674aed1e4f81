# taskhub application context
# Rev 0.2.0

from __future__ import annotations
from dataclasses import dataclass
from datetime import timedelta
from typing import Any, Dict, Optional

from .repositories.base import Storage
from .repositories.memory_repository import InMemoryStorage
from .repositories.sqlite_storage import SQLiteStorage
from .services.activity_recorder import ActivityRecorder
from .services.dashboard import DashboardService
from .services.hierarchy import HierarchyService
from .services.project_service import ProjectService
from .services.status_rules import policy_named
from .services.task_service import TaskService
from .services.user_service import UserService
from .utils.clock import Clock, utc_now
from .utils.config import MEMORY_STORE, load_settings
from .utils.logging_setup import get_logger


def build_storage(settings: Dict[str, Any], clock: Clock = utc_now) -> Storage:
    """':memory-store:' -> InMemoryStorage; anything else is a SQLite path."""
    target = settings.get("database") or MEMORY_STORE
    if target == MEMORY_STORE:
        return InMemoryStorage(clock)
    return SQLiteStorage.open(target, clock)


@dataclass
class AppContext:
    """Central container for shared app resources."""
    settings: Dict[str, Any]
    storage: Storage
    users: UserService
    projects: ProjectService
    tasks: TaskService
    dashboard: DashboardService
    hierarchy: HierarchyService
    recorder: ActivityRecorder
    clock: Clock = utc_now

    @classmethod
    def create(cls, settings: Optional[Dict[str, Any]] = None, *, storage: Optional[Storage] = None,
               clock: Clock = utc_now) -> "AppContext":
        """Open storage and wire the services from settings."""
        log = get_logger("AppContext")
        settings = settings if settings is not None else load_settings()
        storage = storage if storage is not None else build_storage(settings, clock)

        hierarchy = HierarchyService(storage, cascade_subprojects=bool(settings.get("cascade_subprojects")))
        recorder = ActivityRecorder(storage, mode=settings.get("activity_logging", "transactional"))
        ctx = cls(
            settings=settings,
            storage=storage,
            users=UserService(storage),
            projects=ProjectService(storage, hierarchy, recorder),
            tasks=TaskService(storage, hierarchy, recorder,
                              policy=policy_named(settings.get("status_policy", "permissive"))),
            dashboard=DashboardService(storage, clock=clock,
                                       due_soon_window=timedelta(days=settings.get("due_soon_days", 7))),
            hierarchy=hierarchy,
            recorder=recorder,
            clock=clock,
        )
        log.info(
            "AppContext initialized with database=%s policy=%s activity=%s cascade=%s",
            settings.get("database"), ctx.tasks.policy.name, recorder.mode, hierarchy.cascade_subprojects,
        )
        return ctx

    def close(self) -> None:
        self.storage.close()
