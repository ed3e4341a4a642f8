from __future__ import annotations

import logging
from typing import List, Optional, Union

from ...domain.errors import NotFoundError, ValidationError
from ...domain.models import Task, TaskStatus
from ...domain.ports.persistence import TaskStore

logger = logging.getLogger(__name__)


class TaskService:
    """Owner-scoped CRUD over tasks.

    Every call takes the caller's user id. A task owned by someone else is
    reported exactly like a task that does not exist.
    """

    def __init__(self, tasks: TaskStore) -> None:
        self._tasks = tasks

    def list_tasks(self, owner_id: str) -> List[Task]:
        return self._tasks.get_tasks(owner_id)

    def get_task(self, owner_id: str, task_id: str) -> Task:
        task = self._tasks.get_task(owner_id, task_id)
        if task is None:
            raise NotFoundError("Task not found")
        return task

    def create_task(
        self,
        owner_id: str,
        title: Optional[str],
        description: Optional[str] = None,
        status: Union[TaskStatus, str, None] = TaskStatus.PENDING,
    ) -> Task:
        clean_title = self._clean_title(title)
        clean_status = self._coerce_status(status) if status is not None else TaskStatus.PENDING
        task = self._tasks.create_task(
            owner_id=owner_id,
            title=clean_title,
            description=description,
            status=clean_status,
        )
        logger.debug("Task %s created for user %s", task.id, owner_id)
        return task

    def update_task(
        self,
        owner_id: str,
        task_id: str,
        *,
        title: Optional[str] = None,
        description: Optional[str] = None,
        status: Union[TaskStatus, str, None] = None,
    ) -> Task:
        """Apply only the supplied fields. Concurrent updates are last-write-wins."""
        clean_title = self._clean_title(title) if title is not None else None
        clean_status = self._coerce_status(status) if status is not None else None
        updated = self._tasks.update_task(
            owner_id,
            task_id,
            title=clean_title,
            description=description,
            status=clean_status,
        )
        if updated is None:
            raise NotFoundError("Task not found")
        return updated

    def toggle_task(self, owner_id: str, task_id: str) -> Task:
        task = self.get_task(owner_id, task_id)
        return self.update_task(owner_id, task_id, status=task.status.toggled())

    def delete_task(self, owner_id: str, task_id: str) -> None:
        if not self._tasks.delete_task(owner_id, task_id):
            raise NotFoundError("Task not found")
        logger.debug("Task %s deleted for user %s", task_id, owner_id)

    @staticmethod
    def _clean_title(title: Optional[str]) -> str:
        clean = (title or "").strip()
        if not clean:
            raise ValidationError("Title is required")
        return clean

    @staticmethod
    def _coerce_status(status: Union[TaskStatus, str]) -> TaskStatus:
        try:
            return TaskStatus(status)
        except ValueError as exc:
            allowed = ", ".join(item.value for item in TaskStatus)
            raise ValidationError(f"Status must be one of: {allowed}") from exc
