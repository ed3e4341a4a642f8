from __future__ import annotations

from typing import Any, Dict, List

from fastapi import APIRouter, Depends, HTTPException, status

from ....application.services.task_service import TaskService
from ....core.dependencies import get_task_service
from ....domain.errors import NotFoundError, ValidationError
from ....domain.models import Task
from ...api.dependencies import require_user_id
from ...api.schemas.tasks import TaskCreatePayload, TaskUpdatePayload

router = APIRouter(prefix="/api/tasks", tags=["Tasks"])


@router.get("")
def list_tasks(
    user_id: str = Depends(require_user_id),
    service: TaskService = Depends(get_task_service),
) -> List[Dict[str, Any]]:
    return [_serialize_task(task) for task in service.list_tasks(user_id)]


@router.post("", status_code=status.HTTP_201_CREATED)
def create_task(
    payload: TaskCreatePayload,
    user_id: str = Depends(require_user_id),
    service: TaskService = Depends(get_task_service),
) -> Dict[str, Any]:
    try:
        task = service.create_task(
            user_id,
            title=payload.title,
            description=payload.description,
            status=payload.status,
        )
    except ValidationError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    return _serialize_task(task)


@router.put("/{task_id}")
def update_task(
    task_id: str,
    payload: TaskUpdatePayload,
    user_id: str = Depends(require_user_id),
    service: TaskService = Depends(get_task_service),
) -> Dict[str, Any]:
    fields = payload.model_dump(exclude_unset=True)
    try:
        task = service.update_task(user_id, task_id, **fields)
    except ValidationError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    except NotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    return _serialize_task(task)


@router.post("/{task_id}/toggle")
def toggle_task(
    task_id: str,
    user_id: str = Depends(require_user_id),
    service: TaskService = Depends(get_task_service),
) -> Dict[str, Any]:
    try:
        task = service.toggle_task(user_id, task_id)
    except NotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    return _serialize_task(task)


@router.delete("/{task_id}")
def delete_task(
    task_id: str,
    user_id: str = Depends(require_user_id),
    service: TaskService = Depends(get_task_service),
) -> Dict[str, Any]:
    try:
        service.delete_task(user_id, task_id)
    except NotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    return {"message": "Task deleted successfully"}


def _serialize_task(task: Task) -> Dict[str, Any]:
    return {
        "id": task.id,
        "title": task.title,
        "description": task.description,
        "status": task.status.value,
        "owner_id": task.owner_id,
        "created_at": task.created_at.replace(microsecond=0).isoformat(),
        "updated_at": task.updated_at.replace(microsecond=0).isoformat(),
    }
