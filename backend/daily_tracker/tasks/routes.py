"""Task routes."""

import logging
from datetime import timedelta

from fastapi import APIRouter, Depends, Response
from fastapi.responses import JSONResponse

from ..config import settings
from ..dependencies import get_broadcaster, get_current_user_id, get_store
from ..realtime.broadcaster import Broadcaster
from ..records import to_wire
from ..storage import RecordStore
from .schemas import TaskCreate, TaskUpdate
from .service import find_duplicate, recent_tasks

logger = logging.getLogger(__name__)

router = APIRouter(tags=["tasks"])


def _window() -> timedelta:
    return timedelta(days=settings.task_duplicate_window_days)


def _duplicate_response() -> JSONResponse:
    return JSONResponse(
        {"error": f"Task with this URL already exists in the last {settings.task_duplicate_window_days} days"},
        status_code=400,
    )


@router.get("/tasks")
def list_tasks(store: RecordStore = Depends(get_store), user_id: str = Depends(get_current_user_id)):
    return [to_wire(task) for task in recent_tasks(store, user_id, _window())]


@router.post("/tasks")
def create_task(
    body: TaskCreate,
    store: RecordStore = Depends(get_store),
    broadcaster: Broadcaster = Depends(get_broadcaster),
    user_id: str = Depends(get_current_user_id),
):
    if find_duplicate(store, user_id, body.url, _window()):
        logger.info("Duplicate task URL rejected for user=%s", user_id)
        return _duplicate_response()
    task = to_wire(store.tasks.create(body.model_copy(update={"user_id": user_id})))
    broadcaster.publish("task:created", task)
    return task


@router.put("/tasks/{task_id}")
@router.patch("/tasks/{task_id}")
def update_task(
    task_id: str,
    body: TaskUpdate,
    store: RecordStore = Depends(get_store),
    broadcaster: Broadcaster = Depends(get_broadcaster),
    user_id: str = Depends(get_current_user_id),
):
    if store.tasks.get_owned(task_id, user_id) is None:
        return JSONResponse({"error": "Task not found"}, status_code=404)
    if "url" in body.model_fields_set and find_duplicate(store, user_id, body.url, _window(), exclude_id=task_id):
        logger.info("Duplicate task URL rejected on update for user=%s", user_id)
        return _duplicate_response()
    updated = store.tasks.update(task_id, body.model_dump(exclude_unset=True))
    if updated is None:
        return JSONResponse({"error": "Task not found"}, status_code=404)
    task = to_wire(updated)
    broadcaster.publish("task:updated", task)
    return task


@router.delete("/tasks/{task_id}")
def delete_task(
    task_id: str,
    store: RecordStore = Depends(get_store),
    broadcaster: Broadcaster = Depends(get_broadcaster),
    user_id: str = Depends(get_current_user_id),
):
    if store.tasks.get_owned(task_id, user_id) is None or not store.tasks.delete(task_id):
        return JSONResponse({"error": "Task not found"}, status_code=404)
    broadcaster.publish("task:deleted", {"id": task_id})
    return Response(status_code=204)
