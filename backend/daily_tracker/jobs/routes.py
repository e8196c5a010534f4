"""Job routes."""

from fastapi import APIRouter, Depends, Response
from fastapi.responses import JSONResponse

from ..dependencies import get_broadcaster, get_current_user_id, get_store
from ..realtime.broadcaster import Broadcaster
from ..records import to_wire
from ..storage import RecordStore
from .schemas import JobCreate, JobUpdate

router = APIRouter(tags=["jobs"])


@router.get("/jobs")
def list_jobs(store: RecordStore = Depends(get_store), user_id: str = Depends(get_current_user_id)):
    return [to_wire(job) for job in store.jobs.list_for_user(user_id)]


@router.post("/jobs")
def create_job(
    body: JobCreate,
    store: RecordStore = Depends(get_store),
    broadcaster: Broadcaster = Depends(get_broadcaster),
    user_id: str = Depends(get_current_user_id),
):
    job = to_wire(store.jobs.create(body.model_copy(update={"user_id": user_id})))
    broadcaster.publish("job:created", job)
    return job


@router.put("/jobs/{job_id}")
def update_job(
    job_id: str,
    body: JobUpdate,
    store: RecordStore = Depends(get_store),
    broadcaster: Broadcaster = Depends(get_broadcaster),
    user_id: str = Depends(get_current_user_id),
):
    if store.jobs.get_owned(job_id, user_id) is None:
        return JSONResponse({"error": "Job not found"}, status_code=404)
    updated = store.jobs.update(job_id, body.model_dump(exclude_unset=True))
    if updated is None:
        return JSONResponse({"error": "Job not found"}, status_code=404)
    job = to_wire(updated)
    broadcaster.publish("job:updated", job)
    return job


@router.delete("/jobs/{job_id}")
def delete_job(
    job_id: str,
    store: RecordStore = Depends(get_store),
    broadcaster: Broadcaster = Depends(get_broadcaster),
    user_id: str = Depends(get_current_user_id),
):
    if store.jobs.get_owned(job_id, user_id) is None or not store.jobs.delete(job_id):
        return JSONResponse({"error": "Job not found"}, status_code=404)
    broadcaster.publish("job:deleted", {"id": job_id})
    return Response(status_code=204)
