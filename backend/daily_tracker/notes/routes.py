"""Note routes."""

from fastapi import APIRouter, Depends, Response
from fastapi.responses import JSONResponse

from ..dependencies import get_broadcaster, get_current_user_id, get_store
from ..realtime.broadcaster import Broadcaster
from ..records import to_wire
from ..storage import RecordStore
from .schemas import NoteCreate, NoteUpdate

router = APIRouter(tags=["notes"])


@router.get("/notes")
def list_notes(store: RecordStore = Depends(get_store), user_id: str = Depends(get_current_user_id)):
    return [to_wire(note) for note in store.notes.list_for_user(user_id)]


@router.post("/notes")
def create_note(
    body: NoteCreate,
    store: RecordStore = Depends(get_store),
    broadcaster: Broadcaster = Depends(get_broadcaster),
    user_id: str = Depends(get_current_user_id),
):
    note = to_wire(store.notes.create(body.model_copy(update={"user_id": user_id})))
    broadcaster.publish("note:created", note)
    return note


@router.patch("/notes/{note_id}")
def update_note(
    note_id: str,
    body: NoteUpdate,
    store: RecordStore = Depends(get_store),
    broadcaster: Broadcaster = Depends(get_broadcaster),
    user_id: str = Depends(get_current_user_id),
):
    if store.notes.get_owned(note_id, user_id) is None:
        return JSONResponse({"error": "Note not found"}, status_code=404)
    updated = store.notes.update(note_id, body.model_dump(exclude_unset=True))
    if updated is None:
        return JSONResponse({"error": "Note not found"}, status_code=404)
    note = to_wire(updated)
    broadcaster.publish("note:updated", note)
    return note


@router.delete("/notes/{note_id}")
def delete_note(
    note_id: str,
    store: RecordStore = Depends(get_store),
    broadcaster: Broadcaster = Depends(get_broadcaster),
    user_id: str = Depends(get_current_user_id),
):
    if store.notes.get_owned(note_id, user_id) is None or not store.notes.delete(note_id):
        return JSONResponse({"error": "Note not found"}, status_code=404)
    broadcaster.publish("note:deleted", {"id": note_id})
    return Response(status_code=204)
