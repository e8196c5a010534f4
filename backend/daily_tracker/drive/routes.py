"""File and folder routes."""

import logging
from pathlib import Path

from fastapi import APIRouter, Depends, File, Form, UploadFile
from fastapi.responses import FileResponse, JSONResponse

from ..config import settings
from ..dependencies import get_broadcaster, get_current_user_id, get_store
from ..realtime.broadcaster import Broadcaster
from ..records import to_wire
from ..storage import RecordStore
from .schemas import FileCreate, FolderCreate, RenameRequest
from .service import UploadRejected, save_upload

logger = logging.getLogger(__name__)

router = APIRouter(tags=["drive"])

_FILE_NOT_FOUND = {"error": "File not found"}
_FOLDER_NOT_FOUND = {"error": "Folder not found"}


# ── Files ──────────────────────────────────────────────────────────────


@router.post("/files/upload")
def upload_file(
    file: UploadFile = File(...),
    folder_id: str | None = Form(None, alias="folderId"),
    store: RecordStore = Depends(get_store),
    broadcaster: Broadcaster = Depends(get_broadcaster),
    user_id: str = Depends(get_current_user_id),
):
    data = file.file.read(settings.max_upload_bytes + 1)
    try:
        path = save_upload(
            settings.upload_dir, user_id, file.filename, file.content_type, data, settings.max_upload_bytes
        )
    except UploadRejected as exc:
        logger.info("Upload rejected for user=%s: %s", user_id, exc)
        return JSONResponse({"error": str(exc)}, status_code=exc.status_code)

    if folder_id and store.folders.get_owned(folder_id, user_id) is None:
        path.unlink(missing_ok=True)
        return JSONResponse(_FOLDER_NOT_FOUND, status_code=404)

    name = file.filename or path.name
    record = store.files.create(
        FileCreate(
            user_id=user_id,
            folder_id=folder_id or None,
            name=name,
            original_name=name,
            mime_type=file.content_type,
            size=str(len(data)),
            path=str(path),
        )
    )
    stored = to_wire(record)
    broadcaster.publish("file:created", stored)
    return stored


@router.get("/files")
def list_files(store: RecordStore = Depends(get_store), user_id: str = Depends(get_current_user_id)):
    return [to_wire(f) for f in store.files.list_for_user(user_id)]


@router.get("/files/{file_id}")
def get_file(file_id: str, store: RecordStore = Depends(get_store), user_id: str = Depends(get_current_user_id)):
    record = store.files.get_owned(file_id, user_id)
    if record is None:
        return JSONResponse(_FILE_NOT_FOUND, status_code=404)
    return to_wire(record)


@router.get("/files/{file_id}/download")
def download_file(
    file_id: str, store: RecordStore = Depends(get_store), user_id: str = Depends(get_current_user_id)
):
    record = store.files.get_owned(file_id, user_id)
    if record is None:
        return JSONResponse(_FILE_NOT_FOUND, status_code=404)
    path = Path(record.path)
    if not path.is_file():
        logger.error("File %s missing on disk at %s", file_id, path)
        return JSONResponse({"error": "File not found on disk"}, status_code=404)
    return FileResponse(
        path,
        media_type=record.mime_type,
        filename=record.name,
        content_disposition_type="inline",
        headers={"Cache-Control": "private, max-age=3600"},
    )


@router.patch("/files/{file_id}")
def rename_file(
    file_id: str,
    body: RenameRequest,
    store: RecordStore = Depends(get_store),
    broadcaster: Broadcaster = Depends(get_broadcaster),
    user_id: str = Depends(get_current_user_id),
):
    if store.files.get_owned(file_id, user_id) is None:
        return JSONResponse(_FILE_NOT_FOUND, status_code=404)
    updated = store.files.update(file_id, {"name": body.name, "original_name": body.name})
    if updated is None:
        return JSONResponse(_FILE_NOT_FOUND, status_code=404)
    stored = to_wire(updated)
    broadcaster.publish("file:updated", stored)
    return stored


@router.delete("/files/{file_id}")
def trash_file(
    file_id: str,
    store: RecordStore = Depends(get_store),
    broadcaster: Broadcaster = Depends(get_broadcaster),
    user_id: str = Depends(get_current_user_id),
):
    if store.files.get_owned(file_id, user_id) is None or not store.files.delete(file_id):
        return JSONResponse(_FILE_NOT_FOUND, status_code=404)
    broadcaster.publish("file:deleted", {"id": file_id})
    return {"success": True}


# ── Folders ────────────────────────────────────────────────────────────


@router.post("/folders")
def create_folder(
    body: FolderCreate,
    store: RecordStore = Depends(get_store),
    broadcaster: Broadcaster = Depends(get_broadcaster),
    user_id: str = Depends(get_current_user_id),
):
    if body.parent_id and store.folders.get_owned(body.parent_id, user_id) is None:
        return JSONResponse({"error": "Parent folder not found"}, status_code=404)
    folder = to_wire(store.folders.create(body.model_copy(update={"user_id": user_id})))
    broadcaster.publish("folder:created", folder)
    return folder


@router.get("/folders")
def list_folders(store: RecordStore = Depends(get_store), user_id: str = Depends(get_current_user_id)):
    return [to_wire(f) for f in store.folders.list_for_user(user_id)]


@router.patch("/folders/{folder_id}")
def rename_folder(
    folder_id: str,
    body: RenameRequest,
    store: RecordStore = Depends(get_store),
    broadcaster: Broadcaster = Depends(get_broadcaster),
    user_id: str = Depends(get_current_user_id),
):
    if store.folders.get_owned(folder_id, user_id) is None:
        return JSONResponse(_FOLDER_NOT_FOUND, status_code=404)
    updated = store.folders.update(folder_id, {"name": body.name})
    if updated is None:
        return JSONResponse(_FOLDER_NOT_FOUND, status_code=404)
    folder = to_wire(updated)
    broadcaster.publish("folder:updated", folder)
    return folder


@router.delete("/folders/{folder_id}")
def delete_folder(
    folder_id: str,
    store: RecordStore = Depends(get_store),
    broadcaster: Broadcaster = Depends(get_broadcaster),
    user_id: str = Depends(get_current_user_id),
):
    if store.folders.get_owned(folder_id, user_id) is None or not store.folders.delete(folder_id):
        return JSONResponse(_FOLDER_NOT_FOUND, status_code=404)
    broadcaster.publish("folder:deleted", {"id": folder_id})
    return {"success": True}
