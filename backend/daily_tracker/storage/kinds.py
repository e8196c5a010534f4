"""Registry of the user-owned entity kinds the store serves."""

from dataclasses import dataclass

from pydantic import BaseModel

from ..database.base import Base
from ..drive.models import Folder, StoredFile
from ..drive.schemas import FileRecord, FolderRecord
from ..jobs.models import Job
from ..jobs.schemas import JobRecord
from ..notes.models import Note
from ..notes.schemas import NoteRecord
from ..tasks.models import Task
from ..tasks.schemas import TaskRecord


@dataclass(frozen=True)
class EntityKind:
    table: str
    model: type[Base]
    record: type[BaseModel]
    soft_delete: bool = False
    cascade_with_user: bool = True


JOBS = EntityKind("jobs", Job, JobRecord)
TASKS = EntityKind("tasks", Task, TaskRecord)
NOTES = EntityKind("notes", Note, NoteRecord)
FOLDERS = EntityKind("folders", Folder, FolderRecord)
FILES = EntityKind("files", StoredFile, FileRecord, soft_delete=True)

ENTITY_KINDS: tuple[EntityKind, ...] = (JOBS, TASKS, NOTES, FOLDERS, FILES)

# Fields an update never touches.
IMMUTABLE_FIELDS = frozenset({"id", "user_id", "created_at"})
