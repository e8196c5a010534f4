"""Task business logic: recent-task window and duplicate URL detection."""

from datetime import timedelta

from ..storage import RecordStore
from .schemas import TaskRecord

DUPLICATE_WINDOW = timedelta(days=5)


def normalize_url(url: str) -> str:
    """Case-insensitive comparison form of a URL, one trailing slash dropped."""
    url = url.strip().lower()
    return url[:-1] if url.endswith("/") else url


def recent_tasks(store: RecordStore, user_id: str, window: timedelta = DUPLICATE_WINDOW) -> list[TaskRecord]:
    """Tasks created within ``window`` of the store clock, newest first."""
    return store.tasks.list_since(user_id, store.now() - window)


def find_duplicate(
    store: RecordStore,
    user_id: str,
    url: str | None,
    window: timedelta = DUPLICATE_WINDOW,
    exclude_id: str | None = None,
) -> TaskRecord | None:
    """A recent task of the same user pointing at the same URL, if any.

    Older tasks never count, so the same posting can be tracked again once
    the window has passed. ``exclude_id`` skips the task being edited.
    """
    if not url:
        return None
    target = normalize_url(url)
    for task in recent_tasks(store, user_id, window):
        if task.id != exclude_id and task.url and normalize_url(task.url) == target:
            return task
    return None
