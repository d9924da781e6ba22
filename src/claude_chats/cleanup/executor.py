"""Delete a batch of sessions and everything that belongs to them."""

import logging
import shutil
from collections.abc import Iterable
from pathlib import Path

from claude_chats.cleanup.index import remove_from_index
from claude_chats.cleanup.resolver import resolve_related_files
from claude_chats.config import ClaudePaths
from claude_chats.sessions.models import Session

logger = logging.getLogger(__name__)


class DeletionError(Exception):
    """A batch deletion stopped at its first filesystem failure."""

    def __init__(self, message: str, completed: int = 0):
        super().__init__(message)
        self.completed = completed


def remove_path(path: Path) -> None:
    """Remove a file, symlink or directory tree. Missing paths are ignored."""
    try:
        if path.is_dir() and not path.is_symlink():
            shutil.rmtree(path)
        else:
            path.unlink()
    except FileNotFoundError:
        pass


def delete_session(paths: ClaudePaths, uuid: str) -> list[Path]:
    """Delete one session's related files and index entries. Returns what was removed."""
    try:
        related = resolve_related_files(paths, uuid)
    except OSError as exc:
        raise DeletionError(f"Failed to resolve files for {uuid}: {exc}") from exc
    for path in related:
        try:
            remove_path(path)
        except OSError as exc:
            raise DeletionError(f"Failed to delete {path}: {exc}") from exc

    try:
        remove_from_index(paths, uuid)
    except OSError as exc:
        raise DeletionError(f"Failed to update index: {exc}") from exc

    logger.info("Deleted session %s (%d paths)", uuid, len(related))
    return related


def delete_sessions(paths: ClaudePaths, sessions: Iterable[Session]) -> int:
    """Delete sessions in order, stopping at the first failure.

    Returns the number of sessions deleted. On failure raises DeletionError
    whose `completed` counts the sessions finished before the failing one.
    """
    count = 0
    for session in sessions:
        try:
            delete_session(paths, session.uuid)
        except DeletionError as exc:
            logger.error("Stopping batch after %d sessions: %s", count, exc)
            exc.completed = count
            raise
        count += 1
    return count
