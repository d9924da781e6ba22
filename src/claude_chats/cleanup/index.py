"""Keep per-project sessions-index.json manifests in step with deletions."""

import logging
from pathlib import Path

from pydantic import ValidationError

from claude_chats.config import INDEX_FILENAME, ClaudePaths
from claude_chats.sessions.models import SessionIndex

logger = logging.getLogger(__name__)


def iter_index_files(paths: ClaudePaths) -> list[Path]:
    try:
        project_dirs = sorted(p for p in paths.projects.iterdir() if p.is_dir())
    except FileNotFoundError:
        return []
    return [d / INDEX_FILENAME for d in project_dirs if (d / INDEX_FILENAME).is_file()]


def load_index(path: Path) -> SessionIndex | None:
    """Parse a manifest, or None if it can't be read or is malformed."""
    try:
        return SessionIndex.model_validate_json(path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError, ValidationError) as exc:
        logger.warning("Skipping unreadable index %s: %s", path, exc)
        return None


def remove_from_index(paths: ClaudePaths, uuid: str) -> bool:
    """Drop `uuid` from every project manifest.

    A manifest is only rewritten when an entry was actually removed. The
    rewrite is a plain overwrite; write errors propagate as OSError.
    Returns True if any manifest changed.
    """
    changed = False
    for index_path in iter_index_files(paths):
        index = load_index(index_path)
        if index is None:
            continue

        kept = [entry for entry in index.entries if entry.session_id != uuid]
        if len(kept) == len(index.entries):
            continue

        index.entries = kept
        index_path.write_text(index.to_json(), encoding="utf-8")
        logger.info("Removed %s from %s", uuid, index_path)
        changed = True
    return changed
