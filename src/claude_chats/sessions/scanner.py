"""Discover session record files under the projects directory."""

import logging
from datetime import datetime
from pathlib import Path

from claude_chats.config import AGENT_PREFIX, SESSION_SUFFIX, ClaudePaths
from claude_chats.sessions.metadata import count_records, extract_title, extract_version
from claude_chats.sessions.models import Session

logger = logging.getLogger(__name__)

TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"
UNKNOWN_TIMESTAMP = "Unknown"


def format_timestamp(path: Path) -> str:
    """File modification time with second granularity, in local time."""
    try:
        mtime = path.stat().st_mtime
    except OSError:
        return UNKNOWN_TIMESTAMP
    return datetime.fromtimestamp(mtime).strftime(TIMESTAMP_FORMAT)


def load_session(path: Path) -> Session:
    """Build a Session from a record file inside a project directory."""
    return Session(
        uuid=path.name[: -len(SESSION_SUFFIX)],
        title=extract_title(path),
        timestamp=format_timestamp(path),
        project=path.parent.name,
        version=extract_version(path),
        record_count=count_records(path),
        path=path,
    )


def iter_session_files(project_dir: Path) -> list[Path]:
    """Session record files directly inside one project, agent transcripts excluded."""
    files = []
    for path in sorted(project_dir.glob(f"*{SESSION_SUFFIX}")):
        if path.name.startswith(AGENT_PREFIX):
            continue
        files.append(path)
    return files


def scan_sessions(paths: ClaudePaths) -> list[Session]:
    """All sessions across all projects, newest first.

    A missing or unreadable projects directory yields an empty list.
    """
    try:
        project_dirs = sorted(p for p in paths.projects.iterdir() if p.is_dir())
    except OSError as exc:
        logger.debug("No projects directory at %s: %s", paths.projects, exc)
        return []

    sessions: list[Session] = []
    for project_dir in project_dirs:
        try:
            files = iter_session_files(project_dir)
        except OSError as exc:
            logger.warning("Skipping unreadable project %s: %s", project_dir, exc)
            continue
        sessions.extend(load_session(f) for f in files)

    sessions.sort(key=lambda s: s.timestamp, reverse=True)
    logger.debug("Found %d sessions under %s", len(sessions), paths.projects)
    return sessions
