"""Shared fixtures: a throwaway Claude root directory."""

import json
import os

import pytest

from claude_chats.config import ClaudePaths

SNAPSHOT = {"type": "file-history-snapshot", "messageId": "m0", "snapshot": {}}


@pytest.fixture
def paths(tmp_path):
    root = tmp_path / ".claude"
    (root / "projects").mkdir(parents=True)
    return ClaudePaths(root)


@pytest.fixture
def write_session(paths):
    """Create projects/<project>/<uuid>.jsonl from a list of records."""

    def _write(uuid, project="proj-A", records=None, mtime=None):
        project_dir = paths.projects / project
        project_dir.mkdir(parents=True, exist_ok=True)
        if records is None:
            records = [SNAPSHOT, {"type": "user", "version": "2.1.30", "message": {"content": "Hello"}}]
        lines = [r if isinstance(r, str) else json.dumps(r) for r in records]
        path = project_dir / f"{uuid}.jsonl"
        path.write_text("\n".join(lines) + "\n")
        if mtime is not None:
            os.utime(path, (mtime, mtime))
        return path

    return _write
