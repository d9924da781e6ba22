"""Find every file and directory that belongs to a session.

Claude Code spreads a session over several subtrees of the root directory.
The resolver only looks; deletion happens in the executor.
"""

import json
import logging
from glob import escape
from pathlib import Path

from claude_chats.config import SESSION_SUFFIX, ClaudePaths

logger = logging.getLogger(__name__)

LOCAL_MEMORY_FILE = "memory-local.md"


def _is_plain_name(name: str) -> bool:
    """True if `name` is a single path component, so joining it stays inside its parent."""
    return name not in (".", "..") and Path(name).name == name and "\\" not in name


def _iter_json_records(path: Path):
    """Yield every line of a session file that decodes to a JSON object."""
    with path.open(encoding="utf-8", errors="replace") as f:
        for line in f:
            try:
                record = json.loads(line)
            except (ValueError, RecursionError):
                # Oversized integers and deep nesting fail outside JSONDecodeError.
                continue
            if isinstance(record, dict):
                yield record


def extract_slug(path: Path) -> str:
    """First non-empty slug in the whole file, or ""."""
    try:
        for record in _iter_json_records(path):
            slug = record.get("slug")
            if isinstance(slug, str) and slug and _is_plain_name(slug):
                return slug
    except OSError as exc:
        logger.debug("Cannot read %s for slug: %s", path, exc)
    return ""


def extract_agent_ids(path: Path) -> list[str]:
    """Distinct agent ids mentioned in the file, in first-seen order."""
    agent_ids: dict[str, None] = {}
    try:
        for record in _iter_json_records(path):
            agent_id = record.get("agent_id")
            if isinstance(agent_id, str) and agent_id and _is_plain_name(agent_id):
                agent_ids.setdefault(agent_id)
    except OSError as exc:
        logger.debug("Cannot read %s for agent ids: %s", path, exc)
    return list(agent_ids)


def resolve_related_files(paths: ClaudePaths, uuid: str) -> list[Path]:
    """Paths to remove when deleting session `uuid`. Only existing paths are returned."""
    found: dict[Path, None] = {}
    pattern = escape(uuid)

    primary_files = sorted(paths.projects.glob(f"*/{pattern}{SESSION_SUFFIX}"))
    for record_file in primary_files:
        found.setdefault(record_file)

        # Subagent transcripts and cached tool output live beside the record.
        chat_dir = record_file.with_name(uuid)
        if chat_dir.exists():
            found.setdefault(chat_dir)
        tool_results = chat_dir / "tool-results"
        if tool_results.exists():
            found.setdefault(tool_results)

    # Slug and agent ids come from the last match when a uuid repeats across projects.
    record_file = primary_files[-1] if primary_files else None

    if record_file is not None:
        slug = extract_slug(record_file)
        if slug:
            plan = paths.plans / f"{slug}.md"
            if plan.exists():
                found.setdefault(plan)

    debug_log = paths.debug / f"{uuid}.txt"
    if debug_log.exists():
        found.setdefault(debug_log)

    for todo in sorted(paths.todos.glob(f"{pattern}*.json")):
        found.setdefault(todo)

    for directory in (paths.session_env / uuid, paths.file_history / uuid):
        if directory.exists():
            found.setdefault(directory)

    if record_file is not None:
        # Project and user scope memories can be shared with other sessions.
        for agent_id in extract_agent_ids(record_file):
            memory = paths.agents / agent_id / LOCAL_MEMORY_FILE
            if memory.exists():
                found.setdefault(memory)

    return list(found)
