"""Read display metadata out of a session record file.

A session file is newline-delimited JSON. The first line is a file-history
snapshot written by Claude Code, so message scanning starts at line 2.
Every function here is total: I/O and parse errors map to a sentinel value
instead of propagating, so one bad file never breaks the session list.
"""

import logging
from itertools import islice
from pathlib import Path
from typing import TextIO

from pydantic import ValidationError

from claude_chats.sessions.models import SessionRecord

logger = logging.getLogger(__name__)

ERROR_TITLE = "[Error opening file]"
NO_TITLE = "[No title]"

# Records examined for a title, counted after the snapshot line.
TITLE_SCAN_LIMIT = 100

# Paired tags that wrap machine-oriented content inside user messages.
SYSTEM_TAGS = (
    "local-command-caveat",
    "command-name",
    "command-message",
    "command-args",
    "local-command-stdout",
    "system-reminder",
)


def _strip_tag_pass(content: str, open_tag: str, close_tag: str) -> str:
    pieces: list[str] = []
    pos = 0
    while True:
        start = content.find(open_tag, pos)
        if start < 0:
            pieces.append(content[pos:])
            break
        pieces.append(content[pos:start])
        end = content.find(close_tag, start + len(open_tag))
        if end < 0:
            # Unterminated tag: everything after it is dropped.
            break
        pos = end + len(close_tag)
    return "".join(pieces)


def strip_tag(content: str, tag: str) -> str:
    """Remove every <tag>...</tag> span, delimiters included."""
    open_tag, close_tag = f"<{tag}>", f"</{tag}>"
    # Joining the remaining pieces can form a new opening tag, so repeat
    # until none is left. Each pass removes at least one opening tag.
    while open_tag in content:
        content = _strip_tag_pass(content, open_tag, close_tag)
    return content


def clean_system_tags(content: str) -> str:
    """Strip system tags and collapse whitespace.

    Returns "" when nothing human-readable is left, including content that
    still starts with "<" (some other markup we don't recognise).
    """
    for tag in SYSTEM_TAGS:
        content = strip_tag(content, tag)
    cleaned = " ".join(content.split())
    if not cleaned or cleaned.startswith("<"):
        return ""
    return cleaned


def _parse_record(line: str) -> SessionRecord | None:
    try:
        return SessionRecord.model_validate_json(line)
    except ValidationError:
        return None


def _open_records(path: Path) -> TextIO:
    return path.open(encoding="utf-8", errors="replace")


def extract_title(path: Path) -> str:
    """Human title: the first real user prompt, else the first summary."""
    first_summary = ""
    try:
        with _open_records(path) as f:
            for line in islice(f, 1, 1 + TITLE_SCAN_LIMIT):
                record = _parse_record(line)
                if record is None:
                    continue

                if record.type == "summary" and record.summary and not first_summary:
                    first_summary = record.summary

                if record.type == "user" and not record.is_meta:
                    content = record.text_content
                    if content:
                        title = clean_system_tags(content)
                        if title:
                            return title
    except OSError as exc:
        logger.debug("Cannot read %s: %s", path, exc)
        return ERROR_TITLE

    return first_summary or NO_TITLE


def extract_version(path: Path) -> str:
    """Claude Code version recorded on line 2, or "" if unavailable."""
    try:
        with _open_records(path) as f:
            lines = list(islice(f, 2))
    except OSError:
        return ""
    if len(lines) < 2:
        return ""
    record = _parse_record(lines[1])
    return record.version if record else ""


def count_records(path: Path) -> int:
    try:
        with path.open("rb") as f:
            return sum(1 for _ in f)
    except OSError:
        return 0
