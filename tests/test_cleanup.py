"""Tests for related-file resolution, index sync and batch deletion."""

import json

import pytest

from claude_chats.cleanup.executor import DeletionError, delete_sessions, remove_path
from claude_chats.cleanup.index import load_index, remove_from_index
from claude_chats.cleanup.resolver import extract_agent_ids, extract_slug, resolve_related_files
from claude_chats.sessions.scanner import scan_sessions

from conftest import SNAPSHOT

UUID = "0f3c2a9e-5d1b-4c7a-9e21-7b8f6d4a1c33"
OTHER = "9a1b2c3d-0000-4000-8000-123456789abc"


def index_entry(session_id, **extra):
    return {"sessionId": session_id, "firstPrompt": "hi", "messageCount": 3, **extra}


def write_index(paths, project, entries, **extra):
    path = paths.projects / project / "sessions-index.json"
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(
        json.dumps({"version": 1, "entries": entries, "originalPath": "/work/app", **extra})
    )
    return path


@pytest.fixture
def full_session(paths, write_session):
    """A session with one of every kind of related file."""
    records = [
        SNAPSHOT,
        {"type": "user", "version": "2.1.40", "message": {"content": "Plan it"}},
        {"type": "assistant", "slug": "brave-blue-otter", "message": {"content": []}},
        {"type": "progress", "agent_id": "a1"},
        {"type": "progress", "agent_id": "a1"},
        {"type": "progress", "agent_id": "b2"},
    ]
    record = write_session(UUID, records=records)
    chat_dir = record.with_suffix("")
    (chat_dir / "tool-results").mkdir(parents=True)
    (chat_dir / "tool-results" / "r1.txt").write_text("output")
    (chat_dir / "subagents").mkdir()

    paths.plans.mkdir()
    (paths.plans / "brave-blue-otter.md").write_text("# plan")
    paths.debug.mkdir()
    (paths.debug / f"{UUID}.txt").write_text("debug")
    paths.todos.mkdir()
    (paths.todos / f"{UUID}-agent-{UUID}.json").write_text("[]")
    (paths.todos / f"{OTHER}.json").write_text("[]")
    (paths.session_env / UUID).mkdir(parents=True)
    (paths.file_history / UUID).mkdir(parents=True)
    for agent in ("a1", "b2"):
        (paths.agents / agent).mkdir(parents=True)
        (paths.agents / agent / "memory-local.md").write_text("local")
        (paths.agents / agent / "memory-project.md").write_text("shared")
    return record


class TestResolver:
    def test_only_primary_file(self, paths, write_session):
        record = write_session(UUID)
        assert resolve_related_files(paths, UUID) == [record]

    def test_unknown_session(self, paths):
        assert resolve_related_files(paths, UUID) == []

    def test_full_set_in_order(self, paths, full_session):
        chat_dir = full_session.with_suffix("")
        assert resolve_related_files(paths, UUID) == [
            full_session,
            chat_dir,
            chat_dir / "tool-results",
            paths.plans / "brave-blue-otter.md",
            paths.debug / f"{UUID}.txt",
            paths.todos / f"{UUID}-agent-{UUID}.json",
            paths.session_env / UUID,
            paths.file_history / UUID,
            paths.agents / "a1" / "memory-local.md",
            paths.agents / "b2" / "memory-local.md",
        ]

    def test_never_includes_shared_memory(self, paths, full_session):
        related = resolve_related_files(paths, UUID)
        assert not any(p.name == "memory-project.md" for p in related)
        assert (paths.todos / f"{OTHER}.json") not in related

    def test_plan_needs_existing_file(self, paths, write_session):
        write_session(UUID, records=[SNAPSHOT, {"type": "user", "slug": "ghost"}])
        paths.plans.mkdir()
        assert len(resolve_related_files(paths, UUID)) == 1

    def test_uuid_is_not_a_glob(self, paths, write_session):
        write_session(UUID)
        assert resolve_related_files(paths, "*") == []

    def test_first_slug_wins(self, write_session):
        path = write_session(
            UUID, records=[SNAPSHOT, "oops", {"slug": ""}, {"slug": "first"}, {"slug": "second"}]
        )
        assert extract_slug(path) == "first"

    def test_path_like_ids_ignored(self, write_session):
        path = write_session(
            UUID, records=[SNAPSHOT, {"slug": "../escape"}, {"agent_id": ".."}, {"agent_id": "ok"}]
        )
        assert extract_slug(path) == ""
        assert extract_agent_ids(path) == ["ok"]

    def test_lines_json_cannot_decode_are_skipped(self, paths, write_session):
        huge_number = '{"n": 1' + "0" * 5000 + "}"
        deep = "[" * 100000 + "]" * 100000
        path = write_session(
            UUID,
            records=[SNAPSHOT, huge_number, deep, {"slug": "calm-fox"}, {"agent_id": "a1"}],
        )
        assert extract_slug(path) == "calm-fox"
        assert extract_agent_ids(path) == ["a1"]
        assert resolve_related_files(paths, UUID) == [path]

    def test_last_duplicate_supplies_slug(self, paths, write_session):
        first = write_session(UUID, project="proj-A", records=[SNAPSHOT, {"slug": "from-a"}])
        last = write_session(UUID, project="proj-B", records=[SNAPSHOT, {"slug": "from-b"}])
        paths.plans.mkdir()
        (paths.plans / "from-a.md").write_text("a")
        (paths.plans / "from-b.md").write_text("b")

        related = resolve_related_files(paths, UUID)
        assert related == [first, last, paths.plans / "from-b.md"]


class TestIndexSync:
    def test_removes_entry(self, paths):
        index_path = write_index(paths, "proj-A", [index_entry(UUID), index_entry(OTHER)])
        assert remove_from_index(paths, UUID)

        data = json.loads(index_path.read_text())
        assert [e["sessionId"] for e in data["entries"]] == [OTHER]
        assert data["version"] == 1
        assert data["originalPath"] == "/work/app"

    def test_keeps_unknown_fields(self, paths):
        index_path = write_index(
            paths, "proj-A", [index_entry(UUID), index_entry(OTHER, customFlag=True)], extra=1
        )
        remove_from_index(paths, UUID)

        data = json.loads(index_path.read_text())
        assert data["extra"] == 1
        assert data["entries"] == [index_entry(OTHER, customFlag=True)]

    def test_untouched_when_nothing_removed(self, paths):
        index_path = write_index(paths, "proj-A", [index_entry(OTHER)])
        before = index_path.read_text()
        assert not remove_from_index(paths, UUID)
        assert index_path.read_text() == before

    def test_corrupt_index_is_skipped(self, paths):
        (paths.projects / "broken").mkdir()
        broken = paths.projects / "broken" / "sessions-index.json"
        broken.write_text("{not json")
        good = write_index(paths, "proj-A", [index_entry(UUID)])

        assert remove_from_index(paths, UUID)
        assert broken.read_text() == "{not json"
        assert load_index(good).entries == []

    def test_every_project_checked(self, paths):
        a = write_index(paths, "a", [index_entry(UUID)])
        b = write_index(paths, "b", [index_entry(UUID)])
        remove_from_index(paths, UUID)
        assert load_index(a).entries == [] and load_index(b).entries == []


class TestDeleteSessions:
    def test_empty_batch(self, paths):
        assert delete_sessions(paths, []) == 0

    def test_full_delete(self, paths, full_session):
        write_index(paths, "proj-A", [index_entry(UUID), index_entry(OTHER)])
        sessions = scan_sessions(paths)

        assert delete_sessions(paths, sessions) == 1
        assert resolve_related_files(paths, UUID) == []
        assert scan_sessions(paths) == []
        for index_path in paths.projects.glob("*/sessions-index.json"):
            assert all(e.session_id != UUID for e in load_index(index_path).entries)
        # Shared files stay.
        assert (paths.agents / "a1" / "memory-project.md").exists()
        assert (paths.todos / f"{OTHER}.json").exists()

    def test_missing_debug_log_is_fine(self, paths, write_session):
        record = write_session(UUID)
        paths.todos.mkdir()
        todo = paths.todos / f"{UUID}.json"
        todo.write_text("[]")

        assert delete_sessions(paths, scan_sessions(paths)) == 1
        assert not record.exists()
        assert not todo.exists()

    def test_stops_at_first_failure(self, paths, write_session, monkeypatch):
        write_session("s1", mtime=3000)
        write_session("s2", mtime=2000)
        write_session("s3", mtime=1000)
        sessions = scan_sessions(paths)

        import claude_chats.cleanup.executor as executor

        real_remove = executor.remove_path

        def failing_remove(path):
            if path.name == "s2.jsonl":
                raise PermissionError("permission denied")
            real_remove(path)

        monkeypatch.setattr(executor, "remove_path", failing_remove)

        with pytest.raises(DeletionError) as excinfo:
            delete_sessions(paths, sessions)

        assert excinfo.value.completed == 1
        assert "Failed to delete" in str(excinfo.value)
        assert "s2.jsonl" in str(excinfo.value)
        remaining = {s.uuid for s in scan_sessions(paths)}
        assert remaining == {"s2", "s3"}

    def test_index_write_failure(self, paths, write_session, monkeypatch):
        write_session(UUID)
        import claude_chats.cleanup.executor as executor

        def broken_index(paths, uuid):
            raise OSError("disk full")

        monkeypatch.setattr(executor, "remove_from_index", broken_index)
        with pytest.raises(DeletionError, match="Failed to update index: disk full"):
            delete_sessions(paths, scan_sessions(paths))

    def test_resolve_failure_is_a_deletion_error(self, paths, write_session, monkeypatch):
        write_session("s1", mtime=2000)
        write_session("s2", mtime=1000)
        sessions = scan_sessions(paths)
        import claude_chats.cleanup.executor as executor

        real_resolve = executor.resolve_related_files

        def unreadable(paths, uuid):
            if uuid == "s2":
                raise PermissionError("permission denied")
            return real_resolve(paths, uuid)

        monkeypatch.setattr(executor, "resolve_related_files", unreadable)
        with pytest.raises(DeletionError, match="Failed to resolve files for s2") as excinfo:
            delete_sessions(paths, sessions)
        assert excinfo.value.completed == 1


class TestRemovePath:
    def test_file_dir_and_missing(self, tmp_path):
        f = tmp_path / "f.txt"
        f.write_text("x")
        d = tmp_path / "d"
        (d / "nested").mkdir(parents=True)
        (d / "nested" / "x").write_text("x")

        remove_path(f)
        remove_path(d)
        remove_path(tmp_path / "missing")
        assert not f.exists() and not d.exists()

    def test_symlink_to_dir_removes_link_only(self, tmp_path):
        target = tmp_path / "target"
        target.mkdir()
        (target / "keep").write_text("x")
        link = tmp_path / "link"
        link.symlink_to(target)

        remove_path(link)
        assert not link.exists()
        assert (target / "keep").exists()
