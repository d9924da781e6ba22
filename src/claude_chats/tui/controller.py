"""List management state machine.

The controller is a pure reducer: `update(state, event)` returns the next
state plus a list of effects for the runtime to carry out (scan the disk,
delete in the background, start a timer, quit). It never touches the
filesystem or the terminal itself, so it can be tested without either.
"""

from dataclasses import dataclass, replace
from enum import Enum

from claude_chats.sessions.models import Session

# Header, stats, column titles, rule, scroll indicator, status, help/confirm
# and one spare line.
CHROME_HEIGHT = 8
FALLBACK_PAGE_HEIGHT = 10

SUCCESS_SECONDS = 2.0
ERROR_SECONDS = 5.0


class Mode(str, Enum):
    BROWSING = "browsing"
    CONFIRMING_DELETE = "confirming_delete"
    DELETING = "deleting"


class StatusKind(str, Enum):
    SUCCESS = "success"
    ERROR = "error"


@dataclass(frozen=True)
class Status:
    kind: StatusKind
    text: str
    message_id: int


@dataclass(frozen=True)
class ListState:
    sessions: tuple[Session, ...] = ()
    cursor: int = 0
    scroll_offset: int = 0
    selected: frozenset[str] = frozenset()
    mode: Mode = Mode.BROWSING
    width: int = 0
    height: int = 0
    status: Status | None = None
    message_id: int = 0

    @property
    def page_height(self) -> int:
        visible = self.height - CHROME_HEIGHT
        return visible if visible >= 1 else FALLBACK_PAGE_HEIGHT

    @property
    def current(self) -> Session | None:
        if 0 <= self.cursor < len(self.sessions):
            return self.sessions[self.cursor]
        return None

    @property
    def selected_sessions(self) -> list[Session]:
        """Selected sessions in list order."""
        return [s for s in self.sessions if s.uuid in self.selected]

    def is_selected(self, session: Session) -> bool:
        return session.uuid in self.selected


# ── Events ───────────────────────────────────────────────────────


@dataclass(frozen=True)
class Resized:
    width: int
    height: int


@dataclass(frozen=True)
class KeyPressed:
    key: str


@dataclass(frozen=True)
class SessionsLoaded:
    sessions: tuple[Session, ...]
    reset: bool = True


@dataclass(frozen=True)
class DeletionFinished:
    count: int
    error: str | None = None


@dataclass(frozen=True)
class CopyFinished:
    uuid: str
    error: str | None = None


@dataclass(frozen=True)
class StatusExpired:
    message_id: int


Event = Resized | KeyPressed | SessionsLoaded | DeletionFinished | CopyFinished | StatusExpired


# ── Effects ──────────────────────────────────────────────────────


@dataclass(frozen=True)
class LoadSessions:
    reset: bool = True


@dataclass(frozen=True)
class DeleteSessions:
    sessions: tuple[Session, ...]


@dataclass(frozen=True)
class CopyToClipboard:
    uuid: str


@dataclass(frozen=True)
class ExpireStatus:
    message_id: int
    delay: float


@dataclass(frozen=True)
class Quit:
    pass


Effect = LoadSessions | DeleteSessions | CopyToClipboard | ExpireStatus | Quit


# ── Key bindings ─────────────────────────────────────────────────

BROWSE_KEYS = {
    "up": "up",
    "k": "up",
    "down": "down",
    "j": "down",
    "pagedown": "page_down",
    "ctrl+f": "page_down",
    "pageup": "page_up",
    "ctrl+b": "page_up",
    "home": "first",
    "g": "first",
    "end": "last",
    "G": "last",
    "shift+g": "last",
    "ctrl+d": "half_down",
    "ctrl+u": "half_up",
    "space": "toggle",
    "a": "toggle_all",
    "d": "delete",
    "r": "refresh",
    "c": "copy",
    "q": "quit",
    "ctrl+c": "quit",
}

CONFIRM_KEYS = {
    "enter": "confirm",
    "escape": "cancel",
    "n": "cancel",
}


# ── Helpers ──────────────────────────────────────────────────────


def adjust_scroll(state: ListState) -> ListState:
    """Move the visible window so the cursor is inside it."""
    page = state.page_height
    offset = state.scroll_offset
    if state.cursor < offset:
        offset = state.cursor
    elif state.cursor >= offset + page:
        offset = state.cursor - page + 1
    return replace(state, scroll_offset=max(offset, 0))


def move_cursor(state: ListState, cursor: int) -> ListState:
    last = max(len(state.sessions) - 1, 0)
    cursor = min(max(cursor, 0), last)
    return adjust_scroll(replace(state, cursor=cursor))


def show_status(state: ListState, kind: StatusKind, text: str) -> tuple[ListState, list[Effect]]:
    """Show a transient message. Older expiry timers become no-ops."""
    message_id = state.message_id + 1
    delay = SUCCESS_SECONDS if kind is StatusKind.SUCCESS else ERROR_SECONDS
    state = replace(state, status=Status(kind, text, message_id), message_id=message_id)
    return state, [ExpireStatus(message_id, delay)]


def _navigate(state: ListState, action: str) -> ListState:
    page = state.page_height
    targets = {
        "up": state.cursor - 1,
        "down": state.cursor + 1,
        "page_down": state.cursor + page,
        "page_up": state.cursor - page,
        "first": 0,
        "last": len(state.sessions) - 1,
        "half_down": state.cursor + page // 2,
        "half_up": state.cursor - page // 2,
    }
    return move_cursor(state, targets[action])


def _toggle(state: ListState) -> ListState:
    session = state.current
    if session is None:
        return state
    return replace(state, selected=state.selected ^ {session.uuid})


def _toggle_all(state: ListState) -> ListState:
    if not state.sessions:
        return state
    every = frozenset(s.uuid for s in state.sessions)
    if state.selected >= every:
        return replace(state, selected=frozenset())
    return replace(state, selected=every)


# ── Reducer ──────────────────────────────────────────────────────


def _on_browse_key(state: ListState, key: str) -> tuple[ListState, list[Effect]]:
    action = BROWSE_KEYS.get(key)
    if action is None:
        return state, []

    if action == "quit":
        return state, [Quit()]
    if action == "toggle":
        return _toggle(state), []
    if action == "toggle_all":
        return _toggle_all(state), []
    if action == "delete":
        if state.selected:
            return replace(state, mode=Mode.CONFIRMING_DELETE), []
        return state, []
    if action == "refresh":
        return replace(state, status=None), [LoadSessions(reset=True)]
    if action == "copy":
        session = state.current
        if session is None:
            return state, []
        return state, [CopyToClipboard(session.uuid)]
    return _navigate(state, action), []


def _on_confirm_key(state: ListState, key: str) -> tuple[ListState, list[Effect]]:
    action = CONFIRM_KEYS.get(key)
    if action == "confirm":
        batch = tuple(state.selected_sessions)
        return replace(state, mode=Mode.DELETING), [DeleteSessions(batch)]
    if action == "cancel":
        return replace(state, mode=Mode.BROWSING), []
    return state, []


def _on_sessions_loaded(state: ListState, event: SessionsLoaded) -> ListState:
    sessions = tuple(event.sessions)
    if event.reset:
        return replace(
            state,
            sessions=sessions,
            cursor=0,
            scroll_offset=0,
            selected=frozenset(),
            mode=Mode.BROWSING,
        )
    present = {s.uuid for s in sessions}
    state = replace(
        state,
        sessions=sessions,
        selected=state.selected & present,
        mode=Mode.BROWSING,
    )
    return move_cursor(state, state.cursor)


def update(state: ListState, event: Event) -> tuple[ListState, list[Effect]]:
    """Apply one event. Returns the new state and the effects to run."""
    if isinstance(event, Resized):
        return adjust_scroll(replace(state, width=event.width, height=event.height)), []

    if isinstance(event, KeyPressed):
        if state.mode is Mode.BROWSING:
            return _on_browse_key(state, event.key)
        if state.mode is Mode.CONFIRMING_DELETE:
            return _on_confirm_key(state, event.key)
        return state, []

    if isinstance(event, SessionsLoaded):
        return _on_sessions_loaded(state, event), []

    if isinstance(event, DeletionFinished):
        state = replace(state, mode=Mode.BROWSING)
        if event.error is None:
            state, effects = show_status(
                state, StatusKind.SUCCESS, f"Deleted {event.count} chat(s)"
            )
            return state, [LoadSessions(reset=True), *effects]
        state, effects = show_status(state, StatusKind.ERROR, event.error)
        # Part of the batch may be gone; reload but keep what is still selected.
        return state, [LoadSessions(reset=False), *effects]

    if isinstance(event, CopyFinished):
        if event.error is None:
            return show_status(state, StatusKind.SUCCESS, f"Chat UUID copied: {event.uuid}")
        return show_status(state, StatusKind.ERROR, f"Failed to copy: {event.error}")

    if isinstance(event, StatusExpired):
        if state.status is not None and event.message_id == state.message_id:
            return replace(state, status=None), []
        return state, []

    raise TypeError(f"Unknown event: {event!r}")
