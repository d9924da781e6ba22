"""Textual runtime for the list controller.

The app is the single consumer of events: key presses, resizes, timers and
background completions all pass through `apply_event`, which runs the pure
reducer and then carries out the effects it asked for.
"""

import logging

from textual import events
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.widgets import Static

from claude_chats.cleanup.executor import DeletionError, delete_sessions
from claude_chats.config import ClaudePaths
from claude_chats.sessions.models import Session
from claude_chats.sessions.scanner import scan_sessions
from claude_chats.tui import controller
from claude_chats.tui.clipboard import ClipboardError, copy_to_clipboard
from claude_chats.tui.view import render

logger = logging.getLogger(__name__)


class ChatManagerApp(App):
    """Full-screen session list with multi-select delete."""

    CSS = """
    Screen {
        overflow: hidden;
    }
    #body {
        height: 1fr;
    }
    """

    BINDINGS = [
        # Routed through the controller so it is ignored while deleting.
        Binding("ctrl+c", "controller_key('ctrl+c')", "Quit", show=False, priority=True),
    ]

    ENABLE_COMMAND_PALETTE = False

    def __init__(self, paths: ClaudePaths):
        super().__init__()
        self.paths = paths
        self.state = controller.ListState()
        self.body = Static(id="body")

    def compose(self) -> ComposeResult:
        yield self.body

    def on_mount(self) -> None:
        self.state = controller.ListState(width=self.size.width, height=self.size.height)
        self._run_effects([controller.LoadSessions(reset=True)])

    def on_resize(self, event: events.Resize) -> None:
        self.apply_event(controller.Resized(event.size.width, event.size.height))

    def on_key(self, event: events.Key) -> None:
        event.stop()
        event.prevent_default()
        self.apply_event(controller.KeyPressed(event.key))

    def action_controller_key(self, key: str) -> None:
        self.apply_event(controller.KeyPressed(key))

    def apply_event(self, event: controller.Event) -> None:
        self.state, effects = controller.update(self.state, event)
        self.body.update(render(self.state))
        self._run_effects(effects)

    # ── Effects ──────────────────────────────────────────────────

    def _run_effects(self, effects: list[controller.Effect]) -> None:
        for effect in effects:
            if isinstance(effect, controller.LoadSessions):
                sessions = tuple(scan_sessions(self.paths))
                self.apply_event(controller.SessionsLoaded(sessions, reset=effect.reset))
            elif isinstance(effect, controller.DeleteSessions):
                self.run_worker(
                    lambda batch=effect.sessions: self._delete_in_background(batch),
                    thread=True,
                    group="delete",
                    exclusive=True,
                )
            elif isinstance(effect, controller.CopyToClipboard):
                self.run_worker(
                    lambda uuid=effect.uuid: self._copy_in_background(uuid),
                    thread=True,
                    group="clipboard",
                )
            elif isinstance(effect, controller.ExpireStatus):
                self.set_timer(
                    effect.delay,
                    lambda message_id=effect.message_id: self.apply_event(
                        controller.StatusExpired(message_id)
                    ),
                )
            elif isinstance(effect, controller.Quit):
                self.exit()

    def _delete_in_background(self, batch: tuple[Session, ...]) -> None:
        try:
            count = delete_sessions(self.paths, batch)
            result = controller.DeletionFinished(count)
        except DeletionError as exc:
            result = controller.DeletionFinished(exc.completed, error=str(exc))
        except Exception as exc:
            # Anything else still has to take the controller out of DELETING.
            logger.exception("Unexpected failure while deleting")
            result = controller.DeletionFinished(0, error=str(exc) or type(exc).__name__)
        self.call_from_thread(self.apply_event, result)

    def _copy_in_background(self, uuid: str) -> None:
        try:
            copy_to_clipboard(uuid)
            result = controller.CopyFinished(uuid)
        except ClipboardError as exc:
            logger.debug("Clipboard copy failed: %s", exc)
            result = controller.CopyFinished(uuid, error=str(exc))
        self.call_from_thread(self.apply_event, result)


def run_app(paths: ClaudePaths) -> None:
    """Run the session manager until the user quits."""
    ChatManagerApp(paths).run()
