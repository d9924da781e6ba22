"""Render the controller state as a rich renderable."""

from rich.cells import cell_len, set_cell_size
from rich.console import Group, RenderableType
from rich.style import Style
from rich.text import Text

from claude_chats.tui.controller import ListState, Mode, StatusKind

APP_TITLE = "Claude Code Chat Manager"
HELP_TEXT = (
    "↑/↓/PgUp/PgDn:Nav | Home/End:Jump | Ctrl+U/D:Half | SPACE:Toggle (A:All) "
    "| C:Copy ID | D:Delete | R:Refresh UI | Q:Quit"
)

TITLE_STYLE = Style(bold=True, color="cyan")
SELECTED_STYLE = Style(bold=True, color="yellow")
CURSOR_STYLE = Style(reverse=True)
DIM_STYLE = Style(color="bright_black")
ERROR_STYLE = Style(bold=True, color="red")
SUCCESS_STYLE = Style(bold=True, color="green")
HELP_STYLE = Style(color="grey50")

MIN_WIDTH = 75
# Indicator, timestamp, version and lines columns plus the gaps between columns.
FIXED_WIDTH = 45
TIMESTAMP_WIDTH = 19
VERSION_WIDTH = 8
LINES_WIDTH = 6
MIN_TITLE_WIDTH = 30
MIN_PROJECT_WIDTH = 10
ELLIPSIS = ".."


def fit(text: str, width: int, tail: str = "") -> str:
    """Truncate to `width` terminal cells (adding `tail` when cut), then pad."""
    text = " ".join(text.split())
    if cell_len(text) > width:
        keep = max(width - cell_len(tail), 0)
        text = set_cell_size(text, keep).rstrip() + tail
    return set_cell_size(text, width)


def column_widths(width: int) -> tuple[int, int, int]:
    """Total, title and project column widths for a terminal width."""
    width = max(width, MIN_WIDTH)
    remaining = width - FIXED_WIDTH
    title_width = max(remaining * 60 // 100, MIN_TITLE_WIDTH)
    project_width = max(remaining - title_width, MIN_PROJECT_WIDTH)
    return width, title_width, project_width


def _row(state: ListState, index: int, title_width: int, project_width: int) -> Text:
    session = state.sessions[index]
    selected = state.is_selected(session)
    lines = str(session.record_count) if session.record_count else "-"
    indicator = "[✓]" if selected else "[ ]"

    line = " ".join(
        [
            indicator,
            "  ".join(
                [
                    fit(session.timestamp, TIMESTAMP_WIDTH),
                    fit(session.version[: VERSION_WIDTH - 1], VERSION_WIDTH),
                    fit(lines, LINES_WIDTH),
                    fit(session.title, title_width, ELLIPSIS),
                    fit(session.project, project_width, ELLIPSIS),
                ]
            ),
        ]
    )

    style = Style()
    if selected:
        style = SELECTED_STYLE
    if index == state.cursor:
        style = CURSOR_STYLE
    return Text(line, style=style, no_wrap=True, overflow="crop")


def render(state: ListState) -> RenderableType:
    if not state.sessions:
        return Group(Text("No chats found.", style=TITLE_STYLE), Text(""), Text("Press q to quit."))

    width, title_width, project_width = column_widths(state.width)
    parts: list[RenderableType] = [
        Text(APP_TITLE, style=TITLE_STYLE),
        Text(f"Total: {len(state.sessions)} | Selected: {len(state.selected)}", style=DIM_STYLE),
        Text(
            "    "
            + "  ".join(
                [
                    fit("TIMESTAMP", TIMESTAMP_WIDTH),
                    fit("VERSION", VERSION_WIDTH),
                    fit("LINES", LINES_WIDTH),
                    fit("TITLE", title_width),
                    fit("PROJECT", project_width),
                ]
            ),
            style=DIM_STYLE,
            no_wrap=True,
            overflow="crop",
        ),
        Text("─" * width, no_wrap=True, overflow="crop"),
    ]

    page = state.page_height
    start = state.scroll_offset
    end = min(start + page, len(state.sessions))
    parts.extend(_row(state, i, title_width, project_width) for i in range(start, end))

    if len(state.sessions) > page:
        parts.append(Text(f"[{start + 1}-{end}/{len(state.sessions)}]", style=DIM_STYLE))

    if state.status is not None:
        if state.status.kind is StatusKind.ERROR:
            parts.append(Text(f"Error: {state.status.text}", style=ERROR_STYLE))
        else:
            parts.append(Text(f"✓ {state.status.text}", style=SUCCESS_STYLE))

    if state.mode is Mode.CONFIRMING_DELETE:
        prompt = Text(f"Delete {len(state.selected)} chat(s)?", style=ERROR_STYLE)
        prompt.append(" ")
        prompt.append("[ENTER=Yes] [ESC=No]", style=HELP_STYLE)
        parts.append(prompt)
    elif state.mode is Mode.DELETING:
        parts.append(Text(f"Deleting {len(state.selected)} chat(s)...", style=HELP_STYLE))
    else:
        parts.append(Text(HELP_TEXT, style=HELP_STYLE))

    return Group(*parts)
