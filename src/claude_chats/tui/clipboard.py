"""Copy text to the system clipboard with whatever tool the platform has."""

import shutil
import subprocess
import sys

LINUX_CLIPBOARD_COMMANDS = [
    ["xclip", "-selection", "clipboard"],
    ["xsel", "--clipboard", "--input"],
    ["wl-copy"],
]


class ClipboardError(Exception):
    pass


def _clipboard_command() -> list[str]:
    if sys.platform == "darwin":
        return ["pbcopy"]
    if sys.platform.startswith("linux"):
        for command in LINUX_CLIPBOARD_COMMANDS:
            if shutil.which(command[0]):
                return command
        raise ClipboardError("no clipboard utility found (install xclip, xsel, or wl-copy)")
    raise ClipboardError(f"unsupported platform: {sys.platform}")


def copy_to_clipboard(text: str) -> None:
    command = _clipboard_command()
    try:
        subprocess.run(command, input=text, text=True, check=True, capture_output=True, timeout=5)
    except (OSError, subprocess.SubprocessError) as exc:
        raise ClipboardError(str(exc)) from exc
