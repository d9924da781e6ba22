"""Configuration and directory layout for claude-chats."""

import json
import logging
from dataclasses import dataclass
from pathlib import Path

from pydantic import BaseModel, ConfigDict, ValidationError

logger = logging.getLogger(__name__)

CONFIG_DIR = Path.home() / ".config" / "claude-chats"
CONFIG_PATH = CONFIG_DIR / "config.json"
DEFAULT_CLAUDE_DIR = Path.home() / ".claude"

SESSION_SUFFIX = ".jsonl"
AGENT_PREFIX = "agent-"
INDEX_FILENAME = "sessions-index.json"


@dataclass(frozen=True)
class ClaudePaths:
    """Subdirectories of a Claude root that hold session data."""

    root: Path

    @property
    def projects(self) -> Path:
        return self.root / "projects"

    @property
    def debug(self) -> Path:
        return self.root / "debug"

    @property
    def todos(self) -> Path:
        return self.root / "todos"

    @property
    def session_env(self) -> Path:
        return self.root / "session-env"

    @property
    def file_history(self) -> Path:
        return self.root / "file-history"

    @property
    def plans(self) -> Path:
        return self.root / "plans"

    @property
    def agents(self) -> Path:
        return self.root / "agents"


class AppConfig(BaseModel):
    """Persisted user settings."""

    # Older config files also carry auto-update settings; they are ignored.
    model_config = ConfigDict(extra="ignore")

    claude_dir: str

    @property
    def paths(self) -> ClaudePaths:
        return ClaudePaths(Path(self.claude_dir).expanduser())


def load_config(path: Path | None = None) -> AppConfig | None:
    """Load the saved config, or None if it is missing or unreadable."""
    path = path or CONFIG_PATH
    try:
        return AppConfig.model_validate_json(path.read_text())
    except FileNotFoundError:
        return None
    except (OSError, ValidationError) as exc:
        logger.warning("Ignoring unreadable config %s: %s", path, exc)
        return None


def save_config(config: AppConfig, path: Path | None = None) -> Path:
    """Write the config as indented JSON, creating its directory."""
    path = path or CONFIG_PATH
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(config.model_dump(), indent=2) + "\n")
    return path


def expand_claude_dir(raw: str) -> Path:
    """Turn user input into a Claude directory, falling back to the default."""
    raw = raw.strip()
    if not raw:
        return DEFAULT_CLAUDE_DIR
    return Path(raw).expanduser()
