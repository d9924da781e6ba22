"""claude-chats - browse and clean up Claude Code chat sessions."""

import logging

__version__ = "0.3.0"

logging.getLogger(__name__).addHandler(logging.NullHandler())
