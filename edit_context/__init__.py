"""Edit tracking and recent-edit context hooks for Claude Code."""

__version__ = "0.1.0"
