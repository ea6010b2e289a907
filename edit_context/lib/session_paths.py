"""Session cache path utilities - single source of truth for cache file locations.

Layout under the cache root (default <project>/.claude/edit-cache/):

    <session_id>/edited-files.log    append-only edit records
    <session_id>/affected-dirs.txt   derived: sorted unique directories
    <session_id>/extensions.txt      derived: sorted unique extensions

Sessions without an id share the "default" directory.
"""

from __future__ import annotations

import hashlib
import re
from pathlib import Path

from edit_context.lib.config import EditContextConfig

DEFAULT_SESSION = "default"

EDIT_LOG_NAME = "edited-files.log"
AFFECTED_DIRS_NAME = "affected-dirs.txt"
EXTENSIONS_NAME = "extensions.txt"

_SAFE_SESSION_RE = re.compile(r"^[A-Za-z0-9._-]+$")


def get_session_dir_name(session_id: str | None) -> str:
    """Map a session id onto a single safe directory name.

    Plain ids (UUIDs, slugs) are used as-is. Anything that could escape the
    cache root ("..", separators, odd characters) is replaced by a SHA-256
    prefix.
    """
    if not session_id:
        return DEFAULT_SESSION
    if _SAFE_SESSION_RE.match(session_id) and session_id not in (".", ".."):
        return session_id
    return hashlib.sha256(session_id.encode()).hexdigest()[:16]


def get_session_cache_dir(config: EditContextConfig, session_id: str | None) -> Path:
    return config.cache_root / get_session_dir_name(session_id)


def ensure_session_cache_dir(config: EditContextConfig, session_id: str | None) -> Path:
    """Create the session cache directory if needed. Safe to race."""
    path = get_session_cache_dir(config, session_id)
    path.mkdir(parents=True, exist_ok=True)
    return path


def get_edit_log_path(session_dir: Path) -> Path:
    return session_dir / EDIT_LOG_NAME


def get_affected_dirs_path(session_dir: Path) -> Path:
    return session_dir / AFFECTED_DIRS_NAME


def get_extensions_path(session_dir: Path) -> Path:
    return session_dir / EXTENSIONS_NAME


def list_session_dirs(cache_root: Path) -> list[Path]:
    """Session directories under the cache root, sorted by name.

    This order is the scan order of the summarizer, so it decides which
    session wins when the same file shows up in several.
    """
    if not cache_root.is_dir():
        return []
    return sorted(p for p in cache_root.iterdir() if p.is_dir())


def find_vcs_root(start: Path, markers: tuple[str, ...] = (".git",)) -> Path | None:
    """Walk upward from start looking for a version-control marker directory.

    The filesystem root itself is never considered.

    Args:
        start: Directory to start from (inclusive)
        markers: Marker directory names, e.g. (".git",)

    Returns:
        First ancestor containing a marker, or None
    """
    current = start
    while current != current.parent:
        for marker in markers:
            if (current / marker).is_dir():
                return current
        current = current.parent
    return None
