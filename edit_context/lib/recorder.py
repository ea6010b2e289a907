"""Edit recorder: turns one file-modification event into a log record."""

from __future__ import annotations

import logging
import os
import time
from pathlib import Path

from edit_context.lib.config import EditContextConfig
from edit_context.lib.edit_log import append_record, rebuild_indexes
from edit_context.lib.edit_record import EditRecord, file_extension
from edit_context.lib.session_paths import (
    ensure_session_cache_dir,
    find_vcs_root,
    get_edit_log_path,
)

logger = logging.getLogger(__name__)


def is_excluded(file_path: str, config: EditContextConfig) -> bool:
    """Documentation files (md/markdown by default) are not tracked."""
    return file_extension(file_path).lower() in config.excluded_extensions


def normalize_path(file_path: str, config: EditContextConfig) -> str:
    """Absolute, normalized form of file_path; relative paths are under the project root."""
    return os.path.abspath(os.path.join(config.project_root, file_path))


def resolve_origin_root(normalized_path: str, config: EditContextConfig) -> str:
    """Version-control root containing the file, else the project root."""
    vcs_root = find_vcs_root(Path(normalized_path).parent, config.vcs_markers)
    if vcs_root is None:
        return os.path.abspath(config.project_root)
    return str(vcs_root)


def relativize(file_path: str, root: str) -> str:
    """Strip "<root>/" from file_path; unchanged if the file is outside root."""
    prefix = root.rstrip("/") + "/"
    if file_path.startswith(prefix) and len(file_path) > len(prefix):
        return file_path[len(prefix):]
    return file_path


def build_record(file_path: str, config: EditContextConfig, now: int | None = None) -> EditRecord:
    normalized = normalize_path(file_path, config)
    origin_root = resolve_origin_root(normalized, config)
    relative_path = relativize(normalized, origin_root)
    if relative_path == normalized:
        # Outside the root: keep the path as the host reported it
        relative_path = file_path
    return EditRecord(
        timestamp=int(time.time()) if now is None else now,
        absolute_path=file_path,
        relative_path=relative_path,
        extension=file_extension(file_path),
        origin_root=origin_root,
    )


def record_edit(
    config: EditContextConfig,
    file_path: str | None,
    session_id: str | None = None,
    tool_name: str | None = None,
    now: int | None = None,
) -> EditRecord | None:
    """Append a record for one edit and refresh the session's indexes.

    Args:
        config: Resolved hook configuration
        file_path: Path of the edited file as reported by the host tool
        session_id: Host session id; "default" session when empty
        tool_name: Host tool that made the edit (informational)
        now: Event time in epoch seconds (defaults to current time)

    Returns:
        The appended record, or None when the event was filtered out
        (no path, or an excluded extension).

    Raises:
        OSError: If the cache directory or log cannot be written
    """
    if not file_path:
        return None

    if is_excluded(file_path, config):
        logger.debug(f"Skipping excluded file: {file_path}")
        return None

    session_dir = ensure_session_cache_dir(config, session_id)
    record = build_record(file_path, config, now)
    append_record(get_edit_log_path(session_dir), record)
    logger.debug(f"Recorded {tool_name or 'edit'} of {record.relative_path} in {session_dir.name}")

    rebuild_indexes(session_dir)
    return record
