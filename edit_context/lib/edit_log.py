"""Append-only edit log and its derived index files.

The log is the source of truth. The two index files (affected directories
and touched extensions) are a cache rebuilt from a full scan of the log on
every edit; losing an index update to a race is acceptable because the next
rebuild heals it.
"""

from __future__ import annotations

import logging
import os
import posixpath
import tempfile
from collections.abc import Iterable, Iterator
from pathlib import Path

from filelock import FileLock, Timeout

from edit_context.lib.edit_record import (
    EditRecord,
    MalformedRecordError,
    parse_record,
    serialize_record,
)
from edit_context.lib.session_paths import (
    get_affected_dirs_path,
    get_edit_log_path,
    get_extensions_path,
)

logger = logging.getLogger(__name__)

INDEX_LOCK_NAME = ".indexes.lock"
INDEX_LOCK_TIMEOUT = 2.0


def append_record(log_path: Path, record: EditRecord) -> None:
    """Append one record as a single write on an O_APPEND descriptor.

    Raises:
        OSError: If the log cannot be opened or written
    """
    data = serialize_record(record).encode()
    fd = os.open(log_path, os.O_WRONLY | os.O_APPEND | os.O_CREAT, 0o644)
    try:
        os.write(fd, data)
    finally:
        os.close(fd)


def iter_records(log_path: Path) -> Iterator[EditRecord]:
    """Yield records in file order, skipping malformed lines.

    A missing log yields nothing; an unreadable one is logged and yields
    nothing.
    """
    try:
        f = open(log_path, encoding="utf-8", errors="replace")
    except FileNotFoundError:
        return
    except OSError as e:
        logger.warning(f"Skipping unreadable edit log {log_path}: {e}")
        return

    with f:
        for lineno, line in enumerate(f, 1):
            if not line.strip():
                continue
            try:
                yield parse_record(line)
            except MalformedRecordError as e:
                logger.debug(f"{log_path}:{lineno}: skipping malformed record: {e}")


def affected_directory(relative_path: str) -> str:
    """Directory part of a relative path; "" for top-level files."""
    directory = posixpath.dirname(relative_path)
    return "" if directory == "." else directory


def compute_indexes(records: Iterable[EditRecord]) -> tuple[list[str], list[str]]:
    """Sorted unique (directories, extensions) for a set of records."""
    directories: set[str] = set()
    extensions: set[str] = set()
    for record in records:
        directory = affected_directory(record.relative_path)
        if directory:
            directories.add(directory)
        if record.extension:
            extensions.add(record.extension)
    return sorted(directories), sorted(extensions)


def write_index(path: Path, values: list[str]) -> None:
    """Write one value per line atomically (temp file + rename)."""
    fd, temp_path = tempfile.mkstemp(
        prefix=f".{path.name}-", suffix=".tmp", dir=str(path.parent), text=True
    )
    try:
        with os.fdopen(fd, "w") as f:
            f.writelines(f"{value}\n" for value in values)
        Path(temp_path).replace(path)
    except Exception:
        Path(temp_path).unlink(missing_ok=True)
        raise


def read_index(path: Path) -> list[str]:
    if not path.exists():
        return []
    return [line for line in path.read_text().splitlines() if line]


def rebuild_indexes(session_dir: Path) -> tuple[list[str], list[str]] | None:
    """Recompute both index files from the session's full edit log.

    Returns:
        (directories, extensions) as written, or None if another process
        held the index lock and the rebuild was skipped.
    """
    lock = FileLock(session_dir / INDEX_LOCK_NAME, timeout=INDEX_LOCK_TIMEOUT)
    try:
        with lock:
            directories, extensions = compute_indexes(
                iter_records(get_edit_log_path(session_dir))
            )
            if directories:
                write_index(get_affected_dirs_path(session_dir), directories)
            if extensions:
                write_index(get_extensions_path(session_dir), extensions)
            return directories, extensions
    except Timeout:
        logger.info(f"Index lock busy in {session_dir}, skipping rebuild")
        return None
