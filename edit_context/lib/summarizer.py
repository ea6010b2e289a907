"""Context summarizer: recent edits across all sessions of a project.

Scans every session log under the cache root, keeps records inside the
lookback window and renders one bullet per file. When the same relative
path appears more than once, the first occurrence in scan order wins
(sessions in name order, then file order within each log).
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass

from edit_context.lib.config import EditContextConfig
from edit_context.lib.edit_log import iter_records
from edit_context.lib.session_paths import get_edit_log_path, list_session_dirs

logger = logging.getLogger(__name__)

CONTEXT_OPEN = "<session-context>"
CONTEXT_HEADER = "Recently modified files in this project:"
CONTEXT_CLOSE = "</session-context>"


@dataclass(frozen=True)
class RecentEdit:
    relative_path: str
    extension: str


def collect_recent_edits(
    config: EditContextConfig,
    now: int | None = None,
    lookback_seconds: int | None = None,
) -> list[RecentEdit]:
    """Deduplicated recent edits in encounter order.

    Args:
        config: Resolved hook configuration
        now: Current time in epoch seconds (defaults to time.time())
        lookback_seconds: Overrides config.lookback_seconds

    Returns:
        RecentEdit list, empty when there is no cache yet
    """
    if not config.cache_root.is_dir():
        return []

    if now is None:
        now = int(time.time())
    if lookback_seconds is None:
        lookback_seconds = config.lookback_seconds
    cutoff = now - lookback_seconds

    seen: dict[str, RecentEdit] = {}
    for session_dir in list_session_dirs(config.cache_root):
        for record in iter_records(get_edit_log_path(session_dir)):
            if record.timestamp < cutoff:
                continue
            if record.relative_path in seen:
                continue
            seen[record.relative_path] = RecentEdit(record.relative_path, record.extension)

    logger.debug(f"Found {len(seen)} recently edited files under {config.cache_root}")
    return list(seen.values())


def render_session_context(edits: list[RecentEdit]) -> str:
    """Render the <session-context> block; "" when there is nothing to say."""
    if not edits:
        return ""

    lines = [CONTEXT_OPEN, CONTEXT_HEADER]
    lines.extend(f"  - {edit.relative_path} ({edit.extension})" for edit in edits)
    lines.append(CONTEXT_CLOSE)
    return "\n".join(lines) + "\n"


def build_context(
    config: EditContextConfig,
    now: int | None = None,
    lookback_seconds: int | None = None,
) -> str:
    return render_session_context(collect_recent_edits(config, now, lookback_seconds))
