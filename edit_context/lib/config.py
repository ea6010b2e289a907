"""Configuration for the edit-context hooks.

All environment and config-file lookups happen here, once, at hook startup.
The resulting EditContextConfig is passed explicitly to the recorder and
the summarizer.

Environment variables:
- CLAUDE_PROJECT_DIR: project root (set by Claude Code during hook execution)
- CLAUDE_EDIT_LOOKBACK: summarizer lookback window in seconds (default 86400)

Optional project file: <project_root>/.claude/edit-context.yaml

    lookback_seconds: 43200
    excluded_extensions: [md, markdown, lock]
    vcs_markers: [.git, .hg]
    cache_dir: .claude/edit-cache
"""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator

logger = logging.getLogger(__name__)

PROJECT_DIR_ENV = "CLAUDE_PROJECT_DIR"
LOOKBACK_ENV = "CLAUDE_EDIT_LOOKBACK"

DEFAULT_LOOKBACK_SECONDS = 24 * 60 * 60
DEFAULT_CACHE_DIR = Path(".claude") / "edit-cache"
CONFIG_FILE = Path(".claude") / "edit-context.yaml"


class EditContextConfig(BaseModel):
    """Resolved settings shared by both hooks."""

    project_root: Path
    cache_root: Path
    lookback_seconds: int = Field(default=DEFAULT_LOOKBACK_SECONDS, ge=0)
    excluded_extensions: frozenset[str] = frozenset({"md", "markdown"})
    vcs_markers: tuple[str, ...] = (".git",)

    @field_validator("excluded_extensions", mode="before")
    @classmethod
    def _normalize_extensions(cls, value: Any) -> Any:
        if isinstance(value, (list, tuple, set, frozenset)):
            return frozenset(str(ext).lstrip(".").lower() for ext in value)
        return value

    @classmethod
    def for_project(cls, project_root: Path | str, **overrides: Any) -> EditContextConfig:
        """Build a config with the default cache location under project_root."""
        root = Path(project_root)
        overrides.setdefault("cache_root", root / DEFAULT_CACHE_DIR)
        return cls(project_root=root, **overrides)

    @classmethod
    def from_environment(
        cls,
        environ: Mapping[str, str] | None = None,
        cwd: str | None = None,
    ) -> EditContextConfig:
        """Resolve config from environment, optional YAML file and defaults.

        Args:
            environ: Environment mapping (defaults to os.environ)
            cwd: Fallback project root, e.g. the hook payload's cwd

        Returns:
            EditContextConfig. Bad values are logged and replaced by defaults,
            never raised.
        """
        env = os.environ if environ is None else environ

        project_dir = env.get(PROJECT_DIR_ENV) or cwd or os.getcwd()
        project_root = Path(project_dir)

        file_settings = load_config_file(project_root / CONFIG_FILE)

        cache_dir = file_settings.pop("cache_dir", None)
        if cache_dir:
            # Relative cache dirs live under the project root
            file_settings["cache_root"] = project_root / Path(str(cache_dir)).expanduser()

        # Validate file settings one key at a time so a bad value only drops itself
        settings: dict[str, Any] = {}
        for key, value in file_settings.items():
            candidate = {**settings, key: value}
            try:
                cls.for_project(project_root, **candidate)
            except ValidationError as e:
                logger.warning(f"Ignoring invalid {key!r} in {CONFIG_FILE}: {e}")
                continue
            settings = candidate

        lookback = parse_lookback(env.get(LOOKBACK_ENV))
        if lookback is not None:
            settings["lookback_seconds"] = lookback

        return cls.for_project(project_root, **settings)


def load_config_file(path: Path) -> dict[str, Any]:
    """Load the optional YAML settings file.

    Only known keys are returned. Missing file -> {}. Unreadable or
    malformed file -> warning and {}.
    """
    if not path.exists():
        return {}

    try:
        with open(path) as f:
            data = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as e:
        logger.warning(f"Failed to read {path}: {e}")
        return {}

    if not isinstance(data, dict):
        logger.warning(f"Ignoring {path}: expected a mapping, got {type(data).__name__}")
        return {}

    known = ("lookback_seconds", "excluded_extensions", "vcs_markers", "cache_dir")
    return {key: data[key] for key in known if key in data}


def parse_lookback(raw: str | None, source: str = LOOKBACK_ENV) -> int | None:
    """Non-negative integer seconds, or None (with a warning) for bad input."""
    if raw is None or not raw.strip():
        return None
    try:
        value = int(raw.strip())
    except ValueError:
        logger.warning(f"{source}={raw!r} is not an integer, ignoring")
        return None
    if value < 0:
        logger.warning(f"{source}={raw!r} is negative, ignoring")
        return None
    return value
