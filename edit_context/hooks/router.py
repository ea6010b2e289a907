#!/usr/bin/env python3
"""
Edit-context hook router.

Single entry point for both Claude Code hook events:

- PostToolUse: record the edited file in the session's edit log
- UserPromptSubmit: print recently modified files as prompt context

Usage in .claude/settings.json:

    "PostToolUse": [{"matcher": "Edit|MultiEdit|Write|NotebookEdit",
                     "hooks": [{"type": "command",
                                "command": "edit-context-hook PostToolUse"}]}],
    "UserPromptSubmit": [{"hooks": [{"type": "command",
                                     "command": "edit-context-hook UserPromptSubmit"}]}]

Exit codes:
    0: Always. Bookkeeping failures are logged to stderr and never block
       the edit or the prompt.
"""

import argparse
import json
import logging
import os
import sys
from collections.abc import Callable
from typing import Any, TextIO

from pydantic import ValidationError

from edit_context.hooks.schemas import (
    ClaudeGeneralHookOutput,
    ClaudeHookSpecificOutput,
    HookInput,
)
from edit_context.lib.config import EditContextConfig, parse_lookback
from edit_context.lib.recorder import record_edit
from edit_context.lib.summarizer import build_context

LOG_LEVEL_ENV = "EDIT_CONTEXT_LOG_LEVEL"
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

logger = logging.getLogger(__name__)


def configure_logging() -> None:
    """Log to stderr only; stdout carries the hook's output."""
    level_name = os.environ.get(LOG_LEVEL_ENV, "WARNING").upper()
    level = getattr(logging, level_name, None)
    if not isinstance(level, int):
        level = logging.WARNING
    logging.basicConfig(level=level, format=LOG_FORMAT, stream=sys.stderr)


def read_hook_input(stream: TextIO) -> dict[str, Any]:
    """Read the JSON payload from stdin. Missing or invalid input -> {}."""
    try:
        if stream.isatty():
            return {}
        data = stream.read()
        if not data.strip():
            return {}
        raw = json.loads(data)
    except (OSError, ValueError) as e:
        logger.warning(f"Failed to read hook input: {e}")
        return {}

    if not isinstance(raw, dict):
        logger.warning(f"Ignoring hook input of type {type(raw).__name__}")
        return {}
    return raw


def normalize_input(raw_input: dict[str, Any]) -> HookInput:
    try:
        return HookInput.model_validate(raw_input)
    except ValidationError as e:
        logger.warning(f"Invalid hook input, treating as empty: {e}")
        return HookInput()


# --- Event Handlers ---


def handle_post_tool_use(
    ctx: HookInput, config: EditContextConfig, args: argparse.Namespace
) -> str | None:
    record_edit(
        config,
        ctx.tool_input.target_path,
        session_id=ctx.session_id,
        tool_name=ctx.tool_name,
    )
    return None


def handle_user_prompt_submit(
    ctx: HookInput, config: EditContextConfig, args: argparse.Namespace
) -> str | None:
    lookback = parse_lookback(args.lookback, source="--lookback")
    context = build_context(config, lookback_seconds=lookback)
    if not context:
        return None

    if args.json:
        output = ClaudeGeneralHookOutput(
            hookSpecificOutput=ClaudeHookSpecificOutput(
                hookEventName="UserPromptSubmit", additionalContext=context
            )
        )
        return output.model_dump_json(exclude_none=True) + "\n"
    return context


EVENT_HANDLERS: dict[
    str, Callable[[HookInput, EditContextConfig, argparse.Namespace], str | None]
] = {
    "PostToolUse": handle_post_tool_use,
    "UserPromptSubmit": handle_user_prompt_submit,
}


def run_hook(event: str, raw_input: dict[str, Any], args: argparse.Namespace) -> str | None:
    """Dispatch one event. Never raises."""
    handler = EVENT_HANDLERS.get(event)
    if handler is None:
        logger.warning(f"No handler for hook event {event!r}")
        return None

    try:
        ctx = normalize_input(raw_input)
        config = EditContextConfig.from_environment(cwd=ctx.cwd)
        return handler(ctx, config, args)
    except Exception as e:
        # Hooks must never fail the host's edit or prompt
        logger.warning(f"{event} hook failed: {e}", exc_info=True)
        return None


# --- Main Entry Point ---


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="edit-context-hook",
        description="Track edited files and inject recent-edit context",
    )
    parser.add_argument(
        "event",
        nargs="?",
        help="Hook event (PostToolUse or UserPromptSubmit); defaults to the payload's hook_event_name",
    )
    parser.add_argument(
        "--json",
        action="store_true",
        help="Emit context as Claude hookSpecificOutput JSON instead of plain text",
    )
    parser.add_argument(
        "--lookback",
        metavar="SECONDS",
        help="Override the lookback window for UserPromptSubmit",
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    configure_logging()
    try:
        args = build_parser().parse_args(argv)
    except SystemExit as e:
        if e.code in (0, None):
            raise
        # Exit code 2 would block the host; a misconfigured hook just does nothing
        logger.warning(f"Invalid hook arguments (exit {e.code}), skipping")
        return 0

    raw_input = read_hook_input(sys.stdin)
    event = args.event or raw_input.get("hook_event_name")
    if not event or not isinstance(event, str):
        logger.warning("No hook event given on the command line or in the payload")
        return 0

    output = run_hook(event, raw_input, args)
    if output:
        sys.stdout.write(output)
        sys.stdout.flush()
    return 0


if __name__ == "__main__":
    sys.exit(main())
