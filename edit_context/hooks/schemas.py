import json
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

# --- Input Schemas ---


class ToolInput(BaseModel):
    """The subset of a tool's input the edit tracker cares about."""

    model_config = ConfigDict(extra="allow")

    file_path: str | None = None
    notebook_path: str | None = None

    @property
    def target_path(self) -> str | None:
        """Edited file; NotebookEdit reports notebook_path instead of file_path."""
        return self.file_path or self.notebook_path


class HookInput(BaseModel):
    """
    Payload delivered on stdin by Claude Code.

    Only the fields used here are declared; everything else passes through.
    """

    model_config = ConfigDict(extra="allow")

    session_id: str | None = None
    hook_event_name: str | None = None
    tool_name: str | None = None
    tool_input: ToolInput = Field(default_factory=ToolInput)
    cwd: str | None = None
    transcript_path: str | None = None

    @field_validator("tool_input", mode="before")
    @classmethod
    def _normalize_tool_input(cls, value: Any) -> Any:
        """Accept tool_input as a JSON string; anything not a dict becomes empty."""
        if isinstance(value, str):
            try:
                value = json.loads(value)
            except json.JSONDecodeError:
                return {}
        if not isinstance(value, dict):
            return {}
        return value


# --- Claude Code Hook Output ---


class ClaudeHookSpecificOutput(BaseModel):
    hookEventName: str
    additionalContext: str | None = None


class ClaudeGeneralHookOutput(BaseModel):
    systemMessage: str | None = None
    hookSpecificOutput: ClaudeHookSpecificOutput | None = None
