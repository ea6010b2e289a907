"""Edit record line format.

One record per line, five pipe-delimited fields:

    timestamp|absolute_path|relative_path|extension|origin_root

Inside a field, backslash, pipe, newline and carriage return are escaped
(``\\\\``, ``\\|``, ``\\n``, ``\\r``) so a path can never break the line
structure. Lines written without escapes (plain paths) parse unchanged.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict

FIELD_SEPARATOR = "|"
FIELD_COUNT = 5

_ESCAPES = {"\\": "\\\\", "|": "\\|", "\n": "\\n", "\r": "\\r"}
_UNESCAPES = {"\\": "\\", "|": "|", "n": "\n", "r": "\r"}


class MalformedRecordError(ValueError):
    """Raised when a log line cannot be parsed into an EditRecord."""


class EditRecord(BaseModel):
    """A single file modification event. Immutable once written."""

    model_config = ConfigDict(frozen=True)

    timestamp: int
    absolute_path: str
    relative_path: str
    extension: str = ""
    origin_root: str = ""


def file_extension(path: str) -> str:
    """Return the text after the last dot of the final path segment.

    ``src/a.go`` -> ``go``, ``Makefile`` -> ``""``, ``.bashrc`` -> ``bashrc``.
    """
    name = path.rstrip("/").rsplit("/", 1)[-1]
    if "." not in name:
        return ""
    return name.rsplit(".", 1)[1]


def escape_field(value: str) -> str:
    return "".join(_ESCAPES.get(ch, ch) for ch in value)


def _split_fields(line: str) -> list[str]:
    """Split on unescaped separators, unescaping each field."""
    fields: list[str] = []
    current: list[str] = []
    chars = iter(line)
    for ch in chars:
        if ch == "\\":
            nxt = next(chars, None)
            if nxt is None:
                raise MalformedRecordError("dangling escape at end of line")
            # Unknown escapes keep the backslash (lenient for unescaped writers)
            current.append(_UNESCAPES.get(nxt, "\\" + nxt))
        elif ch == FIELD_SEPARATOR:
            fields.append("".join(current))
            current = []
        else:
            current.append(ch)
    fields.append("".join(current))
    return fields


def serialize_record(record: EditRecord) -> str:
    """Render a record as one newline-terminated log line."""
    fields = [
        str(record.timestamp),
        record.absolute_path,
        record.relative_path,
        record.extension,
        record.origin_root,
    ]
    return FIELD_SEPARATOR.join(escape_field(f) for f in fields) + "\n"


def parse_record(line: str) -> EditRecord:
    """Parse one log line into an EditRecord.

    Raises:
        MalformedRecordError: wrong field count, non-integer timestamp,
            or an empty path field.
    """
    fields = _split_fields(line.rstrip("\r\n"))
    if len(fields) != FIELD_COUNT:
        raise MalformedRecordError(
            f"expected {FIELD_COUNT} fields, got {len(fields)}"
        )

    raw_ts, absolute_path, relative_path, extension, origin_root = fields
    try:
        timestamp = int(raw_ts.strip())
    except ValueError:
        raise MalformedRecordError(f"non-integer timestamp: {raw_ts!r}") from None

    if not absolute_path or not relative_path:
        raise MalformedRecordError("empty path field")

    return EditRecord(
        timestamp=timestamp,
        absolute_path=absolute_path,
        relative_path=relative_path,
        extension=extension,
        origin_root=origin_root,
    )
