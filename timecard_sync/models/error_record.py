from __future__ import annotations

import json
from dataclasses import asdict, dataclass
from datetime import UTC, datetime

"""ErrorRecord model for the failed-run error log.

One record per failed run, serialized as JSON Lines with a fixed key set:
timestamp, source, error_type, message.
"""

__all__ = [
    "ErrorRecord",
]


@dataclass(frozen=True)
class ErrorRecord:
    """Structured error record for JSON Lines logging.

    Attributes:
        timestamp: ISO8601 UTC timestamp with 'Z' suffix
        source: payload origin (file name, "<stdin>", ...)
        error_type: failure kind in UPPER_SNAKE_CASE (e.g. INSUFFICIENT_CAPACITY)
        message: human readable error text of the run outcome
    """
    timestamp: str  # ISO8601 UTC
    source: str
    error_type: str  # UPPER_SNAKE
    message: str

    @staticmethod
    def create(source: str, error_type: str, message: str) -> ErrorRecord:
        ts = datetime.now(UTC).isoformat().replace("+00:00", "Z")
        return ErrorRecord(
            timestamp=ts,
            source=source,
            error_type=error_type,
            message=message,
        )

    @staticmethod
    def from_outcome_error(source: str, error: str) -> ErrorRecord:
        """Build a record from a RunOutcome error ("Kind: text")."""
        kind, _, text = error.partition(":")
        return ErrorRecord.create(
            source=source,
            error_type=_to_upper_snake(kind.strip() or "UnexpectedFailure"),
            message=(text.strip() or error),
        )

    def to_json_line(self) -> str:
        # 追加キー阻止: dataclass -> dict して json.dumps
        return json.dumps(asdict(self), ensure_ascii=False)


def _to_upper_snake(name: str) -> str:
    out: list[str] = []
    for i, ch in enumerate(name):
        if ch.isupper() and i > 0 and not name[i - 1].isupper():
            out.append("_")
        out.append(ch.upper())
    return "".join(out)
