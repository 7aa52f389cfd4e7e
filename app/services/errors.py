# app/services/errors.py
"""
Errors raised by the persistence layer.

Store errors from a single round trip (postgrest APIError, transport errors)
are never wrapped; they reach the caller unchanged. The classes here cover the
two cases a single store error cannot describe: a row that is not there, and
a multi-table write that stopped half way.
"""
from __future__ import annotations

from typing import Any, Dict, List, Optional


def _describe(exc: Optional[BaseException]) -> Optional[str]:
    if exc is None:
        return None
    # postgrest APIError keeps the server message on .message
    return getattr(exc, "message", None) or str(exc)


class RecordNotFoundError(LookupError):
    """Raised when an update/get targets an id that has no row."""

    def __init__(self, table: str, record_id: Any) -> None:
        super().__init__(f"{table} row {record_id!r} not found")
        self.table = table
        self.record_id = record_id


class PartialWriteError(RuntimeError):
    """
    A multi-table write failed after earlier stages were committed.

    Nothing is rolled back. The exception records what was committed so the
    caller can surface it and, if desired, re-issue a corrective update.
    The original store error is available as ``__cause__``.

    Attributes:
        entity: aggregate root table, e.g. "recipes".
        record_id: id of the aggregate root the write was about.
        row: committed root row (None when the root itself was deleted).
        completed: stages that succeeded, in order.
        failed_stage: stage that raised.
    """

    def __init__(
        self,
        entity: str,
        record_id: Any,
        failed_stage: str,
        completed: List[str],
        row: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(
            f"{entity} {record_id!r}: stage {failed_stage!r} failed after "
            f"{', '.join(completed) or 'no stages'} committed"
        )
        self.entity = entity
        self.record_id = record_id
        self.failed_stage = failed_stage
        self.completed = list(completed)
        self.row = row

    def to_result(self) -> Dict[str, Any]:
        """Render as the {ok, error, data, diagnostics} envelope used by the API."""
        cause = self.__cause__
        return {
            "ok": False,
            "error": "partial_write",
            "data": self.row,
            "diagnostics": {
                "entity": self.entity,
                "id": self.record_id,
                "completed": self.completed,
                "failed_stage": self.failed_stage,
                "exception": _describe(cause),
            },
        }
