# app/services/step_sequencer.py
"""
Ordinal positions for preparation steps.

sequence_steps() numbers a caller-ordered list 1..N by position. A step that
already carries a number keeps it: callers own renumbering after removing a
step from the middle of the list. order_step_rows() is the read-side
counterpart and sorts stored rows back into sequence.
"""
from __future__ import annotations

from typing import Any, Dict, Iterable, List, Mapping, Optional


def _step_number(step: Mapping[str, Any]) -> Optional[int]:
    for key in ("number", "step_number", "stepNumber"):
        value = step.get(key)
        if value is None or value == "":
            continue
        try:
            return int(float(value))
        except (TypeError, ValueError):
            return None
    return None


def sequence_steps(steps: Iterable[Any]) -> List[Dict[str, Any]]:
    """
    Turn step descriptions (or step dicts) into {step_number, description} records.

    >>> sequence_steps(["Misturar", "Assar"])
    [{'step_number': 1, 'description': 'Misturar'}, {'step_number': 2, 'description': 'Assar'}]
    """
    sequenced: List[Dict[str, Any]] = []
    for position, step in enumerate(steps, start=1):
        if isinstance(step, Mapping):
            number = _step_number(step)
            description = step.get("description")
        else:
            number = None
            description = step
        sequenced.append(
            {
                "step_number": position if number is None else number,
                "description": "" if description is None else str(description),
            }
        )
    return sequenced


def order_step_rows(rows: Iterable[Mapping[str, Any]]) -> List[Mapping[str, Any]]:
    """Sort stored step rows by step_number; ties keep row-id (insertion) order."""

    def _key(row: Mapping[str, Any]):
        number = row.get("step_number")
        row_id = row.get("id")
        return (
            number if number is not None else float("inf"),
            row_id if isinstance(row_id, (int, float)) else 0,
        )

    return sorted(rows, key=_key)
