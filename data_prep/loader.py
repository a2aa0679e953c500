from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, Optional, Tuple, Union

from pydantic import ValidationError

from core.errors import CashflowErrorCode, CashflowInputError
from core.schema import CashflowInputs


def inputs_from_dict(payload: Dict[str, Any]) -> CashflowInputs:
    """
    Build CashflowInputs from a saved snapshot payload.

    Accepts the bare collections or a wrapper holding them under "inputs".
    """
    if not isinstance(payload, dict):
        raise CashflowInputError(
            f"Snapshot must be a JSON object, got {type(payload).__name__}",
            CashflowErrorCode.INVALID_INPUT,
        )
    body = payload.get("inputs", payload)
    try:
        return CashflowInputs.model_validate(body)
    except ValidationError as exc:
        raise CashflowInputError(
            f"Invalid cashflow inputs ({exc.error_count()} error(s))",
            CashflowErrorCode.INVALID_INPUT,
            details=exc.errors(include_url=False),
        ) from exc


def read_snapshot(path: Union[str, Path]) -> Dict[str, Any]:
    with open(path, "r", encoding="utf-8") as fh:
        try:
            return json.load(fh)
        except json.JSONDecodeError as exc:
            raise CashflowInputError(
                f"{path}: not valid JSON ({exc.msg} at line {exc.lineno})",
                CashflowErrorCode.INVALID_INPUT,
            ) from exc


def load_inputs(path: Union[str, Path]) -> CashflowInputs:
    """Load a saved input snapshot (JSON) from disk."""
    return inputs_from_dict(read_snapshot(path))


def load_snapshot(path: Union[str, Path]) -> Tuple[CashflowInputs, Optional[int]]:
    """Inputs plus the snapshot's saved projectionDays, when it has one."""
    payload = read_snapshot(path)
    inputs = inputs_from_dict(payload)
    days = payload.get("projectionDays") if isinstance(payload, dict) else None
    if days is not None and (isinstance(days, bool) or not isinstance(days, int)):
        raise CashflowInputError(
            f"projectionDays must be an integer, got {days!r}",
            CashflowErrorCode.INVALID_INPUT,
        )
    return inputs, days
