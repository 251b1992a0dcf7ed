from __future__ import annotations

import dataclasses
from datetime import date, datetime, time
from enum import Enum
from typing import Any

from flask import jsonify

from ..core.result import Err, Ok, Result, http_status


def to_jsonable(value: Any) -> Any:
    """Dataclasses/enums/dates -> plain JSON types."""

    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return {f.name: to_jsonable(getattr(value, f.name)) for f in dataclasses.fields(value)}
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, datetime):
        return value.isoformat(timespec="seconds")
    if isinstance(value, (date, time)):
        return value.isoformat()
    if isinstance(value, dict):
        return {str(k): to_jsonable(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [to_jsonable(v) for v in value]
    return value


def result_payload(result: Result) -> dict:
    if isinstance(result, Ok):
        return {"success": True, "message": result.message, "data": to_jsonable(result.value)}
    assert isinstance(result, Err)
    return {
        "success": False,
        "message": result.message,
        "error": {"kind": result.kind.value, "code": result.code},
    }


def json_result(result: Result):
    return jsonify(result_payload(result)), http_status(result)
