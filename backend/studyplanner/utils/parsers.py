"""Parsing utilities that turn raw model text into schedule entries.

The model is asked for a bare JSON array but often wraps it in a
markdown code fence. `parse_schedule_response` strips the fence, parses
the JSON and validates every element against `ScheduleEntry`.
"""

import json
import re
from typing import List

from pydantic import ValidationError as PydanticValidationError

from ..errors import GenerationParseError
from ..schemas import ScheduleEntry

_FENCE_RE = re.compile(r"```(?:json)?", re.IGNORECASE)


def strip_code_fences(text: str) -> str:
    """Remove every ``` / ```json marker and surrounding whitespace."""
    return _FENCE_RE.sub("", text).strip()


def parse_schedule_response(text: str) -> List[ScheduleEntry]:
    """Parse model output into validated entries, preserving array order.

    Raises `GenerationParseError` if the cleaned text is not JSON, is not
    an array, or any element fails validation.
    """
    if not isinstance(text, str) or not text.strip():
        raise GenerationParseError("empty response from model")
    cleaned = strip_code_fences(text)
    try:
        data = json.loads(cleaned)
    except json.JSONDecodeError as e:
        raise GenerationParseError(f"response is not valid JSON: {e}") from e
    if not isinstance(data, list):
        raise GenerationParseError(f"expected a JSON array, got {type(data).__name__}")
    entries = []
    for idx, item in enumerate(data):
        if not isinstance(item, dict):
            raise GenerationParseError(f"entry {idx} must be an object")
        try:
            entries.append(ScheduleEntry.model_validate(item))
        except PydanticValidationError as e:
            errors = "; ".join(err["msg"] for err in e.errors())
            raise GenerationParseError(f"entry {idx} is invalid: {errors}") from e
    return entries
