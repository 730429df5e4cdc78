"""Structural validation of inbound generation requests."""
from __future__ import annotations

from typing import Any

import pydantic

from codegen_gateway.common.schema import GenerationJob
from codegen_gateway.dispatch.errors import ValidationError

PROMPT_REQUIRED = "Prompt is required"


def _describe(err: dict[str, Any]) -> str:
    field = ".".join(str(part) for part in err.get("loc", ())) or "body"
    if field == "prompt" and err.get("type") in {"missing", "string_too_short"}:
        return PROMPT_REQUIRED
    return f"{field}: {err.get('msg', 'invalid value')}"


def validate(raw: Any) -> GenerationJob:
    """
    Validate raw request data into a GenerationJob, applying defaults.

    Whether the model is registered is checked later, at dispatch.

    Raises:
        ValidationError: when the data is not a well-formed job.
    """
    if not isinstance(raw, dict):
        raise ValidationError("Request body must be a JSON object")
    try:
        return GenerationJob.model_validate(raw)
    except pydantic.ValidationError as exc:
        messages = [_describe(err) for err in exc.errors()]
        raise ValidationError("; ".join(messages) or "Validation failed") from exc
