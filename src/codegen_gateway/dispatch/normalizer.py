"""Extraction of a code string from a provider response."""
from __future__ import annotations

from typing import Any

from codegen_gateway.dispatch.errors import EmptyResultError
from codegen_gateway.dispatch.registry import Transform


def normalize(raw: Any, transform: Transform, model: str | None = None) -> str:
    """Apply the provider transform; reject empty or whitespace-only output."""
    result = transform(raw)
    if not isinstance(result, str) or not result.strip():
        raise EmptyResultError("Empty response from AI model", model=model)
    return result
