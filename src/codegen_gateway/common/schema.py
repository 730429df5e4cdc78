"""Pydantic models and dataclasses for request/response types."""
from __future__ import annotations
from dataclasses import dataclass
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

DEFAULT_LANGUAGE = "javascript"
DEFAULT_MODEL = "codellama"


class ErrorKind(str, Enum):
    VALIDATION_ERROR = "ValidationError"
    UNSUPPORTED_MODEL = "UnsupportedModel"
    TIMEOUT = "Timeout"
    PROVIDER_ERROR = "ProviderError"
    EMPTY_RESULT = "EmptyResult"
    UNEXPECTED_ERROR = "UnexpectedError"


class GenerationJob(BaseModel):
    """One validated code-generation request."""

    model_config = ConfigDict(frozen=True, protected_namespaces=())

    prompt: str = Field(min_length=1)
    language: str = DEFAULT_LANGUAGE
    model: str = DEFAULT_MODEL


@dataclass(frozen=True)
class GenerationResult:
    """Code returned by a provider, tagged with the requested language."""
    code: str
    language: str


@dataclass(frozen=True)
class GenerationFailure:
    """Classified failure ready to be serialized at the HTTP boundary."""
    kind: ErrorKind
    message: str
    http_status: int
    model: str | None = None
