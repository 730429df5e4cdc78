"""Errors raised along the validate -> dispatch -> normalize path, and their classification."""
from __future__ import annotations

from codegen_gateway.common.schema import ErrorKind, GenerationFailure


class GenerationError(RuntimeError):
    """Base error for code-generation failures."""

    kind = ErrorKind.UNEXPECTED_ERROR
    http_status = 500

    def __init__(self, message: str, *, model: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.model = model


class ValidationError(GenerationError):
    """Raised when the inbound job is malformed."""

    kind = ErrorKind.VALIDATION_ERROR
    http_status = 400


class UnsupportedModelError(GenerationError):
    """Raised when the model id has no registry entry."""

    kind = ErrorKind.UNSUPPORTED_MODEL


class GenerationTimeoutError(GenerationError):
    """Raised when the provider does not answer before the deadline."""

    kind = ErrorKind.TIMEOUT


class ProviderError(GenerationError):
    """Raised when the provider answers with a non-2xx status."""

    kind = ErrorKind.PROVIDER_ERROR

    def __init__(self, message: str, *, status_code: int, model: str | None = None) -> None:
        super().__init__(message, model=model)
        self.status_code = status_code


class EmptyResultError(GenerationError):
    """Raised when the provider answers 2xx without usable code."""

    kind = ErrorKind.EMPTY_RESULT


class UnexpectedGenerationError(GenerationError):
    """Raised for network and parse failures."""


def classify(error: BaseException, model: str | None = None) -> GenerationFailure:
    """Map any failure to a stable kind and HTTP status."""
    if isinstance(error, GenerationError):
        return GenerationFailure(
            kind=error.kind,
            message=error.message,
            http_status=error.http_status,
            model=error.model or model,
        )
    return GenerationFailure(
        kind=ErrorKind.UNEXPECTED_ERROR,
        message=str(error) or "Unknown error occurred",
        http_status=500,
        model=model,
    )
