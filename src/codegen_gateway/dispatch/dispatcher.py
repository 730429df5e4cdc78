"""Dispatch of a validated job to its provider endpoint.

One HTTP attempt per job, raced against a cancellation timer. Failures are
raised as GenerationError subclasses; see errors.classify for the HTTP mapping.
"""
from __future__ import annotations

import asyncio
import logging
from typing import Any

import httpx

from codegen_gateway.common.schema import GenerationJob, GenerationResult
from codegen_gateway.common.settings import GenerationParams
from codegen_gateway.common.templates import load_template, render_prompt
from codegen_gateway.dispatch.errors import (
    GenerationError,
    GenerationTimeoutError,
    ProviderError,
    UnexpectedGenerationError,
    UnsupportedModelError,
)
from codegen_gateway.dispatch.normalizer import normalize
from codegen_gateway.dispatch.registry import ModelEndpoint, ModelRegistry

DEFAULT_TIMEOUT_S = 30.0


def build_payload(job: GenerationJob, params: GenerationParams, template: str | None = None) -> dict[str, Any]:
    """Provider request body shared by every endpoint."""
    return {
        "prompt": render_prompt(template or load_template(), job.prompt, job.language),
        "max_new_tokens": params.max_new_tokens,
        "temperature": params.temperature,
        "top_p": params.top_p,
    }


def _error_text(response: httpx.Response) -> str:
    try:
        text = response.text
    except (httpx.HTTPError, UnicodeDecodeError, LookupError):
        text = ""
    return text or response.reason_phrase


class Dispatcher:
    """Sends GenerationJobs to registered providers."""

    def __init__(
        self,
        registry: ModelRegistry,
        *,
        timeout_s: float = DEFAULT_TIMEOUT_S,
        params: GenerationParams | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        self.registry = registry
        self.timeout_s = timeout_s
        self.params = params or GenerationParams()
        self._transport = transport
        self._log = logger or logging.getLogger("codegen.dispatcher")

    async def _post(self, endpoint: ModelEndpoint, payload: dict[str, Any]) -> httpx.Response:
        # The asyncio deadline in generate() is the only timer.
        async with httpx.AsyncClient(transport=self._transport, timeout=None) as client:
            return await client.post(endpoint.url, headers=dict(endpoint.headers), json=payload)

    async def generate(self, job: GenerationJob) -> GenerationResult:
        """
        Generate code for one job.

        Raises:
            UnsupportedModelError, GenerationTimeoutError, ProviderError,
            EmptyResultError, UnexpectedGenerationError.
        """
        try:
            code = await self._dispatch(job)
        except GenerationError as e:
            self._log.error("Error generating code with %s: %s", job.model, e)
            raise
        return GenerationResult(code=code, language=job.language)

    async def _dispatch(self, job: GenerationJob) -> str:
        model = job.model
        endpoint = self.registry.resolve(model)
        if endpoint is None:
            raise UnsupportedModelError(f"Unsupported model: {model}", model=model)

        payload = build_payload(job, self.params)
        timed_out = GenerationTimeoutError(
            f"Request to {model} API timed out after {self.timeout_s:g} seconds", model=model
        )
        try:
            response = await asyncio.wait_for(self._post(endpoint, payload), timeout=self.timeout_s)
        except asyncio.TimeoutError as e:
            raise timed_out from e
        except httpx.TimeoutException as e:
            raise timed_out from e
        except httpx.HTTPError as e:
            raise UnexpectedGenerationError(f"Request to {model} API failed: {e}", model=model) from e

        if not response.is_success:
            raise ProviderError(
                f"API request failed ({response.status_code}): {_error_text(response)}",
                status_code=response.status_code,
                model=model,
            )

        try:
            data = response.json()
        except ValueError as e:
            raise UnexpectedGenerationError(f"Invalid JSON from {model} API: {e}", model=model) from e

        return normalize(data, endpoint.transform, model=model)
