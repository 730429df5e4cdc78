"""Model registry mapping model ids to provider endpoints and response transforms."""
from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Callable, Iterator, Mapping

from codegen_gateway.common.settings import Settings

LOGGER = logging.getLogger("codegen.registry")

Transform = Callable[[Any], str]


def replicate_output(response: Any) -> str:
    """Replicate predictions: ``output`` is a string or a list of streamed tokens."""
    if not isinstance(response, dict):
        return ""
    output = response.get("output")
    if isinstance(output, str):
        return output
    if isinstance(output, list):
        return "".join(part for part in output if isinstance(part, str))
    return ""


def huggingface_generated_text(response: Any) -> str:
    """Hugging Face inference: ``generated_text`` on the object or its first element."""
    if isinstance(response, list):
        response = response[0] if response else None
    if not isinstance(response, dict):
        return ""
    text = response.get("generated_text")
    return text if isinstance(text, str) else ""


def together_output_text(response: Any) -> str:
    """Together inference: ``output.text``, else ``output.choices[0].text``."""
    if not isinstance(response, dict):
        return ""
    output = response.get("output")
    if not isinstance(output, dict):
        return ""
    text = output.get("text")
    if isinstance(text, str):
        return text
    choices = output.get("choices")
    if isinstance(choices, list) and choices and isinstance(choices[0], dict):
        text = choices[0].get("text")
        if isinstance(text, str):
            return text
    return ""


@dataclass(frozen=True)
class ModelEndpoint:
    id: str
    url: str
    headers: Mapping[str, str]
    transform: Transform


@dataclass(frozen=True)
class ProviderSpec:
    """Static description of a provider; credentials and URL come from config."""
    model_id: str
    default_url: str
    url_env: str
    key_env: str
    auth_scheme: str
    transform: Transform


PROVIDERS: tuple[ProviderSpec, ...] = (
    ProviderSpec(
        model_id="codellama",
        default_url="https://api.replicate.com/v1/predictions",
        url_env="CODELLAMA_API_URL",
        key_env="REPLICATE_API_KEY",
        auth_scheme="Token",
        transform=replicate_output,
    ),
    ProviderSpec(
        model_id="starcoder",
        default_url="https://api.huggingface.co/models/bigcode/starcoder",
        url_env="STARCODER_API_URL",
        key_env="HUGGINGFACE_API_KEY",
        auth_scheme="Bearer",
        transform=huggingface_generated_text,
    ),
    ProviderSpec(
        model_id="wizard-coder",
        default_url="https://api.together.xyz/inference",
        url_env="WIZARD_CODER_API_URL",
        key_env="TOGETHER_API_KEY",
        auth_scheme="Bearer",
        transform=together_output_text,
    ),
)


class ModelRegistry:
    """Read-only lookup from model id to ModelEndpoint."""

    def __init__(self, endpoints: Mapping[str, ModelEndpoint]) -> None:
        self._endpoints = MappingProxyType(dict(endpoints))

    def resolve(self, model_id: str) -> ModelEndpoint | None:
        return self._endpoints.get(model_id)

    def ids(self) -> list[str]:
        return list(self._endpoints)

    def __contains__(self, model_id: object) -> bool:
        return model_id in self._endpoints

    def __iter__(self) -> Iterator[ModelEndpoint]:
        return iter(self._endpoints.values())

    def __len__(self) -> int:
        return len(self._endpoints)


def _endpoint_for(spec: ProviderSpec, settings: Settings, env: Mapping[str, str]) -> ModelEndpoint:
    url = env.get(spec.url_env) or settings.provider_urls.get(spec.model_id) or spec.default_url
    headers = {"Content-Type": "application/json"}
    api_key = env.get(spec.key_env)
    if api_key:
        headers["Authorization"] = f"{spec.auth_scheme} {api_key}"
    else:
        LOGGER.warning("%s is not set; requests to %s will be sent without credentials", spec.key_env, spec.model_id)
    return ModelEndpoint(id=spec.model_id, url=url, headers=MappingProxyType(headers), transform=spec.transform)


def build_registry(settings: Settings | None = None, env: Mapping[str, str] | None = None) -> ModelRegistry:
    """
    Build the process-wide registry from settings and environment.

    Args:
        settings: Loaded settings; supplies YAML URL overrides.
        env: Environment mapping, defaults to os.environ.
    """
    settings = settings or Settings()
    env = os.environ if env is None else env
    return ModelRegistry({spec.model_id: _endpoint_for(spec, settings, env) for spec in PROVIDERS})
