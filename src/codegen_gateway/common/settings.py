"""Process configuration: optional YAML file overlaid by environment variables."""
from __future__ import annotations
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Mapping

import yaml

LOGGER = logging.getLogger("codegen.settings")

DEFAULT_CONFIG_PATH = "configs/gateway.yaml"


@dataclass(frozen=True)
class GenerationParams:
    """Sampling parameters sent to every provider."""
    max_new_tokens: int = 1000
    temperature: float = 0.2
    top_p: float = 0.95


@dataclass(frozen=True)
class Settings:
    timeout_s: float = 30.0
    params: GenerationParams = field(default_factory=GenerationParams)
    provider_urls: dict[str, str] = field(default_factory=dict)
    log_level: str = "INFO"


def load_cfg(path: str) -> dict[str, Any]:
    with open(path, "r", encoding="utf-8") as f:
        return yaml.safe_load(f) or {}


def load_settings(env: Mapping[str, str] | None = None, cfg_path: str | None = None) -> Settings:
    """
    Build Settings from the YAML config and the environment.

    Environment values win over the file; a missing file means defaults.

    Args:
        env: Environment mapping, defaults to os.environ.
        cfg_path: YAML path, defaults to CODEGEN_CONFIG or configs/gateway.yaml.
    """
    env = os.environ if env is None else env
    path = cfg_path or env.get("CODEGEN_CONFIG", DEFAULT_CONFIG_PATH)

    cfg: dict[str, Any] = {}
    if Path(path).exists():
        cfg = load_cfg(path)
        LOGGER.debug("Loaded config from %s", path)
    else:
        LOGGER.debug("No config file at %s; using defaults", path)

    defaults = GenerationParams()
    params = GenerationParams(
        max_new_tokens=int(env.get("MAX_NEW_TOKENS", cfg.get("max_new_tokens", defaults.max_new_tokens))),
        temperature=float(env.get("TEMPERATURE", cfg.get("temperature", defaults.temperature))),
        top_p=float(env.get("TOP_P", cfg.get("top_p", defaults.top_p))),
    )

    provider_urls = {
        model_id: str(entry["url"])
        for model_id, entry in (cfg.get("providers") or {}).items()
        if isinstance(entry, dict) and entry.get("url")
    }

    return Settings(
        timeout_s=float(env.get("GEN_TIMEOUT_S", cfg.get("timeout_s", 30.0))),
        params=params,
        provider_urls=provider_urls,
        log_level=str(env.get("LOG_LEVEL", cfg.get("log_level", "INFO"))).upper(),
    )
