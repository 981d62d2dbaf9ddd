"""Runtime settings resolved from the environment."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from .utils import getenv_flag, getenv_float


DEFAULT_API_BASE = "https://openrouter.ai/api/v1"
DEFAULT_CACHE_PATH = Path(".routewise_models_cache.json")
# Input cost per 1k tokens above which a model counts as premium.
DEFAULT_PREMIUM_INPUT_COST = 0.00001
DEFAULT_REQUEST_TIMEOUT_S = 30.0


@dataclass(frozen=True)
class RegistrySettings:
    api_base: str = DEFAULT_API_BASE
    cache_path: Path = DEFAULT_CACHE_PATH
    premium_input_cost: float = DEFAULT_PREMIUM_INPUT_COST
    request_timeout_s: float = DEFAULT_REQUEST_TIMEOUT_S
    strict_capabilities: bool = False

    @classmethod
    def from_env(cls) -> "RegistrySettings":
        api_base = (os.getenv("ROUTEWISE_API_BASE") or "").strip() or DEFAULT_API_BASE
        cache_raw = (os.getenv("ROUTEWISE_CACHE_PATH") or "").strip()
        timeout = getenv_float("ROUTEWISE_REQUEST_TIMEOUT", DEFAULT_REQUEST_TIMEOUT_S)
        if timeout <= 0:
            timeout = DEFAULT_REQUEST_TIMEOUT_S
        threshold = getenv_float("ROUTEWISE_PREMIUM_INPUT_COST", DEFAULT_PREMIUM_INPUT_COST)
        if threshold < 0:
            threshold = DEFAULT_PREMIUM_INPUT_COST
        return cls(
            api_base=api_base.rstrip("/"),
            cache_path=Path(cache_raw).expanduser() if cache_raw else DEFAULT_CACHE_PATH,
            premium_input_cost=threshold,
            request_timeout_s=timeout,
            strict_capabilities=getenv_flag("ROUTEWISE_STRICT_CAPABILITIES", False),
        )
