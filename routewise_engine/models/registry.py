"""Model capability registry.

The registry owns one snapshot (id -> ``ModelSpec``) per instance. The
snapshot is built lazily from the local cache file, falling back to the
remote model listing, and is replaced wholesale by ``refresh()``.
"""

from __future__ import annotations

import logging
import threading
from pathlib import Path
from types import MappingProxyType
from typing import Any, Callable, Iterable, Mapping

from ..config import RegistrySettings
from ..errors import RegistryFetchError
from ..pricing.estimator import TokenCostEstimator
from ..sources.cache import ModelListingCache
from ..sources.remote import fetch_models
from .normalize import normalize_model, normalize_models
from .requirements import Requirements, meets_requirements
from .spec import ModelSpec, TokenCost

logger = logging.getLogger(__name__)

RawListing = dict[str, Any]

__all__ = ["ModelRegistry", "ModelSpec", "TokenCost", "rank_models"]


class ModelRegistry:
    def __init__(
        self,
        models: Mapping[str, ModelSpec] | None = None,
        *,
        settings: RegistrySettings | None = None,
        cache_path: Path | str | None = None,
        premium_input_cost: float | None = None,
        fetcher: Callable[[], RawListing] | None = None,
    ) -> None:
        self.settings = settings or RegistrySettings.from_env()
        self.cache = ModelListingCache(Path(cache_path) if cache_path is not None else self.settings.cache_path)
        self.premium_input_cost = (
            premium_input_cost if premium_input_cost is not None else self.settings.premium_input_cost
        )
        self.estimator = TokenCostEstimator()
        self._fetcher = fetcher
        self._lock = threading.Lock()
        self._snapshot: Mapping[str, ModelSpec] | None = (
            MappingProxyType(dict(models)) if models is not None else None
        )

    def fetch_remote(self) -> RawListing:
        if self._fetcher is None:
            return fetch_models(self.settings.api_base, self.settings.request_timeout_s)
        payload = self._fetcher()
        if not isinstance(payload, dict):
            raise RegistryFetchError("Model listing is not a JSON object.")
        return payload

    def load_cache(self) -> RawListing | None:
        return self.cache.load()

    def save_cache(self, payload: RawListing) -> None:
        self.cache.save(payload)

    def ensure_loaded(self) -> Mapping[str, ModelSpec]:
        snapshot = self._snapshot
        if snapshot is not None:
            return snapshot
        with self._lock:
            if self._snapshot is None:
                self._snapshot = self._populate(prefer_cache=True)
            return self._snapshot

    def all_models(self) -> Mapping[str, ModelSpec]:
        return self.ensure_loaded()

    def refresh(self) -> Mapping[str, ModelSpec]:
        with self._lock:
            self.cache.clear()
            self._snapshot = None
            self._snapshot = self._populate(prefer_cache=False)
            return self._snapshot

    def invalidate(self) -> None:
        with self._lock:
            self._snapshot = None
            if self.cache.clear():
                logger.debug("Removed model cache %s", self.cache.path)

    def _populate(self, *, prefer_cache: bool) -> Mapping[str, ModelSpec]:
        payload = self.load_cache() if prefer_cache else None
        if payload is None:
            payload = self.fetch_remote()
            try:
                self.save_cache(payload)
            except OSError as exc:
                logger.warning("Could not write model cache %s: %s", self.cache.path, exc)
        models = self.normalize_models(payload)
        logger.debug("Registry loaded %d models", len(models))
        return MappingProxyType(models)

    def normalize(self, raw_model: Any) -> ModelSpec | None:
        return normalize_model(raw_model, premium_input_cost=self.premium_input_cost)

    def normalize_models(self, payload: Any) -> dict[str, ModelSpec]:
        return normalize_models(payload, premium_input_cost=self.premium_input_cost)

    def model_exists(self, model_id: str) -> bool:
        return model_id in self.ensure_loaded()

    def get_model_info(self, model_id: str) -> ModelSpec | None:
        return self.ensure_loaded().get(model_id)

    def get_fallbacks(self, model_id: str) -> list[str]:
        spec = self.get_model_info(model_id)
        return list(spec.fallbacks) if spec else []

    def has_capability(self, model_id: str, capability: str) -> bool:
        spec = self.get_model_info(model_id)
        return bool(spec and spec.supports(capability))

    def models_meeting_requirements(
        self, requirements: Requirements | Mapping[str, Any] | None = None
    ) -> dict[str, ModelSpec]:
        reqs = Requirements.coerce(requirements)
        return {
            model_id: spec
            for model_id, spec in self.ensure_loaded().items()
            if meets_requirements(spec, reqs)
        }

    def find_best_model(self, requirements: Requirements | Mapping[str, Any] | None = None) -> ModelSpec | None:
        reqs = Requirements.coerce(requirements)
        ranked = rank_models(self.models_meeting_requirements(reqs).values(), newest_first=reqs.pick_newer)
        return ranked[0] if ranked else None

    def calculate_estimated_cost(self, model_id: str, input_tokens: int = 0, output_tokens: int = 0) -> float:
        spec = self.get_model_info(model_id)
        return self.estimator.estimate(spec, input_tokens, output_tokens).total_usd


def rank_models(models: Iterable[ModelSpec], *, newest_first: bool = False) -> list[ModelSpec]:
    """Order candidates cheapest first, or newest first with cost as tie-break.

    Sorting is stable, so remaining ties keep snapshot order.
    """
    if newest_first:
        return sorted(models, key=lambda spec: (-spec.created_at, spec.input_cost))
    return sorted(models, key=lambda spec: spec.input_cost)
