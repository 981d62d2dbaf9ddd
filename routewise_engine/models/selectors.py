"""Model selection and fallback logic.

``ModelSelector`` is an immutable fluent builder: every builder call returns a
new selector carrying an updated ``SelectionCriteria``, so a partially built
selector can be shared and reused::

    selector = ModelSelector(registry).require("function_calling").optimize_for("cost")
    model_id = selector.within_budget(max_cost=0.01).choose()
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from datetime import date, datetime
from fnmatch import fnmatchcase
from typing import Any, Iterable, Iterator, Mapping

from ..errors import InvalidCriteriaError, InvalidStrategyError
from .registry import ModelRegistry
from .requirements import Requirements, meets_requirements
from .spec import PREMIUM, ModelSpec

logger = logging.getLogger(__name__)

COST = "cost"
PERFORMANCE = "performance"
LATEST = "latest"
CONTEXT = "context"
STRATEGIES = (COST, PERFORMANCE, LATEST, CONTEXT)


@dataclass(frozen=True)
class ProviderPreferences:
    preferred: tuple[str, ...] = ()
    required: frozenset[str] = frozenset()
    avoided_providers: frozenset[str] = frozenset()
    avoided_patterns: frozenset[str] = frozenset()

    @property
    def is_set(self) -> bool:
        return bool(self.preferred or self.required or self.avoided_providers or self.avoided_patterns)

    def allows(self, spec: ModelSpec) -> bool:
        provider = spec.provider.lower()
        if self.required and provider not in self.required:
            return False
        if provider in self.avoided_providers:
            return False
        model_id = spec.id.lower()
        return not any(fnmatchcase(model_id, pattern) for pattern in self.avoided_patterns)

    def preference_rank(self, spec: ModelSpec) -> int:
        provider = spec.provider.lower()
        if provider in self.preferred:
            return self.preferred.index(provider)
        return len(self.preferred)


@dataclass(frozen=True)
class SelectionCriteria:
    strategy: str = COST
    requirements: Requirements = Requirements()
    provider_preferences: ProviderPreferences = ProviderPreferences()
    # Order in which capabilities were required; drives fallback relaxation.
    capability_order: tuple[str, ...] = field(default=(), compare=False, repr=False)

    def as_dict(self) -> dict[str, Any]:
        prefs = self.provider_preferences
        return {
            "strategy": self.strategy,
            "requirements": self.requirements.as_dict(),
            "provider_preferences": {
                "preferred": list(prefs.preferred),
                "required": sorted(prefs.required),
                "avoided_providers": sorted(prefs.avoided_providers),
                "avoided_patterns": sorted(prefs.avoided_patterns),
            },
        }


@dataclass(frozen=True)
class RankedModel:
    model: str
    score: float


class ModelSelector:
    def __init__(
        self,
        registry: ModelRegistry | None = None,
        criteria: SelectionCriteria | None = None,
    ) -> None:
        self.registry = registry or ModelRegistry()
        self._criteria = criteria or SelectionCriteria()

    @property
    def selection_criteria(self) -> SelectionCriteria:
        return self._criteria

    def __repr__(self) -> str:
        return f"ModelSelector({self._criteria.as_dict()!r})"

    def _with(self, criteria: SelectionCriteria) -> "ModelSelector":
        return ModelSelector(self.registry, criteria)

    def _with_requirements(self, **changes: Any) -> "ModelSelector":
        return self._with(replace(self._criteria, requirements=replace(self._criteria.requirements, **changes)))

    def _with_preferences(self, **changes: Any) -> "ModelSelector":
        prefs = replace(self._criteria.provider_preferences, **changes)
        return self._with(replace(self._criteria, provider_preferences=prefs))

    def require(self, *capabilities: str) -> "ModelSelector":
        added = [_normalize_name(cap) for cap in capabilities]
        order = self._criteria.capability_order + tuple(
            cap for cap in dict.fromkeys(added) if cap not in self._criteria.capability_order
        )
        requirements = replace(
            self._criteria.requirements,
            capabilities=self._criteria.requirements.capabilities | frozenset(added),
        )
        return self._with(replace(self._criteria, requirements=requirements, capability_order=order))

    def optimize_for(self, strategy: str) -> "ModelSelector":
        normalized = _normalize_name(strategy) if isinstance(strategy, str) else strategy
        if normalized not in STRATEGIES:
            raise InvalidStrategyError(
                f"Unknown strategy '{strategy}'. Expected one of: {', '.join(STRATEGIES)}."
            )
        # Switching strategy drops the defaults the previous one injected.
        requirements = replace(
            self._criteria.requirements,
            performance_tier=PREMIUM if normalized == PERFORMANCE else None,
            pick_newer=normalized == LATEST,
        )
        return self._with(replace(self._criteria, strategy=normalized, requirements=requirements))

    def within_budget(
        self, max_cost: float | None = None, max_output_cost: float | None = None
    ) -> "ModelSelector":
        changes: dict[str, float] = {}
        if max_cost is not None:
            changes["max_input_cost"] = _positive_number("max_cost", max_cost)
        if max_output_cost is not None:
            changes["max_output_cost"] = _positive_number("max_output_cost", max_output_cost)
        return self._with_requirements(**changes)

    def min_context(self, tokens: int) -> "ModelSelector":
        if isinstance(tokens, bool) or not isinstance(tokens, int):
            raise InvalidCriteriaError(f"min_context must be a positive integer, got {tokens!r}.")
        if tokens <= 0:
            raise InvalidCriteriaError(f"min_context must be positive, got {tokens}.")
        return self._with_requirements(min_context_length=tokens)

    def prefer_providers(self, *providers: str) -> "ModelSelector":
        current = self._criteria.provider_preferences.preferred
        merged = tuple(dict.fromkeys(current + tuple(_normalize_name(p) for p in providers)))
        return self._with_preferences(preferred=merged)

    def require_providers(self, *providers: str) -> "ModelSelector":
        current = self._criteria.provider_preferences.required
        return self._with_preferences(required=current | {_normalize_name(p) for p in providers})

    def avoid_providers(self, *providers: str) -> "ModelSelector":
        current = self._criteria.provider_preferences.avoided_providers
        return self._with_preferences(avoided_providers=current | {_normalize_name(p) for p in providers})

    def avoid_patterns(self, *patterns: str) -> "ModelSelector":
        current = self._criteria.provider_preferences.avoided_patterns
        return self._with_preferences(avoided_patterns=current | {_normalize_name(p) for p in patterns})

    def newer_than(self, value: date | datetime | str) -> "ModelSelector":
        return self._with_requirements(newer_than=_coerce_date(value))

    def choose(self) -> str | None:
        criteria = self._criteria
        if criteria.strategy != CONTEXT and not criteria.provider_preferences.is_set:
            best = self.registry.find_best_model(criteria.requirements)
            return best.id if best else None
        ranked = self._rank(criteria)
        return ranked[0][0].id if ranked else None

    def choose_multiple(self, limit: int = 5, include_scores: bool = False) -> list[str] | list[RankedModel]:
        ranked = self._rank(self._criteria)[: max(limit, 0)]
        if include_scores:
            return [RankedModel(model=spec.id, score=score) for spec, score in ranked]
        return [spec.id for spec, _ in ranked]

    def choose_with_fallbacks(self, limit: int = 3) -> list[str]:
        """Ranked ids for client-side failover; empty when nothing matches."""
        return [spec.id for spec, _ in self._rank(self._criteria)[: max(limit, 0)]]

    def choose_with_fallback(self) -> str | None:
        """Best id for the full criteria, relaxing constraints until one matches.

        Relaxation order: budget, then context minimum, then required
        capabilities (most recently added first), then the release date and
        performance tier. Provider filters are never relaxed.
        """
        for step, criteria in _relaxations(self._criteria):
            ranked = self._rank(criteria)
            if ranked:
                if step:
                    logger.debug("Selected %s after relaxing %s", ranked[0][0].id, step)
                return ranked[0][0].id
            logger.debug("No model matched%s", f" after relaxing {step}" if step else "")
        return None

    def _rank(self, criteria: SelectionCriteria) -> list[tuple[ModelSpec, float]]:
        prefs = criteria.provider_preferences
        candidates = [
            spec
            for spec in self.registry.ensure_loaded().values()
            if meets_requirements(spec, criteria.requirements) and prefs.allows(spec)
        ]
        if criteria.strategy == CONTEXT:
            ranked = sorted(
                candidates,
                key=lambda spec: (-spec.context_length, spec.input_cost, prefs.preference_rank(spec)),
            )
            return [(spec, float(spec.context_length)) for spec in ranked]
        if criteria.requirements.pick_newer:
            ranked = sorted(
                candidates,
                key=lambda spec: (-spec.created_at, spec.input_cost, prefs.preference_rank(spec)),
            )
            return [(spec, float(spec.created_at)) for spec in ranked]
        ranked = sorted(candidates, key=lambda spec: (spec.input_cost, prefs.preference_rank(spec)))
        return [(spec, spec.input_cost) for spec in ranked]


def selector_from_requirements(
    requirements: Mapping[str, Any] | None = None,
    optimization: str = COST,
    registry: ModelRegistry | None = None,
) -> ModelSelector:
    """Build a selector from the plain requirement mapping completion callers pass.

    Recognized keys: ``capabilities``, ``max_input_cost`` (or ``max_cost``),
    ``max_output_cost``, ``min_context_length``, ``newer_than`` and
    ``providers``. ``providers`` is either a list of preferred providers or a
    mapping with ``prefer``/``require``/``avoid``/``avoid_patterns`` lists.
    """
    requirements = requirements or {}
    selector = ModelSelector(registry).optimize_for(optimization)

    capabilities = requirements.get("capabilities")
    if capabilities:
        selector = selector.require(*_as_list(capabilities))

    max_cost = requirements.get("max_input_cost", requirements.get("max_cost"))
    max_output_cost = requirements.get("max_output_cost")
    if max_cost is not None or max_output_cost is not None:
        selector = selector.within_budget(max_cost=max_cost, max_output_cost=max_output_cost)

    if requirements.get("min_context_length") is not None:
        selector = selector.min_context(requirements["min_context_length"])

    if requirements.get("newer_than") is not None:
        selector = selector.newer_than(requirements["newer_than"])

    providers = requirements.get("providers")
    if isinstance(providers, Mapping):
        if providers.get("prefer"):
            selector = selector.prefer_providers(*_as_list(providers["prefer"]))
        if providers.get("require"):
            selector = selector.require_providers(*_as_list(providers["require"]))
        if providers.get("avoid"):
            selector = selector.avoid_providers(*_as_list(providers["avoid"]))
        if providers.get("avoid_patterns"):
            selector = selector.avoid_patterns(*_as_list(providers["avoid_patterns"]))
    elif providers:
        selector = selector.prefer_providers(*_as_list(providers))

    return selector


def _relaxations(criteria: SelectionCriteria) -> Iterator[tuple[str | None, SelectionCriteria]]:
    yield None, criteria
    current = criteria
    reqs = current.requirements

    if reqs.max_input_cost is not None or reqs.max_output_cost is not None:
        current = replace(current, requirements=replace(reqs, max_input_cost=None, max_output_cost=None))
        reqs = current.requirements
        yield "budget", current

    if reqs.min_context_length is not None:
        current = replace(current, requirements=replace(reqs, min_context_length=None))
        reqs = current.requirements
        yield "context minimum", current

    order = [cap for cap in current.capability_order if cap in reqs.capabilities]
    order += sorted(reqs.capabilities - set(order))
    for capability in reversed(order):
        current = replace(current, requirements=replace(reqs, capabilities=reqs.capabilities - {capability}))
        reqs = current.requirements
        yield f"capability '{capability}'", current

    if reqs.date_constraints() or reqs.performance_tier is not None:
        current = replace(
            current,
            requirements=replace(reqs, newer_than=None, released_after_date=None, performance_tier=None),
        )
        yield "release date and tier", current


def _normalize_name(value: str) -> str:
    return str(value).strip().lower()


def _positive_number(label: str, value: Any) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise InvalidCriteriaError(f"{label} must be a positive number, got {value!r}.")
    if value <= 0:
        raise InvalidCriteriaError(f"{label} must be positive, got {value}.")
    return float(value)


def _coerce_date(value: Any) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        text = value.strip()
        try:
            return date.fromisoformat(text)
        except ValueError:
            pass
        try:
            return datetime.fromisoformat(text).date()
        except ValueError as exc:
            raise InvalidCriteriaError(f"newer_than could not parse date string {value!r}.") from exc
    raise InvalidCriteriaError(f"newer_than expects a date, datetime or date string, got {type(value).__name__}.")


def _as_list(value: Any) -> list[str]:
    if isinstance(value, str):
        return [value]
    if isinstance(value, Iterable):
        return [str(item) for item in value]
    return [str(value)]
