"""Typed model requirements and the matching predicate."""

from __future__ import annotations

from dataclasses import dataclass, fields
from datetime import date, datetime, timezone
from typing import Any, Iterable, Mapping

from .spec import PREMIUM, STANDARD, ModelSpec


@dataclass(frozen=True)
class Requirements:
    capabilities: frozenset[str] = frozenset()
    max_input_cost: float | None = None
    max_output_cost: float | None = None
    min_context_length: int | None = None
    performance_tier: str | None = None
    pick_newer: bool = False
    newer_than: date | None = None
    released_after_date: date | datetime | int | None = None

    @classmethod
    def coerce(cls, value: "Requirements | Mapping[str, Any] | None") -> "Requirements":
        if value is None:
            return cls()
        if isinstance(value, Requirements):
            return value
        known = {f.name for f in fields(cls)}
        kwargs = {key: val for key, val in value.items() if key in known}
        if "capabilities" in kwargs:
            kwargs["capabilities"] = _as_capabilities(kwargs["capabilities"])
        return cls(**kwargs)

    def date_constraints(self) -> tuple[Any, ...]:
        return tuple(value for value in (self.released_after_date, self.newer_than) if value is not None)

    def as_dict(self) -> dict[str, Any]:
        return {
            "capabilities": sorted(self.capabilities),
            "max_input_cost": self.max_input_cost,
            "max_output_cost": self.max_output_cost,
            "min_context_length": self.min_context_length,
            "performance_tier": self.performance_tier,
            "pick_newer": self.pick_newer,
            "newer_than": self.newer_than,
            "released_after_date": self.released_after_date,
        }


def to_timestamp(value: Any) -> int | None:
    """Seconds since epoch for a date, datetime or int; ``None`` otherwise.

    Plain dates count from UTC midnight; naive datetimes are read as UTC.
    """
    if isinstance(value, bool):
        return None
    if isinstance(value, datetime):
        moment = value if value.tzinfo else value.replace(tzinfo=timezone.utc)
        return int(moment.timestamp())
    if isinstance(value, date):
        return int(datetime(value.year, value.month, value.day, tzinfo=timezone.utc).timestamp())
    if isinstance(value, int):
        return value
    return None


def meets_requirements(spec: ModelSpec, requirements: Requirements) -> bool:
    if requirements.capabilities and not requirements.capabilities <= spec.capabilities:
        return False
    if requirements.max_input_cost is not None and spec.input_cost > requirements.max_input_cost:
        return False
    if requirements.max_output_cost is not None and spec.output_cost > requirements.max_output_cost:
        return False
    if requirements.min_context_length is not None and spec.context_length < requirements.min_context_length:
        return False
    if requirements.performance_tier is not None and not _tier_satisfies(
        spec.performance_tier, requirements.performance_tier
    ):
        return False
    for constraint in requirements.date_constraints():
        threshold = to_timestamp(constraint)
        if threshold is None or spec.created_at < threshold:
            return False
    return True


def _tier_satisfies(model_tier: str, required_tier: str) -> bool:
    if required_tier == PREMIUM:
        return model_tier == PREMIUM
    if required_tier == STANDARD:
        return model_tier in {STANDARD, PREMIUM}
    return False


def _as_capabilities(value: Any) -> frozenset[str]:
    if isinstance(value, str):
        return frozenset({value})
    if isinstance(value, Iterable):
        return frozenset(str(item) for item in value)
    return frozenset()
