"""Turn raw model listing entries into ``ModelSpec`` values.

Upstream entries follow the OpenRouter ``GET /models`` shape::

    {"id": "vendor/model", "name": ..., "pricing": {"prompt": "0.000003",
     "completion": "0.000015"}, "context_length": 200000,
     "supported_parameters": [...], "architecture": {"input_modalities": [...]},
     "created": 1717000000, "description": ...}

Entries that cannot be priced or sized are skipped rather than failing the
whole batch.
"""

from __future__ import annotations

import logging
import math
from types import MappingProxyType
from typing import Any, Mapping

from ..config import DEFAULT_PREMIUM_INPUT_COST
from .spec import (
    CHAT,
    FUNCTION_CALLING,
    LONG_CONTEXT,
    PREMIUM,
    STANDARD,
    STRUCTURED_OUTPUTS,
    VISION,
    ModelSpec,
    TokenCost,
)

logger = logging.getLogger(__name__)

LONG_CONTEXT_THRESHOLD = 100_000


def extract_capabilities(
    supported_parameters: tuple[str, ...],
    input_modalities: tuple[str, ...],
    context_length: int,
) -> frozenset[str]:
    capabilities = {CHAT}
    params = set(supported_parameters)
    if "tools" in params and "tool_choice" in params:
        capabilities.add(FUNCTION_CALLING)
    if "structured_outputs" in params or "response_format" in params:
        capabilities.add(STRUCTURED_OUTPUTS)
    if "image" in input_modalities:
        capabilities.add(VISION)
    if context_length > LONG_CONTEXT_THRESHOLD:
        capabilities.add(LONG_CONTEXT)
    return frozenset(capabilities)


def determine_performance_tier(input_cost: float, threshold: float = DEFAULT_PREMIUM_INPUT_COST) -> str:
    return PREMIUM if input_cost > threshold else STANDARD


def determine_fallbacks(model_id: str, raw: Mapping[str, Any]) -> tuple[str, ...]:
    # Extension point; upstream metadata carries no substitution hints yet.
    return ()


def normalize_model(
    raw: Any, *, premium_input_cost: float = DEFAULT_PREMIUM_INPUT_COST
) -> ModelSpec | None:
    if not isinstance(raw, Mapping):
        return None
    model_id = raw.get("id")
    if not isinstance(model_id, str) or not model_id.strip():
        return None

    context_length = _to_int(raw.get("context_length"))
    if context_length is None or context_length <= 0:
        return None

    pricing = raw.get("pricing")
    if not isinstance(pricing, Mapping):
        return None
    input_cost = _to_float(pricing.get("prompt"))
    output_cost = _to_float(pricing.get("completion"))
    if input_cost is None or output_cost is None or input_cost < 0 or output_cost < 0:
        return None

    supported_parameters = _str_tuple(raw.get("supported_parameters"))
    architecture = raw.get("architecture")
    if not isinstance(architecture, Mapping):
        architecture = {}
    input_modalities = _str_tuple(architecture.get("input_modalities"))

    name = raw.get("name")
    description = raw.get("description")
    return ModelSpec(
        id=model_id,
        name=name if isinstance(name, str) and name else model_id,
        description=description if isinstance(description, str) else "",
        cost_per_1k_tokens=TokenCost(input=input_cost, output=output_cost),
        context_length=context_length,
        capabilities=extract_capabilities(supported_parameters, input_modalities, context_length),
        supported_parameters=supported_parameters,
        architecture=MappingProxyType(dict(architecture)),
        performance_tier=determine_performance_tier(input_cost, premium_input_cost),
        fallbacks=determine_fallbacks(model_id, raw),
        created_at=_to_int(raw.get("created")) or 0,
    )


def normalize_models(
    payload: Any, *, premium_input_cost: float = DEFAULT_PREMIUM_INPUT_COST
) -> dict[str, ModelSpec]:
    entries = payload.get("data") if isinstance(payload, Mapping) else None
    if not isinstance(entries, list):
        logger.warning("Model listing has no 'data' list; registry is empty.")
        return {}
    models: dict[str, ModelSpec] = {}
    skipped: list[str] = []
    for entry in entries:
        spec = normalize_model(entry, premium_input_cost=premium_input_cost)
        if spec is None:
            label = entry.get("id") if isinstance(entry, Mapping) else None
            skipped.append(str(label or "<unknown>"))
            continue
        models[spec.id] = spec
    if skipped:
        logger.warning("Skipped %d malformed model entries: %s", len(skipped), ", ".join(skipped[:10]))
    return models


def _to_float(value: Any) -> float | None:
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return number if math.isfinite(number) else None


def _to_int(value: Any) -> int | None:
    if value is None or isinstance(value, bool):
        return None
    try:
        return int(value)
    except (TypeError, ValueError, OverflowError):
        return None


def _str_tuple(value: Any) -> tuple[str, ...]:
    if not isinstance(value, (list, tuple)):
        return ()
    return tuple(item for item in value if isinstance(item, str))
