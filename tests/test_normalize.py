from __future__ import annotations

from typing import Any

import pytest

from routewise_engine.models.normalize import (
    LONG_CONTEXT_THRESHOLD,
    determine_performance_tier,
    normalize_model,
    normalize_models,
)


def _raw_model(
    model_id: str = "acme/chat-1",
    *,
    prompt: Any = "0.000001",
    completion: Any = "0.000002",
    context_length: Any = 8192,
    params: tuple[str, ...] = (),
    modalities: tuple[str, ...] = ("text",),
    created: Any = 1_700_000_000,
) -> dict[str, Any]:
    return {
        "id": model_id,
        "name": f"{model_id} display",
        "description": "fixture model",
        "pricing": {"prompt": prompt, "completion": completion},
        "context_length": context_length,
        "supported_parameters": list(params),
        "architecture": {"input_modalities": list(modalities), "output_modalities": ["text"]},
        "created": created,
    }


def test_normalize_maps_basic_fields() -> None:
    spec = normalize_model(_raw_model(prompt="0.000003", completion="0.000015", context_length=32000))

    assert spec is not None
    assert spec.id == "acme/chat-1"
    assert spec.name == "acme/chat-1 display"
    assert spec.description == "fixture model"
    assert spec.cost_per_1k_tokens.input == 0.000003
    assert spec.cost_per_1k_tokens.output == 0.000015
    assert spec.context_length == 32000
    assert spec.created_at == 1_700_000_000
    assert spec.provider == "acme"
    assert spec.fallbacks == ()
    assert spec.capabilities == frozenset({"chat"})


def test_function_calling_requires_both_tool_markers() -> None:
    both = normalize_model(_raw_model(params=("tools", "tool_choice", "temperature")))
    tools_only = normalize_model(_raw_model(params=("tools", "temperature")))
    choice_only = normalize_model(_raw_model(params=("tool_choice",)))

    assert both is not None and "function_calling" in both.capabilities
    assert tools_only is not None and "function_calling" not in tools_only.capabilities
    assert choice_only is not None and "function_calling" not in choice_only.capabilities


def test_structured_outputs_from_either_marker() -> None:
    native = normalize_model(_raw_model(params=("structured_outputs",)))
    response_format = normalize_model(_raw_model(params=("response_format",)))
    neither = normalize_model(_raw_model(params=("temperature",)))

    assert native is not None and "structured_outputs" in native.capabilities
    assert response_format is not None and "structured_outputs" in response_format.capabilities
    assert neither is not None and "structured_outputs" not in neither.capabilities


def test_vision_from_image_input_modality() -> None:
    spec = normalize_model(_raw_model(modalities=("text", "image")))
    assert spec is not None
    assert spec.supports("vision")


def test_long_context_threshold_is_exclusive() -> None:
    at_threshold = normalize_model(_raw_model(context_length=LONG_CONTEXT_THRESHOLD))
    above = normalize_model(_raw_model(context_length=LONG_CONTEXT_THRESHOLD + 1))

    assert at_threshold is not None and "long_context" not in at_threshold.capabilities
    assert above is not None and "long_context" in above.capabilities


def test_performance_tier_threshold() -> None:
    premium = normalize_model(_raw_model(prompt="0.00002"))
    standard = normalize_model(_raw_model(prompt="0.000005"))
    boundary = normalize_model(_raw_model(prompt="0.00001"))

    assert premium is not None and premium.performance_tier == "premium"
    assert standard is not None and standard.performance_tier == "standard"
    assert boundary is not None and boundary.performance_tier == "standard"


def test_performance_tier_threshold_is_overridable() -> None:
    spec = normalize_model(_raw_model(prompt="0.000005"), premium_input_cost=0.000001)
    assert spec is not None
    assert spec.performance_tier == "premium"
    assert determine_performance_tier(0.5, threshold=1.0) == "standard"


def test_malformed_entries_are_dropped() -> None:
    assert normalize_model({"id": "broken-model"}) is None
    assert normalize_model(_raw_model(context_length=0)) is None
    assert normalize_model(_raw_model(context_length="lots")) is None
    assert normalize_model(_raw_model(prompt="-1")) is None
    assert normalize_model(_raw_model(completion=None)) is None
    assert normalize_model(_raw_model(prompt="NaN")) is None
    assert normalize_model(_raw_model(completion="nan")) is None
    assert normalize_model(_raw_model(prompt="inf")) is None
    assert normalize_model(_raw_model(completion="-Infinity")) is None
    assert normalize_model("not-a-model") is None


def test_architecture_is_read_only() -> None:
    raw = _raw_model(modalities=("text", "image"))
    spec = normalize_model(raw)

    assert spec is not None
    assert spec.architecture["input_modalities"] == ["text", "image"]
    with pytest.raises(TypeError):
        spec.architecture["input_modalities"] = ["text"]  # type: ignore[index]
    raw["architecture"]["extra"] = True
    assert "extra" not in spec.architecture


def test_missing_display_fields_fall_back_to_defaults() -> None:
    raw = _raw_model()
    del raw["name"]
    del raw["description"]
    del raw["supported_parameters"]
    del raw["architecture"]
    del raw["created"]

    spec = normalize_model(raw)

    assert spec is not None
    assert spec.name == "acme/chat-1"
    assert spec.description == ""
    assert spec.supported_parameters == ()
    assert spec.created_at == 0
    assert spec.capabilities == frozenset({"chat"})


def test_normalize_models_skips_bad_entries_and_keeps_order() -> None:
    payload = {
        "data": [
            _raw_model("acme/b"),
            {"id": "broken-model"},
            _raw_model("acme/a"),
        ]
    }

    models = normalize_models(payload)

    assert list(models) == ["acme/b", "acme/a"]


def test_normalize_models_without_data_list_is_empty() -> None:
    assert normalize_models({}) == {}
    assert normalize_models({"data": "nope"}) == {}
    assert normalize_models(None) == {}
