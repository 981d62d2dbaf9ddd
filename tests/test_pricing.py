from __future__ import annotations

import pytest

from routewise_engine.models.spec import ModelSpec, TokenCost
from routewise_engine.pricing.estimator import TokenCostEstimator


def _text_model(input_cost: float, output_cost: float) -> ModelSpec:
    return ModelSpec(
        id="acme/text",
        name="acme/text",
        cost_per_1k_tokens=TokenCost(input=input_cost, output=output_cost),
        context_length=8192,
    )


def test_token_cost_estimator() -> None:
    estimate = TokenCostEstimator().estimate(_text_model(0.003, 0.015), input_tokens=1500, output_tokens=200)

    assert estimate.input_usd == pytest.approx(0.0045)
    assert estimate.output_usd == pytest.approx(0.003)
    assert estimate.total_usd == pytest.approx(0.0075)


def test_token_cost_estimator_unknown_model_is_free() -> None:
    estimate = TokenCostEstimator().estimate(None, input_tokens=1000, output_tokens=1000)
    assert estimate.total_usd == 0.0


def test_token_cost_estimator_ignores_negative_counts() -> None:
    estimate = TokenCostEstimator().estimate(_text_model(0.01, 0.02), input_tokens=-5, output_tokens=1000)
    assert estimate.input_usd == 0.0
    assert estimate.output_usd == pytest.approx(0.02)
