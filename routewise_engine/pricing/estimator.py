"""Cost estimation utilities."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ..models.spec import ModelSpec


@dataclass(frozen=True)
class TokenCostEstimate:
    input_usd: float
    output_usd: float

    @property
    def total_usd(self) -> float:
        return self.input_usd + self.output_usd


class TokenCostEstimator:
    def estimate(self, spec: ModelSpec | None, input_tokens: int = 0, output_tokens: int = 0) -> TokenCostEstimate:
        if spec is None:
            return TokenCostEstimate(0.0, 0.0)
        return TokenCostEstimate(
            input_usd=(max(input_tokens, 0) / 1000.0) * spec.cost_per_1k_tokens.input,
            output_usd=(max(output_tokens, 0) / 1000.0) * spec.cost_per_1k_tokens.output,
        )
