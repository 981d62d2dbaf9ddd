"""Normalized model specification."""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Mapping


CHAT = "chat"
FUNCTION_CALLING = "function_calling"
STRUCTURED_OUTPUTS = "structured_outputs"
VISION = "vision"
LONG_CONTEXT = "long_context"
CAPABILITIES = frozenset({CHAT, FUNCTION_CALLING, STRUCTURED_OUTPUTS, VISION, LONG_CONTEXT})

STANDARD = "standard"
PREMIUM = "premium"
PERFORMANCE_TIERS = (STANDARD, PREMIUM)


@dataclass(frozen=True)
class TokenCost:
    input: float
    output: float


@dataclass(frozen=True)
class ModelSpec:
    id: str
    name: str
    cost_per_1k_tokens: TokenCost
    context_length: int
    capabilities: frozenset[str] = frozenset({CHAT})
    description: str = ""
    supported_parameters: tuple[str, ...] = ()
    architecture: Mapping[str, Any] = field(
        default_factory=lambda: MappingProxyType({}), hash=False, compare=False
    )
    performance_tier: str = STANDARD
    fallbacks: tuple[str, ...] = ()
    created_at: int = 0

    @property
    def provider(self) -> str:
        return self.id.split("/", 1)[0]

    @property
    def input_cost(self) -> float:
        return self.cost_per_1k_tokens.input

    @property
    def output_cost(self) -> float:
        return self.cost_per_1k_tokens.output

    def supports(self, capability: str) -> bool:
        return capability in self.capabilities
