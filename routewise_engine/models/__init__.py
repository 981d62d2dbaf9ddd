"""Model registry and selection."""

from __future__ import annotations

from .capabilities import CapabilityChecker, messages_contain_images
from .registry import ModelRegistry, rank_models
from .requirements import Requirements, meets_requirements
from .selectors import (
    ModelSelector,
    ProviderPreferences,
    RankedModel,
    SelectionCriteria,
    selector_from_requirements,
)
from .spec import CAPABILITIES, ModelSpec, TokenCost

__all__ = [
    "CAPABILITIES",
    "CapabilityChecker",
    "ModelRegistry",
    "ModelSelector",
    "ModelSpec",
    "ProviderPreferences",
    "RankedModel",
    "Requirements",
    "SelectionCriteria",
    "TokenCost",
    "meets_requirements",
    "messages_contain_images",
    "rank_models",
    "selector_from_requirements",
]
