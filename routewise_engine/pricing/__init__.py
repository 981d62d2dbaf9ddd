"""Token pricing helpers."""

from __future__ import annotations

from .estimator import TokenCostEstimate, TokenCostEstimator

__all__ = ["TokenCostEstimate", "TokenCostEstimator"]
