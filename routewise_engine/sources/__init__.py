"""Raw model metadata sources."""

from __future__ import annotations

from .cache import ModelListingCache
from .remote import fetch_models

__all__ = ["ModelListingCache", "fetch_models"]
