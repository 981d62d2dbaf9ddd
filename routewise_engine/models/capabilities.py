"""Capability checks for callers about to send a completion request."""

from __future__ import annotations

import logging
from typing import Any, Iterable, Mapping, Sequence

from ..errors import CapabilityError
from .registry import ModelRegistry

logger = logging.getLogger(__name__)

AUTO_ROUTER_MODEL = "openrouter/auto"


class CapabilityChecker:
    def __init__(self, registry: ModelRegistry, strict: bool | None = None) -> None:
        self.registry = registry
        self.strict = registry.settings.strict_capabilities if strict is None else strict
        self._warned: set[tuple[str, str]] = set()

    def check(self, model: str | Sequence[str], capability: str, feature: str | None = None) -> bool:
        """Return whether ``model`` advertises ``capability``.

        Fallback lists and the auto router are not checked. Unsupported
        capabilities raise ``CapabilityError`` in strict mode and otherwise log
        one warning per model/capability pair.
        """
        if not isinstance(model, str) or model == AUTO_ROUTER_MODEL:
            return True
        if self.registry.has_capability(model, capability):
            return True
        label = feature or capability
        if self.strict:
            raise CapabilityError(
                f"Model '{model}' does not support {label} (missing '{capability}' capability)."
            )
        key = (model, capability)
        if key not in self._warned:
            self._warned.add(key)
            logger.warning(
                "Model '%s' may not support %s (missing '%s' capability); the request will still be attempted.",
                model,
                label,
                capability,
            )
        return False


def messages_contain_images(messages: Iterable[Mapping[str, Any]]) -> bool:
    for message in messages:
        content = message.get("content")
        if not isinstance(content, list):
            continue
        for part in content:
            if isinstance(part, Mapping) and part.get("type") == "image_url":
                return True
    return False
