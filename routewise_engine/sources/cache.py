"""On-disk snapshot of the raw model listing."""

from __future__ import annotations

import logging
from copy import deepcopy
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from ..utils import read_json, remove_file, write_json

logger = logging.getLogger(__name__)


@dataclass
class ModelListingCache:
    path: Path

    def load(self) -> dict[str, Any] | None:
        payload = read_json(self.path, None)
        if not isinstance(payload, dict) or not isinstance(payload.get("data"), list):
            if self.path.exists():
                logger.debug("Ignoring unreadable model cache at %s", self.path)
            return None
        logger.debug("Loaded model cache from %s", self.path)
        return payload

    def save(self, payload: dict[str, Any]) -> None:
        write_json(self.path, deepcopy(payload))

    def clear(self) -> bool:
        return remove_file(self.path)
