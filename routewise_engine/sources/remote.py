"""Remote model listing fetch."""

from __future__ import annotations

import json
import logging
from typing import Any
from urllib.error import HTTPError, URLError
from urllib.request import Request, urlopen

from ..errors import RegistryFetchError

logger = logging.getLogger(__name__)

MODELS_PATH = "/models"


def fetch_models(api_base: str, timeout_s: float = 30.0) -> dict[str, Any]:
    url = f"{api_base.rstrip('/')}{MODELS_PATH}"
    logger.info("Fetching model listing from %s", url)
    status_code, raw = _get_text(url, {"accept": "application/json"}, timeout_s)
    if status_code < 200 or status_code >= 300:
        raise RegistryFetchError(f"Failed to fetch models ({status_code}): {raw[:200]}")
    try:
        payload = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise RegistryFetchError(f"Failed to parse model listing: {exc}") from exc
    if not isinstance(payload, dict):
        raise RegistryFetchError("Model listing is not a JSON object.")
    return payload


def _get_text(url: str, headers: dict[str, str], timeout_s: float) -> tuple[int, str]:
    req = Request(url, headers=dict(headers), method="GET")
    try:
        with urlopen(req, timeout=timeout_s) as response:
            status_code = int(getattr(response, "status", 200))
            raw = response.read().decode("utf-8")
    except HTTPError as exc:
        raw = exc.read().decode("utf-8", errors="replace") if exc.fp else str(exc)
        raise RegistryFetchError(f"Failed to fetch models ({exc.code}): {raw[:200]}") from exc
    except (URLError, OSError) as exc:
        raise RegistryFetchError(f"Network error fetching models: {exc}") from exc
    except UnicodeDecodeError as exc:
        raise RegistryFetchError(f"Failed to decode model listing: {exc}") from exc
    return status_code, raw
