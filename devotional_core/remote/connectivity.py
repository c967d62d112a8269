"""Short reachability probe used before sync and profile refreshes."""

from __future__ import annotations

import httpx

from devotional_core.logging import get_logger

logger = get_logger(__name__)

DEFAULT_PROBE_URL = "https://www.google.com/generate_204"
DEFAULT_PROBE_TIMEOUT_SEC = 5.0


def check_connectivity(
    url: str = DEFAULT_PROBE_URL,
    timeout: float = DEFAULT_PROBE_TIMEOUT_SEC,
    transport: httpx.BaseTransport | None = None,
) -> bool:
    """True if any HTTP response comes back within timeout."""
    try:
        with httpx.Client(timeout=timeout, transport=transport) as client:
            resp = client.get(url)
    except httpx.HTTPError as e:
        logger.info("connectivity_probe_failed", url=url, error=str(e))
        return False
    logger.debug("connectivity_probe_ok", url=url, status_code=resp.status_code)
    return True
