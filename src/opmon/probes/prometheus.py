# src/opmon/probes/prometheus.py
import logging
from typing import Tuple

import httpx

from opmon.utils.http_client import get_async_http_client

logger = logging.getLogger(__name__)

# Status reported when no HTTP response was received at all.
NO_RESPONSE = "000"


async def probe_query_endpoint(
    base_url: str, token: str, query: str = "up", verify: bool = False
) -> Tuple[str, bool]:
    """
    Issues an authenticated instant query against a Prometheus API from this machine.

    Returns:
        (status, success): the HTTP status code as a string ("000" when the request
        failed) and whether the body reported "status": "success".
    """
    url = f"{base_url.rstrip('/')}/api/v1/query"
    try:
        async with get_async_http_client(verify=verify, bearer_token=token) as client:
            resp = await client.get(url, params={"query": query})
    except httpx.RequestError as e:
        logger.debug("Prometheus probe failed for %s -> %s", base_url, e)
        return NO_RESPONSE, False

    try:
        body = resp.json()
        success = isinstance(body, dict) and body.get("status") == "success"
    except ValueError:
        success = False

    logger.info("Probing Prometheus %s -> status=%s success=%s", base_url, resp.status_code, success)
    return str(resp.status_code), success
