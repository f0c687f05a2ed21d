"""
Tests for the workstation-side Prometheus probe. HTTP calls are mocked with respx.
"""

import httpx
import pytest
import respx

from opmon.probes import NO_RESPONSE, probe_query_endpoint

BASE = "https://prometheus.apps.example.com"


@pytest.mark.asyncio
@respx.mock
async def test_probe_success_sends_bearer_token():
    route = respx.get(f"{BASE}/api/v1/query").mock(
        return_value=httpx.Response(200, json={"status": "success", "data": {"resultType": "vector", "result": []}})
    )

    status, success = await probe_query_endpoint(BASE + "/", "tok123")

    assert (status, success) == ("200", True)
    request = route.calls.last.request
    assert request.headers["Authorization"] == "Bearer tok123"
    assert request.url.params["query"] == "up"


@pytest.mark.asyncio
@respx.mock
async def test_probe_unauthorized():
    respx.get(f"{BASE}/api/v1/query").mock(return_value=httpx.Response(403, text="Forbidden"))

    assert await probe_query_endpoint(BASE, "bad") == ("403", False)


@pytest.mark.asyncio
@respx.mock
async def test_probe_connection_failure_reports_no_response():
    respx.get(f"{BASE}/api/v1/query").mock(side_effect=httpx.ConnectTimeout("timed out"))

    assert await probe_query_endpoint(BASE, "tok") == (NO_RESPONSE, False)


@pytest.mark.asyncio
@respx.mock
async def test_probe_custom_query():
    route = respx.get(f"{BASE}/api/v1/query").mock(return_value=httpx.Response(200, json={"status": "error"}))

    status, success = await probe_query_endpoint(BASE, "tok", query="cluster_operator_conditions")

    assert status == "200"
    assert success is False
    assert route.calls.last.request.url.params["query"] == "cluster_operator_conditions"


@pytest.mark.asyncio
@respx.mock
async def test_probe_non_object_body_is_not_success():
    respx.get(f"{BASE}/api/v1/query").mock(return_value=httpx.Response(200, json=["success"]))

    assert await probe_query_endpoint(BASE, "tok") == ("200", False)
