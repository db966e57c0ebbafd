"""Integration tests for the health and metrics endpoints."""

from datetime import datetime

import pytest


@pytest.mark.integration
@pytest.mark.asyncio
class TestHealth:
    """Request counters reported by /<resource>/health."""

    async def test_fresh_service(self, voter_client):
        """Test GET /voters/health on a fresh app.

        Verifies:
        - status is ok with zero errors
        - The health request itself is counted
        - bootTime is ISO-8601
        """
        response = await voter_client.get("/voters/health")

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "ok"
        assert body["totalAPICalls"] == 1
        assert body["totalAPICallsError"] == 0
        assert body["uptime"] >= 0
        datetime.fromisoformat(body["bootTime"])

    async def test_counts_calls_and_errors(self, voter_client):
        """Test counters after a mix of successful and failing requests.

        Verifies:
        - 4xx responses are counted as errors
        - averageRequestTime is totalRequestTime over totalAPICalls
        """
        await voter_client.post("/voters/1", json={"firstName": "Nisarg"})
        await voter_client.get("/voters/1")
        await voter_client.get("/voters/2")
        await voter_client.get("/voters/abc")

        body = (await voter_client.get("/voters/health")).json()

        assert body["totalAPICalls"] == 5
        assert body["totalAPICallsError"] == 2
        assert body["totalRequestTime"] > 0
        assert body["averageRequestTime"] == pytest.approx(body["totalRequestTime"] / 5)

    async def test_stats_object_is_shared_with_app(self, voter_client, voter_stats):
        """Test the injected RequestStats is the one the middleware updates."""
        await voter_client.get("/voters")

        assert voter_stats.total_calls == 1
        assert voter_stats.error_calls == 0

    async def test_each_service_has_its_own_health(self, poll_client, votes_client):
        """Test poll and votes apps keep separate counters."""
        assert (await poll_client.get("/polls/health")).json()["totalAPICalls"] == 1
        assert (await votes_client.get("/votes/health")).json()["totalAPICalls"] == 1


@pytest.mark.integration
@pytest.mark.asyncio
async def test_metrics_endpoint(voter_client):
    """Test GET /metrics exposes the request counter labelled by service."""
    await voter_client.get("/voters")

    response = await voter_client.get("/metrics")

    assert response.status_code == 200
    assert "http_requests_total" in response.text
    assert 'service="voter-api"' in response.text
