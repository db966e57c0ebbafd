"""Pytest fixtures for the voting services test suite.

Services run in-process: each app gets an injected in-memory store and is
reached through httpx.ASGITransport, so no Redis server or network is
needed. The votes service's upstream client is wired to the in-process
voter and poll apps.
"""

from typing import AsyncGenerator

import httpx
import pytest

from voting_services.poll_api.config import Settings as PollSettings
from voting_services.poll_api.main import create_app as create_poll_app
from voting_services.poll_api.store import PollStore
from voting_services.shared.stats import RequestStats
from voting_services.shared.storage import MemoryBackend, RedisBackend
from voting_services.voter_api.config import Settings as VoterSettings
from voting_services.voter_api.main import create_app as create_voter_app
from voting_services.voter_api.store import VoterStore
from voting_services.votes_api.clients import UpstreamClient
from voting_services.votes_api.config import Settings as VotesSettings
from voting_services.votes_api.main import create_app as create_votes_app
from voting_services.votes_api.store import VoteStore

from tests.fakes import FakeAsyncRedis


@pytest.fixture(params=["memory", "redis"])
def backend(request):
    """Each storage backend in turn."""
    if request.param == "memory":
        return MemoryBackend()
    return RedisBackend(FakeAsyncRedis())


@pytest.fixture
def voter_store() -> VoterStore:
    return VoterStore(MemoryBackend())


@pytest.fixture
def poll_store() -> PollStore:
    return PollStore(MemoryBackend())


@pytest.fixture
def vote_store() -> VoteStore:
    return VoteStore(MemoryBackend())


@pytest.fixture
def voter_stats() -> RequestStats:
    return RequestStats()


@pytest.fixture
def voter_app(voter_store, voter_stats):
    return create_voter_app(
        settings=VoterSettings(STORE_BACKEND="memory"),
        store=voter_store,
        stats=voter_stats
    )


@pytest.fixture
def poll_app(poll_store):
    return create_poll_app(settings=PollSettings(STORE_BACKEND="memory"), store=poll_store)


@pytest.fixture
async def voter_client(voter_app) -> AsyncGenerator[httpx.AsyncClient, None]:
    """HTTP client for the in-process voter service."""
    transport = httpx.ASGITransport(app=voter_app)
    async with httpx.AsyncClient(transport=transport, base_url="http://voter-api") as client:
        yield client


@pytest.fixture
async def poll_client(poll_app) -> AsyncGenerator[httpx.AsyncClient, None]:
    """HTTP client for the in-process poll service."""
    transport = httpx.ASGITransport(app=poll_app)
    async with httpx.AsyncClient(transport=transport, base_url="http://poll-api") as client:
        yield client


@pytest.fixture
def upstream(voter_client, poll_client) -> UpstreamClient:
    """Votes service upstream client wired to the in-process services."""
    return UpstreamClient(voter_client, poll_client)


@pytest.fixture
def votes_app(vote_store, upstream):
    return create_votes_app(
        settings=VotesSettings(STORE_BACKEND="memory"),
        store=vote_store,
        upstream=upstream
    )


@pytest.fixture
async def votes_client(votes_app) -> AsyncGenerator[httpx.AsyncClient, None]:
    """HTTP client for the in-process votes service."""
    transport = httpx.ASGITransport(app=votes_app)
    async with httpx.AsyncClient(transport=transport, base_url="http://votes-api") as client:
        yield client


@pytest.fixture
async def seeded(voter_client, poll_client):
    """Voters 1-2 and polls 1-2 as in the demo scenario.

    Poll 1 "Tea or Coffee" has options 1 (Tea) and 2 (Coffee); poll 2
    "Favourite Sport" has options 1-3.
    """
    await voter_client.post("/voters/1", json={"firstName": "Nisarg", "lastName": "Patel"})
    await voter_client.post("/voters/2", json={"firstName": "Avani", "lastName": "Patel"})

    await poll_client.post(
        "/polls/1",
        json={
            "pollTitle": "Tea or Coffee",
            "pollQuestion": "Do you like Tea or Coffee?",
            "pollOptions": [
                {"pollOptionId": 1, "pollOptionText": "Tea"},
                {"pollOptionId": 2, "pollOptionText": "Coffee"}
            ]
        }
    )
    await poll_client.post(
        "/polls/2",
        json={"pollTitle": "Favourite Sport", "pollQuestion": "Your favourite sport?"}
    )
    for option_id, text in [(1, "Cricket"), (2, "Football"), (3, "Hockey")]:
        await poll_client.post(f"/polls/2/options/{option_id}", json={"optionText": text})
