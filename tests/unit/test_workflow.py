"""Tests for the vote recording workflow.

The voter and poll services are replaced by httpx.MockTransport handlers so
that each workflow step can be made to fail on its own.
"""

from typing import Dict, List, Set, Tuple

import httpx
import pytest

from voting_services.shared.errors import AlreadyExistsError, NotFoundError, UpstreamServiceError
from voting_services.shared.models import Vote
from voting_services.votes_api.clients import UpstreamClient
from voting_services.votes_api.workflow import VoteRecorder, VoteStep


class FakeServices:
    """Voter and poll services answering from plain dicts."""

    def __init__(self):
        self.voters: List[Dict] = [
            {"voterId": 1, "firstName": "Nisarg", "lastName": "Patel", "voteHistory": []}
        ]
        self.polls: List[Dict] = [
            {
                "pollId": 1,
                "pollTitle": "Tea or Coffee",
                "pollQuestion": "Do you like Tea or Coffee?",
                "pollOptions": [
                    {"pollOptionId": 1, "pollOptionText": "Tea"},
                    {"pollOptionId": 2, "pollOptionText": "Coffee"}
                ]
            }
        ]
        self.calls: List[Tuple[str, str]] = []
        # (method, path) pairs that answer 500
        self.errors: Set[Tuple[str, str]] = set()
        # (method, path) pairs that answer 404
        self.missing: Set[Tuple[str, str]] = set()
        # (method, path) pairs whose connection fails
        self.unreachable: Set[Tuple[str, str]] = set()

    def handler(self, request: httpx.Request) -> httpx.Response:
        key = (request.method, request.url.path)
        self.calls.append(key)
        if key in self.unreachable:
            raise httpx.ConnectError("connection refused", request=request)
        if key in self.errors:
            return httpx.Response(500, json={"detail": "boom"})
        if key in self.missing:
            return httpx.Response(404, json={"detail": "Not Found"})
        if key == ("GET", "/voters"):
            return httpx.Response(200, json=self.voters)
        if key == ("GET", "/polls"):
            return httpx.Response(200, json=self.polls)
        if request.url.path.startswith("/voters/"):
            return httpx.Response(200, json={"message": "ok"})
        return httpx.Response(404, json={"detail": "Not Found"})

    def client(self) -> UpstreamClient:
        transport = httpx.MockTransport(self.handler)
        return UpstreamClient(
            httpx.AsyncClient(transport=transport, base_url="http://voter-api"),
            httpx.AsyncClient(transport=transport, base_url="http://poll-api")
        )


@pytest.fixture
def services() -> FakeServices:
    return FakeServices()


@pytest.fixture
def recorder(services, vote_store) -> VoteRecorder:
    return VoteRecorder(vote_store, services.client())


def vote(vote_id: int = 1, voter_id: int = 1, poll_id: int = 1, value: int = 1) -> Vote:
    return Vote(vote_id=vote_id, voter_id=voter_id, poll_id=poll_id, vote_value=value)


@pytest.mark.asyncio
class TestAddVote:
    """AddVote steps and failure points."""

    async def test_success_stores_vote_and_appends_history(self, recorder, services, vote_store):
        """Test a valid vote runs every step.

        Verifies:
        - Both side-effecting steps are committed
        - The vote is stored
        - The history entry is posted to the voter service
        """
        result = await recorder.add_vote(vote())

        assert result.ok
        assert result.committed == [VoteStep.STORE_VOTE, VoteStep.APPEND_HISTORY]
        assert await vote_store.get(1) == vote()
        assert ("POST", "/voters/1/polls/1") in services.calls

    @pytest.mark.parametrize(
        "bad_vote, step",
        [
            (vote(voter_id=2), VoteStep.FETCH_VOTERS),
            (vote(poll_id=2), VoteStep.FETCH_POLLS),
            (vote(value=3), VoteStep.FETCH_POLLS),
        ]
    )
    async def test_unknown_reference_is_not_found(self, recorder, vote_store, bad_vote, step):
        """Test an unknown voter, poll or option stops before anything is stored."""
        result = await recorder.add_vote(bad_vote)

        assert not result.ok
        assert isinstance(result.error, NotFoundError)
        assert result.step == step
        assert result.committed == []
        assert await vote_store.get_all() == []

    @pytest.mark.parametrize("path", ["/voters", "/polls"])
    async def test_unreachable_lookup_fails_closed(self, recorder, services, vote_store, path):
        """Test an unreachable lookup service is treated as an unknown reference."""
        services.unreachable.add(("GET", path))

        result = await recorder.add_vote(vote())

        assert isinstance(result.error, NotFoundError)
        assert await vote_store.get_all() == []

    async def test_lookup_error_status_fails_closed(self, recorder, services, vote_store):
        """Test a 5xx from the voter listing is treated as an unknown voter."""
        services.errors.add(("GET", "/voters"))

        result = await recorder.add_vote(vote())

        assert result.step == VoteStep.FETCH_VOTERS
        assert isinstance(result.error, NotFoundError)

    async def test_duplicate_vote_id_conflicts_without_touching_history(self, recorder, services):
        """Test a taken vote id fails at STORE_VOTE and never posts history."""
        await recorder.add_vote(vote())
        services.calls.clear()

        result = await recorder.add_vote(vote(value=2))

        assert result.step == VoteStep.STORE_VOTE
        assert isinstance(result.error, AlreadyExistsError)
        assert ("POST", "/voters/1/polls/1") not in services.calls

    async def test_history_failure_leaves_vote_stored(self, recorder, services, vote_store):
        """Test a failed history append after the vote was stored.

        Verifies:
        - The result is partially applied with STORE_VOTE committed
        - The stored vote is not rolled back
        """
        services.errors.add(("POST", "/voters/1/polls/1"))

        result = await recorder.add_vote(vote())

        assert result.step == VoteStep.APPEND_HISTORY
        assert isinstance(result.error, UpstreamServiceError)
        assert result.committed == [VoteStep.STORE_VOTE]
        assert result.partially_applied
        assert await vote_store.get(1) == vote()


@pytest.mark.asyncio
class TestDeleteVote:
    """DeleteVote steps and failure points."""

    async def test_success_removes_history_then_vote(self, recorder, services, vote_store):
        """Test a delete removes the history entry, then the vote."""
        await vote_store.add(vote())

        result = await recorder.delete_vote(1)

        assert result.ok
        assert result.committed == [VoteStep.REMOVE_HISTORY, VoteStep.DELETE_VOTE]
        assert ("DELETE", "/voters/1/polls/1") in services.calls
        assert await vote_store.get_all() == []

    async def test_missing_vote(self, recorder, services):
        """Test deleting an unknown vote fails without calling the voter service."""
        result = await recorder.delete_vote(1)

        assert result.step == VoteStep.FETCH_VOTE
        assert isinstance(result.error, NotFoundError)
        assert services.calls == []

    async def test_missing_history_entry_still_deletes_vote(self, recorder, services, vote_store):
        """Test a 404 from the voter service when removing history.

        The voter or its entry is already gone, so the vote is deleted and
        only DELETE_VOTE is committed.
        """
        await vote_store.add(vote())
        services.missing.add(("DELETE", "/voters/1/polls/1"))

        result = await recorder.delete_vote(1)

        assert result.ok
        assert result.committed == [VoteStep.DELETE_VOTE]
        assert await vote_store.get_all() == []

    @pytest.mark.parametrize("failure", ["errors", "unreachable"])
    async def test_history_failure_keeps_vote(self, recorder, services, vote_store, failure):
        """Test a 5xx or refused connection when removing history keeps the vote."""
        await vote_store.add(vote())
        getattr(services, failure).add(("DELETE", "/voters/1/polls/1"))

        result = await recorder.delete_vote(1)

        assert result.step == VoteStep.REMOVE_HISTORY
        assert isinstance(result.error, UpstreamServiceError)
        assert not result.partially_applied
        assert await vote_store.get(1) == vote()


@pytest.mark.asyncio
class TestChangeVote:
    """Changing the chosen option."""

    async def test_change_to_existing_option(self, recorder, vote_store):
        """Test switching to another option of the same poll."""
        await vote_store.add(vote())

        result = await recorder.change_vote(1, 2)

        assert result.ok
        assert (await vote_store.get(1)).vote_value == 2

    async def test_change_to_unknown_option(self, recorder, vote_store):
        """Test an option the poll does not offer leaves the vote unchanged."""
        await vote_store.add(vote())

        result = await recorder.change_vote(1, 5)

        assert isinstance(result.error, NotFoundError)
        assert (await vote_store.get(1)).vote_value == 1

    async def test_change_missing_vote(self, recorder):
        """Test changing an unknown vote fails at FETCH_VOTE."""
        result = await recorder.change_vote(9, 1)

        assert result.step == VoteStep.FETCH_VOTE
        assert isinstance(result.error, NotFoundError)


@pytest.mark.asyncio
class TestUpstreamClient:
    """Error reporting of the voter/poll service client."""

    async def test_unreadable_listing(self, services):
        """Test a voter listing that is not a list raises UpstreamServiceError."""
        services.voters = {"not": "a list"}
        upstream = services.client()

        with pytest.raises(UpstreamServiceError):
            await upstream.list_voters()
        await upstream.close()

    async def test_error_keeps_upstream_status(self, services):
        """Test an error reply records its status and a refused connection does not."""
        services.errors.add(("GET", "/polls"))
        services.unreachable.add(("GET", "/voters"))
        upstream = services.client()

        with pytest.raises(UpstreamServiceError) as exc:
            await upstream.list_polls()
        assert exc.value.upstream_status == 500

        with pytest.raises(UpstreamServiceError) as exc:
            await upstream.list_voters()
        assert exc.value.upstream_status is None
        await upstream.close()

    async def test_delete_voter_poll_reports_missing_entry(self, services):
        """Test delete_voter_poll returns False on 404 and True on success."""
        services.missing.add(("DELETE", "/voters/1/polls/2"))
        upstream = services.client()

        assert await upstream.delete_voter_poll(1, 1) is True
        assert await upstream.delete_voter_poll(1, 2) is False
        await upstream.close()
