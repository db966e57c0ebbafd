"""
Vote recording workflow.

Adding a vote:
1. FETCH_VOTERS   - the voter must appear in GET /voters
2. FETCH_POLLS    - the poll must appear in GET /polls and offer the option
3. STORE_VOTE     - the vote id must be free in the vote store
4. APPEND_HISTORY - POST /voters/{voterId}/polls/{pollId}

Deleting a vote:
1. FETCH_VOTE     - the vote must exist
2. REMOVE_HISTORY - DELETE /voters/{voterId}/polls/{pollId} (a 404 means the
                    entry is already gone and is not a failure)
3. DELETE_VOTE    - remove the vote record

Steps are not transactional. A failure after STORE_VOTE leaves the vote
stored without a history entry, and a failure at DELETE_VOTE leaves the
vote without its history entry. Nothing is rolled back or retried; the
result reports which steps committed.
"""
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional

from voting_services.shared.errors import (
    NotFoundError,
    UpstreamServiceError,
    VotingError,
)
from voting_services.shared.models import Poll, Vote, utc_now

from .clients import UpstreamClient
from .store import VoteStore

logger = logging.getLogger(__name__)


class VoteStep(str, Enum):
    """Steps of the add and delete workflows."""
    FETCH_VOTERS = "fetch_voters"
    FETCH_POLLS = "fetch_polls"
    STORE_VOTE = "store_vote"
    APPEND_HISTORY = "append_history"
    FETCH_VOTE = "fetch_vote"
    REMOVE_HISTORY = "remove_history"
    DELETE_VOTE = "delete_vote"


@dataclass
class VoteWorkflowResult:
    """
    Outcome of a workflow run.

    Attributes:
        step: Last step attempted (the failing one when ok is False)
        vote: The vote added or deleted, when known
        error: Failure raised by the step
        committed: Steps whose side effects were applied
    """
    step: VoteStep
    vote: Optional[Vote] = None
    error: Optional[VotingError] = None
    committed: List[VoteStep] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def partially_applied(self) -> bool:
        """True when the run failed after committing a step."""
        return not self.ok and bool(self.committed)


class VoteRecorder:
    """Runs the add/delete workflows against the vote store and upstream services."""

    def __init__(self, store: VoteStore, upstream: UpstreamClient):
        self.store = store
        self.upstream = upstream

    async def _find_poll(self, poll_id: int) -> Poll:
        try:
            polls = await self.upstream.list_polls()
        except UpstreamServiceError as e:
            # Fail closed: an unreachable poll service means the poll is unknown
            raise NotFoundError(f"Could not find poll {poll_id}: {e.message}") from e

        for poll in polls:
            if poll.poll_id == poll_id:
                return poll
        raise NotFoundError(f"Could not find poll {poll_id}")

    async def add_vote(self, vote: Vote) -> VoteWorkflowResult:
        """
        Validate and record a vote, then append it to the voter's history.

        Args:
            vote: Vote with caller-chosen vote id

        Returns:
            VoteWorkflowResult; on failure error is one of NotFoundError
            (steps 1-2), AlreadyExistsError (step 3) or
            UpstreamServiceError (step 4, vote already stored)
        """
        result = VoteWorkflowResult(step=VoteStep.FETCH_VOTERS, vote=vote)
        try:
            try:
                voters = await self.upstream.list_voters()
            except UpstreamServiceError as e:
                raise NotFoundError(f"Could not find voter {vote.voter_id}: {e.message}") from e
            if not any(voter.voter_id == vote.voter_id for voter in voters):
                raise NotFoundError(f"Could not find voter {vote.voter_id}")

            result.step = VoteStep.FETCH_POLLS
            poll = await self._find_poll(vote.poll_id)
            if not poll.has_option(vote.vote_value):
                raise NotFoundError(
                    f"Could not find option {vote.vote_value} in poll {vote.poll_id}"
                )

            result.step = VoteStep.STORE_VOTE
            await self.store.add(vote)
            result.committed.append(VoteStep.STORE_VOTE)

            result.step = VoteStep.APPEND_HISTORY
            await self.upstream.add_voter_poll(vote.voter_id, vote.poll_id, utc_now())
            result.committed.append(VoteStep.APPEND_HISTORY)
        except VotingError as e:
            result.error = e
            if result.committed:
                logger.error(
                    f"Vote {vote.vote_id} partially recorded, failed at {result.step.value}: {e}"
                )
            else:
                logger.warning(f"Vote {vote.vote_id} rejected at {result.step.value}: {e}")
            return result

        logger.info(
            f"Vote recorded: vote={vote.vote_id}, voter={vote.voter_id}, "
            f"poll={vote.poll_id}, option={vote.vote_value}"
        )
        return result

    async def change_vote(self, vote_id: int, vote_value: int) -> VoteWorkflowResult:
        """
        Change the chosen option of an existing vote.

        The new option must exist in the vote's poll. The voter's history
        is keyed by poll, so it is left unchanged.
        """
        result = VoteWorkflowResult(step=VoteStep.FETCH_VOTE)
        try:
            vote = await self.store.get(vote_id)
            result.vote = vote

            result.step = VoteStep.FETCH_POLLS
            poll = await self._find_poll(vote.poll_id)
            if not poll.has_option(vote_value):
                raise NotFoundError(f"Could not find option {vote_value} in poll {vote.poll_id}")

            result.step = VoteStep.STORE_VOTE
            result.vote = await self.store.update(vote.model_copy(update={"vote_value": vote_value}))
            result.committed.append(VoteStep.STORE_VOTE)
        except VotingError as e:
            result.error = e
            logger.warning(f"Vote {vote_id} not changed at {result.step.value}: {e}")
            return result

        logger.info(f"Vote {vote_id} changed to option {vote_value}")
        return result

    async def delete_vote(self, vote_id: int) -> VoteWorkflowResult:
        """
        Remove a vote from the voter's history, then delete the vote.

        Returns:
            VoteWorkflowResult; on failure error is NotFoundError (step 1)
            or UpstreamServiceError (step 2, transport failure or an error
            status other than 404; the vote is left in place)
        """
        result = VoteWorkflowResult(step=VoteStep.FETCH_VOTE)
        try:
            vote = await self.store.get(vote_id)
            result.vote = vote

            result.step = VoteStep.REMOVE_HISTORY
            # A missing voter or history entry leaves nothing to remove
            if await self.upstream.delete_voter_poll(vote.voter_id, vote.poll_id):
                result.committed.append(VoteStep.REMOVE_HISTORY)

            result.step = VoteStep.DELETE_VOTE
            await self.store.delete(vote_id)
            result.committed.append(VoteStep.DELETE_VOTE)
        except VotingError as e:
            result.error = e
            if result.committed:
                logger.error(f"Vote {vote_id} partially deleted, failed at {result.step.value}: {e}")
            else:
                logger.warning(f"Vote {vote_id} not deleted at {result.step.value}: {e}")
            return result

        logger.info(f"Vote {vote_id} deleted")
        return result
