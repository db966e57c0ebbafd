"""Voter store with per-voter vote history."""
import logging
from datetime import datetime
from typing import List

from voting_services.shared.errors import AlreadyExistsError, NotFoundError
from voting_services.shared.models import Voter, VoterPoll
from voting_services.shared.store import EntityStore

logger = logging.getLogger(__name__)


class VoterStore(EntityStore[Voter]):
    """Voters keyed by voter id, each owning a vote history."""

    model = Voter
    key_type = "voter"
    id_field = "voter_id"
    entity_name = "voter"

    def apply_update(self, existing: Voter, changes: Voter) -> Voter:
        # Vote history is only changed through the history operations
        return existing.model_copy(update={
            "first_name": changes.first_name,
            "last_name": changes.last_name,
        })

    async def get_history(self, voter_id: int) -> List[VoterPoll]:
        """
        Return a voter's vote history.

        Raises:
            NotFoundError: If the voter does not exist
        """
        voter = await self.get(voter_id)
        return voter.vote_history

    async def get_voter_poll(self, voter_id: int, poll_id: int) -> VoterPoll:
        """
        Return one history entry of a voter.

        Raises:
            NotFoundError: If the voter or the entry does not exist
        """
        voter = await self.get(voter_id)
        for entry in voter.vote_history:
            if entry.poll_id == poll_id:
                return entry
        raise NotFoundError(f"voter {voter_id} has no vote in poll {poll_id}")

    async def add_voter_poll(self, voter_id: int, poll_id: int, vote_date: datetime) -> VoterPoll:
        """
        Append a history entry for a poll.

        Raises:
            NotFoundError: If the voter does not exist
            AlreadyExistsError: If the voter already voted in this poll
        """
        voter = await self.get(voter_id)
        if any(entry.poll_id == poll_id for entry in voter.vote_history):
            raise AlreadyExistsError(f"voter {voter_id} has already voted in poll {poll_id}")

        entry = VoterPoll(poll_id=poll_id, vote_date=vote_date)
        voter.vote_history.append(entry)
        await self._save(voter)
        logger.info(f"Recorded poll {poll_id} in history of voter {voter_id}")
        return entry

    async def update_voter_poll(self, voter_id: int, poll_id: int, vote_date: datetime) -> VoterPoll:
        """
        Change the vote date of a history entry.

        Raises:
            NotFoundError: If the voter or the entry does not exist
        """
        voter = await self.get(voter_id)
        for index, entry in enumerate(voter.vote_history):
            if entry.poll_id == poll_id:
                updated = VoterPoll(poll_id=poll_id, vote_date=vote_date)
                voter.vote_history[index] = updated
                await self._save(voter)
                logger.info(f"Updated poll {poll_id} in history of voter {voter_id}")
                return updated
        raise NotFoundError(f"voter {voter_id} has no vote in poll {poll_id}")

    async def delete_voter_poll(self, voter_id: int, poll_id: int) -> None:
        """
        Remove a history entry.

        Raises:
            NotFoundError: If the voter or the entry does not exist
        """
        voter = await self.get(voter_id)
        remaining = [entry for entry in voter.vote_history if entry.poll_id != poll_id]
        if len(remaining) == len(voter.vote_history):
            raise NotFoundError(f"voter {voter_id} has no vote in poll {poll_id}")

        voter.vote_history = remaining
        await self._save(voter)
        logger.info(f"Removed poll {poll_id} from history of voter {voter_id}")
