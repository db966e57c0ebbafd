"""Poll store with per-poll options."""
import logging
from typing import List

from voting_services.shared.errors import AlreadyExistsError, NotFoundError
from voting_services.shared.models import Poll, PollOption
from voting_services.shared.store import EntityStore

logger = logging.getLogger(__name__)


class PollStore(EntityStore[Poll]):
    """Polls keyed by poll id, each owning its options."""

    model = Poll
    key_type = "poll"
    id_field = "poll_id"
    entity_name = "poll"

    def apply_update(self, existing: Poll, changes: Poll) -> Poll:
        # Options are only changed through the option operations
        return existing.model_copy(update={
            "poll_title": changes.poll_title,
            "poll_question": changes.poll_question,
        })

    async def get_options(self, poll_id: int) -> List[PollOption]:
        """
        Return the options of a poll.

        Raises:
            NotFoundError: If the poll does not exist
        """
        poll = await self.get(poll_id)
        return poll.poll_options

    async def get_option(self, poll_id: int, option_id: int) -> PollOption:
        """
        Return one option of a poll.

        Raises:
            NotFoundError: If the poll or the option does not exist
        """
        poll = await self.get(poll_id)
        for option in poll.poll_options:
            if option.poll_option_id == option_id:
                return option
        raise NotFoundError(f"poll {poll_id} has no option {option_id}")

    async def add_option(self, poll_id: int, option_id: int, text: str) -> PollOption:
        """
        Add an option to a poll.

        Raises:
            NotFoundError: If the poll does not exist
            AlreadyExistsError: If the option id is already used in this poll
        """
        poll = await self.get(poll_id)
        if poll.has_option(option_id):
            raise AlreadyExistsError(f"poll {poll_id} already has option {option_id}")

        option = PollOption(poll_option_id=option_id, poll_option_text=text)
        poll.poll_options.append(option)
        await self._save(poll)
        logger.info(f"Added option {option_id} to poll {poll_id}")
        return option

    async def update_option(self, poll_id: int, option_id: int, text: str) -> PollOption:
        """
        Change the text of an option.

        Raises:
            NotFoundError: If the poll or the option does not exist
        """
        poll = await self.get(poll_id)
        for index, option in enumerate(poll.poll_options):
            if option.poll_option_id == option_id:
                updated = PollOption(poll_option_id=option_id, poll_option_text=text)
                poll.poll_options[index] = updated
                await self._save(poll)
                logger.info(f"Updated option {option_id} of poll {poll_id}")
                return updated
        raise NotFoundError(f"poll {poll_id} has no option {option_id}")

    async def delete_option(self, poll_id: int, option_id: int) -> None:
        """
        Remove an option from a poll.

        Raises:
            NotFoundError: If the poll or the option does not exist
        """
        poll = await self.get(poll_id)
        remaining = [option for option in poll.poll_options if option.poll_option_id != option_id]
        if len(remaining) == len(poll.poll_options):
            raise NotFoundError(f"poll {poll_id} has no option {option_id}")

        poll.poll_options = remaining
        await self._save(poll)
        logger.info(f"Removed option {option_id} from poll {poll_id}")
