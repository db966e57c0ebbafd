"""Vote store."""
from voting_services.shared.models import Vote
from voting_services.shared.store import EntityStore


class VoteStore(EntityStore[Vote]):
    """Votes keyed by vote id."""

    model = Vote
    key_type = "vote"
    id_field = "vote_id"
    entity_name = "vote"

    def apply_update(self, existing: Vote, changes: Vote) -> Vote:
        # Voter and poll are fixed once the vote is in the voter's history
        return existing.model_copy(update={"vote_value": changes.vote_value})
