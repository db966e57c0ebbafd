"""Pydantic models for vote request bodies."""
from pydantic import BaseModel, Field

from voting_services.shared.models import MAX_ID, Vote


class VoteRequest(BaseModel):
    """Body for casting a vote. The vote id comes from the path."""

    voter_id: int = Field(..., alias="voterId", ge=0, le=MAX_ID, description="Voter casting the vote")
    poll_id: int = Field(..., alias="pollId", ge=0, le=MAX_ID, description="Poll voted in")
    vote_value: int = Field(..., alias="voteValue", ge=0, le=MAX_ID, description="Chosen poll option id")

    class Config:
        populate_by_name = True
        json_schema_extra = {
            "example": {
                "voterId": 1,
                "pollId": 1,
                "voteValue": 1
            }
        }

    def to_vote(self, vote_id: int) -> Vote:
        return Vote(
            vote_id=vote_id,
            voter_id=self.voter_id,
            poll_id=self.poll_id,
            vote_value=self.vote_value
        )


class VoteUpdateRequest(BaseModel):
    """Body for changing the chosen option of a vote."""

    vote_value: int = Field(..., alias="voteValue", ge=0, le=MAX_ID, description="New poll option id")

    class Config:
        populate_by_name = True
        json_schema_extra = {
            "example": {
                "voteValue": 2
            }
        }
