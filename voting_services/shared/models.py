"""
Shared data models for the voting services.

This module contains:
- Voter and VoterPoll: a voter and the polls they have voted in
- Poll and PollOption: a poll and its answer options
- Vote: a recorded vote linking a voter to a poll option
- Redis key helpers used by the storage backends
"""

from datetime import datetime, timezone
from typing import List

from pydantic import BaseModel, Field, validator

# Identifiers travel as unsigned 32-bit integers on the wire
MAX_ID = 2 ** 32 - 1


class VoterPoll(BaseModel):
    """An entry in a voter's vote history."""

    poll_id: int = Field(..., alias="pollId", ge=0, le=MAX_ID, description="Poll identifier")
    vote_date: datetime = Field(..., alias="voteDate", description="When the vote was cast")

    class Config:
        populate_by_name = True
        json_schema_extra = {
            "example": {
                "pollId": 1,
                "voteDate": "2024-01-15T10:30:00Z"
            }
        }


class Voter(BaseModel):
    """A voter with a unique ID and voting history."""

    voter_id: int = Field(..., alias="voterId", ge=0, le=MAX_ID, description="Voter identifier")
    first_name: str = Field(default="", alias="firstName", description="First name")
    last_name: str = Field(default="", alias="lastName", description="Last name")
    vote_history: List[VoterPoll] = Field(
        default_factory=list, alias="voteHistory", description="Polls this voter has voted in"
    )

    class Config:
        populate_by_name = True
        json_schema_extra = {
            "example": {
                "voterId": 1,
                "firstName": "Nisarg",
                "lastName": "Patel",
                "voteHistory": [{"pollId": 1, "voteDate": "2024-01-15T10:30:00Z"}]
            }
        }


class PollOption(BaseModel):
    """A single answer option of a poll."""

    poll_option_id: int = Field(..., alias="pollOptionId", ge=0, le=MAX_ID, description="Option identifier")
    poll_option_text: str = Field(default="", alias="pollOptionText", description="Option text")

    class Config:
        populate_by_name = True


class Poll(BaseModel):
    """A poll with a unique ID and its options."""

    poll_id: int = Field(..., alias="pollId", ge=0, le=MAX_ID, description="Poll identifier")
    poll_title: str = Field(default="", alias="pollTitle", description="Poll title")
    poll_question: str = Field(default="", alias="pollQuestion", description="Poll question")
    poll_options: List[PollOption] = Field(
        default_factory=list, alias="pollOptions", description="Answer options"
    )

    @validator("poll_options")
    def validate_unique_options(cls, v):
        """Option IDs must be unique within a poll."""
        seen = set()
        for option in v:
            if option.poll_option_id in seen:
                raise ValueError(f"Duplicate poll option id {option.poll_option_id}")
            seen.add(option.poll_option_id)
        return v

    class Config:
        populate_by_name = True
        json_schema_extra = {
            "example": {
                "pollId": 1,
                "pollTitle": "Tea or Coffee",
                "pollQuestion": "Do you like Tea or Coffee?",
                "pollOptions": [
                    {"pollOptionId": 1, "pollOptionText": "Tea"},
                    {"pollOptionId": 2, "pollOptionText": "Coffee"}
                ]
            }
        }

    def has_option(self, option_id: int) -> bool:
        """Check whether the poll offers the given option."""
        return any(option.poll_option_id == option_id for option in self.poll_options)


class Vote(BaseModel):
    """A vote cast by a voter for one option of a poll."""

    vote_id: int = Field(..., alias="voteId", ge=0, le=MAX_ID, description="Vote identifier")
    voter_id: int = Field(..., alias="voterId", ge=0, le=MAX_ID, description="Voter who cast the vote")
    poll_id: int = Field(..., alias="pollId", ge=0, le=MAX_ID, description="Poll voted in")
    vote_value: int = Field(..., alias="voteValue", ge=0, le=MAX_ID, description="Chosen poll option id")

    class Config:
        populate_by_name = True
        json_schema_extra = {
            "example": {
                "voteId": 1,
                "voterId": 1,
                "pollId": 1,
                "voteValue": 1
            }
        }


def utc_now() -> datetime:
    """
    Get the current time as a timezone-aware UTC datetime.

    Returns:
        datetime: Current UTC time
    """
    return datetime.now(timezone.utc)


# Redis key prefixes for the entity kinds
REDIS_KEYS = {
    'voter': 'voter:',
    'poll': 'poll:',
    'vote': 'votes:',
}


def get_redis_key(key_type: str, entity_id: int) -> str:
    """
    Get the Redis key for an entity.

    Args:
        key_type: Entity kind from REDIS_KEYS
        entity_id: Entity identifier

    Returns:
        str: Prefix followed by the decimal id, e.g. "voter:1"
    """
    return f"{REDIS_KEYS[key_type]}{entity_id}"
