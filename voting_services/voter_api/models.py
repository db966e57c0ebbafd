"""Pydantic models for voter request bodies."""
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


class VoterRequest(BaseModel):
    """Body for creating or renaming a voter."""

    first_name: str = Field(default="", alias="firstName", description="First name")
    last_name: str = Field(default="", alias="lastName", description="Last name")

    class Config:
        populate_by_name = True
        json_schema_extra = {
            "example": {
                "firstName": "Nisarg",
                "lastName": "Patel"
            }
        }


class VoterPollRequest(BaseModel):
    """Body for recording or changing a vote history entry."""

    vote_date: Optional[datetime] = Field(
        default=None, alias="voteDate", description="When the vote was cast (defaults to now)"
    )

    class Config:
        populate_by_name = True
        json_schema_extra = {
            "example": {
                "voteDate": "2024-01-15T10:30:00Z"
            }
        }
