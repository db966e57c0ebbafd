"""Pydantic models for poll request bodies."""
from typing import List

from pydantic import BaseModel, Field, validator

from voting_services.shared.models import Poll, PollOption


class PollRequest(BaseModel):
    """Body for creating a poll."""

    poll_title: str = Field(default="", alias="pollTitle", description="Poll title")
    poll_question: str = Field(default="", alias="pollQuestion", description="Poll question")
    poll_options: List[PollOption] = Field(
        default_factory=list,
        alias="pollOptions",
        description="Initial options"
    )

    @validator("poll_options")
    def validate_unique_options(cls, v):
        """Reject option IDs that appear more than once."""
        ids = [option.poll_option_id for option in v]
        if len(ids) != len(set(ids)):
            raise ValueError("Poll option ids must be unique")
        return v

    class Config:
        populate_by_name = True
        json_schema_extra = {
            "example": {
                "pollTitle": "Tea or Coffee",
                "pollQuestion": "Do you like Tea or Coffee?",
                "pollOptions": [
                    {"pollOptionId": 1, "pollOptionText": "Tea"},
                    {"pollOptionId": 2, "pollOptionText": "Coffee"}
                ]
            }
        }

    def to_poll(self, poll_id: int) -> Poll:
        """Build the poll stored under poll_id."""
        return Poll(
            poll_id=poll_id,
            poll_title=self.poll_title,
            poll_question=self.poll_question,
            poll_options=self.poll_options
        )


class PollUpdateRequest(BaseModel):
    """Body for editing a poll. Options are changed through the option routes."""

    poll_title: str = Field(default="", alias="pollTitle", description="Poll title")
    poll_question: str = Field(default="", alias="pollQuestion", description="Poll question")

    class Config:
        populate_by_name = True
        json_schema_extra = {
            "example": {
                "pollTitle": "Tea or Coffee",
                "pollQuestion": "Do you like Tea or Coffee?"
            }
        }

    def to_poll(self, poll_id: int) -> Poll:
        return Poll(poll_id=poll_id, poll_title=self.poll_title, poll_question=self.poll_question)


class PollOptionRequest(BaseModel):
    """Body for adding or editing a poll option."""

    option_text: str = Field(default="", alias="optionText", description="Option text")

    class Config:
        populate_by_name = True
        json_schema_extra = {
            "example": {
                "optionText": "Tea"
            }
        }
