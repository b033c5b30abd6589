"""Pydantic models for API request bodies."""

from pydantic import BaseModel, Field


class IntakeSubmission(BaseModel):
    """Raw questionnaire answers delivered by the intake form."""

    answers: dict[str, object]
    form_locale: str | None = None


class ReviewAction(BaseModel):
    """Reviewer identity with an optional note."""

    reviewer: str = Field(min_length=1)
    notes: str | None = None


class ChangeRequest(BaseModel):
    """Reviewer note sending a plan back to draft."""

    reviewer: str = Field(min_length=1)
    notes: str = Field(min_length=1)


class CustomizationBody(BaseModel):
    """Edited plan document submitted by an admin."""

    edited_by: str = Field(min_length=1)
    plan: dict[str, object]
