"""Request DTOs for API endpoints."""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


class RSVPCreateRequest(BaseModel):
    """Request DTO for submitting an RSVP.

    The handler sanitizes and re-validates the strings before they reach
    the service layer.
    """

    model_config = ConfigDict(populate_by_name=True)

    name: str = Field(..., description="Guest name", min_length=1)
    email: str = Field(..., description="Guest email address", min_length=1)
    attendance: str = Field(..., description="One of yes, no, maybe", min_length=1)
    dietary: str | None = Field(None, description="Dietary restrictions", max_length=500)
    plus_one: bool = Field(False, alias="plusOne", description="Bringing a guest")
    plus_one_name: str | None = Field(None, alias="plusOneName", description="Name of the plus one")
    message: str | None = Field(None, description="Note to the couple", max_length=1000)


class RSVPUpdateRequest(BaseModel):
    """Request DTO for updating an RSVP; unset fields are left unchanged."""

    model_config = ConfigDict(populate_by_name=True)

    name: str | None = Field(None, min_length=1)
    email: str | None = Field(None, min_length=1)
    attendance: Literal["yes", "no", "maybe"] | None = None
    dietary: str | None = Field(None, max_length=500)
    plus_one: bool | None = Field(None, alias="plusOne")
    plus_one_name: str | None = Field(None, alias="plusOneName")
    message: str | None = Field(None, max_length=1000)


class LoginRequest(BaseModel):
    """Request DTO for admin login."""

    password: str = Field(..., description="Admin password", min_length=1)
