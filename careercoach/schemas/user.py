from __future__ import annotations

from pydantic import ConfigDict, Field

from careercoach.schemas.base import CamelModel


class ProfileResponse(CamelModel):
    name: str
    email: str
    avatar: str | None = None
    phone: str | None = None
    location: str | None = None
    experience: str | None = None
    current_role: str | None = None
    target_role: str | None = None
    skills: list[str] = Field(default_factory=list)


class ProfilePatch(CamelModel):
    """Fields a user may change on their own profile; anything else is rejected."""

    model_config = ConfigDict(extra="forbid")

    avatar: str | None = Field(default=None, max_length=500)
    phone: str | None = Field(default=None, max_length=40)
    location: str | None = Field(default=None, max_length=200)
    experience: str | None = Field(default=None, max_length=200)
    current_role: str | None = Field(default=None, max_length=200)
    target_role: str | None = Field(default=None, max_length=200)
    skills: list[str] = Field(default_factory=list, max_length=100)
