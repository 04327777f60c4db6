"""Data models for discovered actions."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class ParameterSpec(BaseModel):
    """One input parameter of an action.

    ``type`` is a free-form tag taken from the app's metadata and is not
    checked against a fixed set.
    """

    model_config = ConfigDict(frozen=True)

    name: str
    type: str
    description: str | None = None
    required: bool = True


class ActionRecord(BaseModel):
    """An automatable action published by an installed application.

    ``id`` is globally unique and is the catalog key.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str
    owner_id: str = Field(alias="ownerID")
    name: str
    description: str | None = None
    parameters: tuple[ParameterSpec, ...] = ()
    returns_result: bool = Field(default=False, alias="returnsResult")

    def matches(self, needle: str) -> bool:
        """Case-insensitive substring test over name, description and owner.

        *needle* must already be lowercased.
        """
        return (
            needle in self.name.lower()
            or (self.description is not None and needle in self.description.lower())
            or needle in self.owner_id.lower()
        )
