"""Pydantic models describing the lead JSON documents."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class LeadsDocument(BaseModel):
    """Top-level input/output document: ``{"leads": [...]}``.

    Entries are validated one by one with :class:`LeadPayload` so that errors
    can be reported per record index.
    """

    model_config = ConfigDict(extra="ignore")

    leads: list[Any]


class LeadPayload(BaseModel):
    """One lead; fields other than the two keys are kept verbatim as extras."""

    model_config = ConfigDict(extra="allow")

    record_id: str = Field(alias="_id")
    email: str

    @property
    def extras(self) -> dict[str, Any]:
        return dict(self.model_extra or {})
