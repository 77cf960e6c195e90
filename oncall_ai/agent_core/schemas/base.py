"""Pydantic base schema shared by agent core models."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict


class BaseSchema(BaseModel):
    """
    Base Pydantic model for all domain schemas.

    - ``populate_by_name=True``: allow initialization by alias or field name.
    - ``extra="forbid"``: reject unknown fields so persisted agent state stays
      strict when it is reloaded for resume.
    """

    model_config = ConfigDict(
        populate_by_name=True,
        extra="forbid",
    )
