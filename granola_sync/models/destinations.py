"""
Routing decisions: where a rendered document should be written.
"""

from typing import Union

from pydantic import BaseModel, Field


class FlatFolder(BaseModel):
    """Every document lands as its own file in one folder."""

    path: str = Field(..., description="Vault-relative folder path")


class DailyNote(BaseModel):
    """The document is merged into the daily note for its date."""

    date_key: str = Field(..., description="The resolved date as YYYY-MM-DD")


class DateFolder(BaseModel):
    """The document lands as its own file in a folder derived from its date."""

    path: str = Field(..., description="Vault-relative folder path")


RoutingDecision = Union[FlatFolder, DailyNote, DateFolder]
