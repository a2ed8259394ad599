"""Candidate record model."""

from typing import Any, Optional

from pydantic import BaseModel, Field


class Candidate(BaseModel):
    """One raw record returned by a lookup API, normalised for matching."""

    identifier: Optional[str] = Field(default=None, description="Source identifier")
    name: Optional[str] = Field(default=None, description="Display name")

    birth_year: Optional[int] = None
    birth_month: Optional[int] = None
    birth_day: Optional[int] = None

    address: Optional[str] = None
    position: Optional[str] = None

    raw: dict[str, Any] = Field(
        default_factory=dict,
        description="The source item, for module-specific output fields",
    )

    @property
    def date_of_birth(self) -> Optional[str]:
        """Join the known birth date parts as year-month-day."""
        parts = [self.birth_year, self.birth_month, self.birth_day]
        joined = "-".join(str(part) for part in parts if part)
        return joined or None
