"""Entry, query and response models for the reconciliation pipeline."""

from typing import Any, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


class Entry(BaseModel):
    """One input row to be enriched."""

    model_config = ConfigDict(frozen=True)

    line: int = Field(description="Line number in the source file, for diagnostics")
    data: dict[str, Optional[str]] = Field(
        default_factory=dict,
        description="Column name -> cell value",
    )

    def value(self, field: Optional[str]) -> Optional[str]:
        """Return the stripped value of a column, or None when blank or unconfigured."""
        if not field:
            return None
        value = self.data.get(field)
        if value is None or not value.strip():
            return None
        return value.strip()


class Alert(BaseModel):
    """A diagnostic raised while processing an entry."""

    message: str
    importance: Literal["error", "warning", "info"] = "error"


class Auth(BaseModel):
    """HTTP basic auth credentials."""

    username: str
    password: str = ""


class Query(BaseModel):
    """A fully-formed outbound request."""

    url: str
    auth: Optional[Auth] = None
    params: dict[str, Any] = Field(default_factory=dict)
    passthrough: dict[str, Any] = Field(
        default_factory=dict,
        description="Context echoed onto the response, never sent to the API",
    )


class Response(BaseModel):
    """A decoded response together with its originating query's context."""

    status: int
    data: Any = None
    url: str
    auth: Optional[Auth] = None
    passthrough: dict[str, Any] = Field(default_factory=dict)

    @property
    def page(self) -> int:
        return self.passthrough.get("page", 1)
