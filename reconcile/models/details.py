"""Reconciler self-description models."""

from pydantic import BaseModel, Field


class Parameter(BaseModel):
    """A configuration option accepted by a reconciler."""

    name: str
    description: str
    required: bool = True


class Column(BaseModel):
    """An output column produced by a reconciler."""

    name: str


class ReconcilerDetails(BaseModel):
    """Static declaration of a reconciler's options and output schema."""

    parameters: list[Parameter] = Field(default_factory=list)
    columns: list[Column] = Field(default_factory=list)

    @property
    def column_names(self) -> list[str]:
        return [column.name for column in self.columns]
