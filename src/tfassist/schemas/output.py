"""Schemas for the structured file-generation envelope."""

from typing import Any

from pydantic import BaseModel, Field, field_validator


class GeneratedFile(BaseModel):
    """A file the model asked to write, relative to the workspace root."""

    path: str = Field(..., min_length=1, description="Workspace-relative file path")
    content: str = Field(..., description="Raw file content (no markdown fencing)")


class AgentOutput(BaseModel):
    """Decoded `{"files": [...], "summary": "..."}` envelope."""

    files: list[GeneratedFile] = Field(default_factory=list)
    summary: str = ""

    @field_validator("summary", mode="before")
    @classmethod
    def _null_summary_is_empty(cls, value: Any) -> Any:
        return "" if value is None else value
