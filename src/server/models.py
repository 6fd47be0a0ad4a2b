"""Pydantic models for the command API."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field, field_validator

from mdcommands.schemas import ExecutionReport


class TreeRequest(BaseModel):
    """Request model for the /api/tree endpoint.

    Attributes
    ----------
    markdown : str
        Markdown source to parse.

    """

    markdown: str = Field(..., description="Markdown source")


class TreeResponse(BaseModel):
    """Response model for the /api/tree endpoint.

    Attributes
    ----------
    tree : dict
        The parsed tree with node ids assigned.
    node_count : int
        Number of nodes in the tree.

    """

    tree: dict[str, Any] = Field(..., description="Parsed tree with node ids")
    node_count: int = Field(..., description="Number of nodes in the tree")


class ApplyRequest(BaseModel):
    """Request model for the /api/apply endpoint.

    Attributes
    ----------
    markdown : str
        Markdown source. Ids are assigned as /api/tree assigns them.
    commands : list
        Raw command objects, validated one at a time during execution.

    """

    markdown: str = Field(..., description="Markdown source")
    commands: list[Any] = Field(..., description="Command objects to apply in order")


class EditRequest(BaseModel):
    """Request model for the /api/edit endpoint.

    Attributes
    ----------
    markdown : str
        Markdown source.
    instruction : str
        Edit request passed to the model.
    max_text_length : int | None
        Truncation applied to text values shown to the model.

    """

    markdown: str = Field(..., description="Markdown source")
    instruction: str = Field(..., description="Edit request for the model")
    max_text_length: int | None = Field(default=None, ge=1, description="Truncate text shown to the model")

    @field_validator("instruction")
    @classmethod
    def validate_instruction(cls, v: str) -> str:
        """Validate that ``instruction`` is not empty."""
        if not v.strip():
            err = "instruction cannot be empty"
            raise ValueError(err)
        return v.strip()


class EditResponse(BaseModel):
    """Response model for the /api/apply and /api/edit endpoints.

    Attributes
    ----------
    markdown : str
        The edited Markdown.
    report : ExecutionReport
        Per-command outcomes.

    """

    markdown: str = Field(..., description="Edited Markdown")
    report: ExecutionReport = Field(..., description="Per-command outcomes")


class ErrorResponse(BaseModel):
    """Error response model.

    Attributes
    ----------
    error : str
        Error message describing what went wrong.

    """

    error: str = Field(..., description="Error message")


class OperationRequest(BaseModel):
    """Request model for the /api/operation endpoint.

    Attributes
    ----------
    markdown : str
        Markdown source.
    operation : str
        Name of the document operation, e.g. ``summarize`` or ``rewrite``.
    audience : str | None
        Target audience, required by ``rewrite``.

    """

    markdown: str = Field(..., description="Markdown source")
    operation: str = Field(..., description="Document operation to run")
    audience: str | None = Field(default=None, description="Target audience for rewrite")


class OperationResponse(BaseModel):
    """Response model for the /api/operation endpoint.

    Attributes
    ----------
    operation : str
        The operation that ran.
    result : str
        Revised Markdown for rewriting operations, otherwise the model's reply.

    """

    operation: str = Field(..., description="Operation that ran")
    result: str = Field(..., description="Operation output")
