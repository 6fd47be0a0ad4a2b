"""Execution report and edit result models."""

from __future__ import annotations

from pydantic import BaseModel, Field


class CommandOutcome(BaseModel):
    """Result of applying one command from a batch.

    Attributes:
        index: Position of the command in the batch.
        action: The command's action tag, if it had a usable one.
        target: The command's target id, if present.
        success: Whether the command was applied.
        error_type: Exception class name when the command was skipped.
        error: Human-readable failure reason when the command was skipped.
        node_id: Id generated for the new node by insert and replace.
    """

    index: int
    action: str | None = None
    target: str | None = None
    success: bool
    error_type: str | None = None
    error: str | None = None
    node_id: str | None = None


class ExecutionReport(BaseModel):
    """Per-command outcomes of one batch execution, in batch order."""

    outcomes: list[CommandOutcome] = Field(default_factory=list)

    @property
    def succeeded(self) -> list[CommandOutcome]:
        return [outcome for outcome in self.outcomes if outcome.success]

    @property
    def skipped(self) -> list[CommandOutcome]:
        return [outcome for outcome in self.outcomes if not outcome.success]

    @property
    def applied(self) -> int:
        return len(self.succeeded)

    @property
    def failed(self) -> int:
        return len(self.skipped)

    @property
    def ok(self) -> bool:
        """True when every command in the batch was applied."""
        return not self.skipped


class EditResult(BaseModel):
    """Final output of an edit pipeline run."""

    markdown: str
    report: ExecutionReport
