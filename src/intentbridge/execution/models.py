"""Data models for the execution subsystem."""

from __future__ import annotations

from pydantic import BaseModel, Field


class ExecutionOutcome(BaseModel):
    """Normalized result of running an action.

    ``output`` is meaningful when ``succeeded`` is true, ``error_message``
    otherwise.
    """

    succeeded: bool = Field(..., description="Whether the action ran successfully.")
    output: str | None = Field(default=None, description="Captured output on success.")
    error_message: str | None = Field(default=None, description="Failure description.")
    elapsed_seconds: float = Field(default=0.0, description="Wall-clock duration.")

    @classmethod
    def success(cls, output: str | None = None, elapsed_seconds: float = 0.0) -> ExecutionOutcome:
        return cls(succeeded=True, output=output, elapsed_seconds=elapsed_seconds)

    @classmethod
    def failure(cls, error_message: str, elapsed_seconds: float = 0.0) -> ExecutionOutcome:
        return cls(succeeded=False, error_message=error_message, elapsed_seconds=elapsed_seconds)
