"""Source location tracking for IR nodes.

Records the byte range, line, and column where a PDL construct was written,
enabling span-anchored diagnostics.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, model_validator


class Span(BaseModel):
    """Source range of a token or node.

    Attributes:
        start: Start byte offset (UTF-8)
        end: End byte offset (exclusive)
        line: 1-indexed line number of the start position
        column: 1-indexed column number of the start position
    """

    start: int
    end: int
    line: int
    column: int

    model_config = ConfigDict(frozen=True)

    @model_validator(mode="after")
    def _check_order(self) -> Span:
        if self.start > self.end:
            raise ValueError(f"span start {self.start} is after end {self.end}")
        return self

    @classmethod
    def dummy(cls) -> Span:
        """Zero span for hand-built trees."""
        return cls(start=0, end=0, line=0, column=0)

    def merge(self, other: Span) -> Span:
        """Return the smallest span covering both spans."""
        if (self.line, self.column) <= (other.line, other.column):
            line, column = self.line, self.column
        else:
            line, column = other.line, other.column
        return Span(
            start=min(self.start, other.start),
            end=max(self.end, other.end),
            line=line,
            column=column,
        )

    @property
    def length(self) -> int:
        return self.end - self.start

    @property
    def is_empty(self) -> bool:
        return self.start == self.end

    def __str__(self) -> str:
        return f"{self.line}:{self.column}"
