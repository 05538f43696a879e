"""Public result models for chain verification."""

from typing import List, Optional
from pydantic import BaseModel, ConfigDict, Field

from botchain.codes import IntegrityCode


class IntegrityIssue(BaseModel):
    """A single integrity finding at one chain position."""
    position: int
    code: IntegrityCode
    message: str
    expected: Optional[str] = None  # recomputed or linked value
    found: Optional[str] = None  # stored value

    model_config = ConfigDict(extra="forbid")


class IntegrityReport(BaseModel):
    """Result of Chain.verify().

    ``broken_at`` is the first failing position (None when ok). ``issues``
    holds every finding sorted by position, so a report can show where
    corruption begins and how far it reaches.
    """
    ok: bool
    checked: int
    broken_at: Optional[int] = None
    issues: List[IntegrityIssue] = Field(default_factory=list)
    head_hash: str
    algorithm: str
    message: str = ""

    model_config = ConfigDict(extra="forbid")

    def __bool__(self) -> bool:
        return self.ok
