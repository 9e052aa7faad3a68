"""
StepResult - what a promotion step hands back to the promotion engine.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional


class StepStatus(str, Enum):
    """Terminal status of a promotion step."""
    SUCCEEDED = "Succeeded"
    ERRORED = "Errored"


@dataclass(frozen=True)
class StepResult:
    """
    The outcome of a single step invocation.

    Attributes:
        status: Succeeded or Errored
        output: Step output consumed downstream (e.g. commitMessage)
        error: Wrapped cause when status is Errored
    """
    status: StepStatus
    output: dict[str, Any] = field(default_factory=dict)
    error: Optional[str] = None

    def __post_init__(self):
        if self.status == StepStatus.SUCCEEDED and self.error is not None:
            raise ValueError("Succeeded results must not carry an error")

    @property
    def ok(self) -> bool:
        return self.status == StepStatus.SUCCEEDED

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary for JSON output."""
        result: dict[str, Any] = {
            "status": self.status.value,
            "output": self.output,
        }
        if self.error is not None:
            result["error"] = self.error
        return result
