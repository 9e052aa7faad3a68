"""
StepContext - everything a promotion step receives from the promotion engine.

The context is built by the caller for a single invocation. The step never
mutates it and keeps no state across invocations.
"""

import threading
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from promostep.errors import StepCancelledError
from promostep.schemas import FreightCollection, OriginRef
from promostep.warehouse_client import WarehouseClient


def _utcnow() -> datetime:
    """Return current UTC time as timezone-aware datetime."""
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class StepContext:
    """
    Per-invocation inputs of a promotion step.

    Attributes:
        project: Project (namespace) warehouses are looked up in
        work_dir: Working directory owned exclusively by this invocation
        warehouse_client: Object store capability used to fetch warehouses
        freight: Freight available to the promotion, keyed by origin
        freight_requests: Origins admissible for this promotion, in order
        cancel_event: Set by the caller to cancel the invocation
        deadline: Aware datetime after which the invocation is cancelled
    """
    project: str
    work_dir: Path
    warehouse_client: WarehouseClient
    freight: FreightCollection = field(default_factory=FreightCollection)
    freight_requests: tuple[OriginRef, ...] = field(default_factory=tuple)
    cancel_event: Optional[threading.Event] = None
    deadline: Optional[datetime] = None

    def raise_if_cancelled(self) -> None:
        """
        Raise StepCancelledError if the caller cancelled this invocation.

        Checked before every blocking object-store call.
        """
        if self.cancel_event is not None and self.cancel_event.is_set():
            raise StepCancelledError("step was cancelled")
        if self.deadline is not None and _utcnow() >= self.deadline:
            raise StepCancelledError(f"deadline {self.deadline.isoformat()} exceeded")
