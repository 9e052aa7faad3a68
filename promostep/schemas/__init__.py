"""
promostep.schemas - Data structures exchanged by the helm-update-image step.

raw config -> StepConfig -> image updates -> StepResult

- Freight: FreightCollection / FreightReference / ImageRecord, read-only
  inputs produced earlier in the pipeline
- Warehouse: live provenance object fetched from the object store
- StepConfig: typed step configuration (MatchedImage | LiteralValue entries)
- StepResult: status and output handed back to the promotion engine
"""

from .freight import (
    WAREHOUSE,
    OriginRef,
    ImageRecord,
    FreightReference,
    FreightCollection,
    ImageSubscription,
    Warehouse,
)
from .step_config import (
    ValueKind,
    MatchedImage,
    LiteralValue,
    ImageEntry,
    StepConfig,
)
from .result import (
    StepStatus,
    StepResult,
)

__all__ = [
    # Freight
    "WAREHOUSE",
    "OriginRef",
    "ImageRecord",
    "FreightReference",
    "FreightCollection",
    "ImageSubscription",
    "Warehouse",
    # Step config
    "ValueKind",
    "MatchedImage",
    "LiteralValue",
    "ImageEntry",
    "StepConfig",
    # Result
    "StepStatus",
    "StepResult",
]
