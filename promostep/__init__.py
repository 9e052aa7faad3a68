"""
promostep - Freight-driven promotion steps

Rewrites image references in Helm values files from Freight, the immutable
artifact records verified earlier in a delivery pipeline.
"""

__version__ = "0.1.0"


__all__ = ["HelmImageUpdater", "StepContext", "PromoStepConfig", "load_config"]

from .config import PromoStepConfig, load_config
from .context import StepContext
from .step import HelmImageUpdater
