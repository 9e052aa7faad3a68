"""
helm-update-image promotion step.

Rewrites image references in a Helm values file using Freight that was
already verified earlier in the pipeline, never live registry lookups.

Execution flow:
1. run_promotion_step validates the raw config and builds a StepConfig
2. run resolves image updates against the requested Freight
3. run patches the values file in the work directory
4. run returns Succeeded with a commit message for downstream git steps

Any PromoStepError ends the invocation with an Errored result carrying the
wrapped cause. The promotion engine decides about retries.
"""

import logging
from pathlib import Path
from typing import Any

from promostep import validation
from promostep.commit import generate_commit_message
from promostep.context import StepContext
from promostep.errors import PatchError, PromoStepError
from promostep.resolver import generate_image_updates
from promostep.schemas import StepConfig, StepResult, StepStatus
from promostep.values import update_values_file

logger = logging.getLogger(__name__)


def secure_join(work_dir: Path, path: str) -> Path:
    """
    Join path onto work_dir, refusing paths that escape it.

    Raises:
        PatchError: If the resolved path lies outside work_dir
    """
    root = Path(work_dir).resolve()
    candidate = (root / path).resolve()
    if candidate != root and root not in candidate.parents:
        raise PatchError(f"values file update failed: path {path!r} escapes the work directory")
    return candidate


class HelmImageUpdater:
    """Promotion step updating image references in a Helm values file."""

    name = "helm-update-image"

    def validate(self, raw: Any) -> None:
        """Validate a raw step config. Raises ValidationError."""
        validation.validate(raw)

    def run_promotion_step(self, ctx: StepContext, raw: Any) -> StepResult:
        """
        Validate raw config, convert it, and run the step.

        Args:
            ctx: Step context for this invocation
            raw: Step configuration as decoded from the promotion definition

        Returns:
            StepResult; Errored when validation, resolution or patching fails
        """
        try:
            self.validate(raw)
        except PromoStepError as e:
            return self._errored(e)
        return self.run(ctx, StepConfig.from_dict(raw))

    def run(self, ctx: StepContext, cfg: StepConfig) -> StepResult:
        """
        Run the step with an already validated config.

        Returns:
            Succeeded with output {"commitMessage": ...}, or Errored with the
            wrapped cause in StepResult.error
        """
        try:
            changes = generate_image_updates(ctx, cfg)
            update_values_file(secure_join(ctx.work_dir, cfg.path), changes)
        except PromoStepError as e:
            return self._errored(e)

        commit_message = generate_commit_message(cfg.path, changes)
        logger.info(
            "%s succeeded: %d change(s) to %s", self.name, len(changes), cfg.path,
            extra={"step": self.name, "event": "step_succeeded"},
        )
        return StepResult(
            status=StepStatus.SUCCEEDED,
            output={"commitMessage": commit_message},
        )

    def _errored(self, error: PromoStepError) -> StepResult:
        logger.error(
            "%s failed: %s", self.name, error,
            extra={"step": self.name, "event": "step_errored"},
        )
        return StepResult(status=StepStatus.ERRORED, error=str(error))
