"""
Error classes for promostep.

Every failure of the helm-update-image step is terminal for the invocation:
- ValidationError: the raw step configuration violates the config schema
- ResolutionError: an image could not be resolved from the referenced Freight,
  or the warehouse lookup itself failed
- PatchError: the values file is missing, unparsable or unwritable
- StepCancelledError: the caller cancelled the invocation before a store call

Nothing here is retried internally. The promotion engine that invoked the
step decides whether to try again.

Error handling contract:
- Components raise these errors
- The step catches them at its boundary and reports an Errored StepResult
- Anything that is not a PromoStepError is a bug and propagates unchanged
"""


class PromoStepError(Exception):
    """Base exception for promostep."""
    pass


class ValidationError(PromoStepError):
    """
    Raw step configuration failed schema validation.

    Carries every violated rule, not just the first one. Each problem is
    formatted as "<path>: <message>" where the path is "(root)" for the top
    level of the configuration.
    """

    def __init__(self, problems: list[str]):
        self.problems = list(problems)
        super().__init__("; ".join(self.problems))


class ResolutionError(PromoStepError):
    """
    Image updates could not be generated.

    Examples:
    - Warehouse lookup failed (transport error, cancellation)
    - No eligible origin carries the requested image in its Freight
    """
    pass


class StepCancelledError(PromoStepError):
    """The invocation was cancelled or its deadline passed."""
    pass


class PatchError(PromoStepError):
    """
    The values file could not be updated.

    Examples:
    - File does not exist
    - File is not valid YAML
    - A key does not address an existing scalar
    - File could not be written
    """
    pass
