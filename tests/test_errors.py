"""Tests for promostep error classes.

Tests cover:
- Error hierarchy
- ValidationError problem aggregation
- Cause chaining
"""

import pytest
from promostep.errors import (
    PatchError,
    PromoStepError,
    ResolutionError,
    StepCancelledError,
    ValidationError,
)


class TestHierarchy:
    """Every step failure is a PromoStepError."""

    @pytest.mark.parametrize(
        "error_cls", [ValidationError, ResolutionError, PatchError, StepCancelledError]
    )
    def test_is_promostep_error(self, error_cls):
        assert issubclass(error_cls, PromoStepError)
        assert issubclass(error_cls, Exception)

    def test_resolution_not_patch(self):
        """ResolutionError and PatchError are distinct."""
        assert not isinstance(ResolutionError("x"), PatchError)
        assert not isinstance(PatchError("x"), ResolutionError)

    def test_has_message(self):
        error = PatchError("values file update failed: boom")
        assert str(error) == "values file update failed: boom"


class TestValidationError:
    """Tests for ValidationError."""

    def test_keeps_every_problem(self):
        error = ValidationError(["(root): path is required", "(root): images is required"])
        assert error.problems == ["(root): path is required", "(root): images is required"]

    def test_message_joins_problems(self):
        error = ValidationError(["a: one", "b: two"])
        assert str(error) == "a: one; b: two"

    def test_problems_are_copied(self):
        problems = ["a: one"]
        error = ValidationError(problems)
        problems.append("b: two")
        assert error.problems == ["a: one"]


class TestChaining:
    """Wrapped errors keep their cause."""

    def test_cause_is_kept(self):
        cause = RuntimeError("something went wrong")
        with pytest.raises(ResolutionError) as exc_info:
            try:
                raise cause
            except RuntimeError as e:
                raise ResolutionError(f"failed to generate image updates: {e}") from e
        assert exc_info.value.__cause__ is cause
        assert "something went wrong" in str(exc_info.value)
