"""
Centralized Exception Hierarchy for RecallForge.

This module defines all custom exceptions used throughout RecallForge.
All exceptions inherit from RecallForgeError for easy catching.

Each exception includes:
- user_message: Human-readable description of what went wrong
- why_it_happened: Explanation of the root cause
- how_to_fix: Actionable steps to resolve the issue
- error_code: Unique identifier for documentation lookup (e.g., "RF-VAL-001")

Usage
-----
    from recallforge.core.exceptions import (
        RecallForgeError,
        InvalidRatingError,
    )

    try:
        schedule_next_review(state, rating, now)
    except InvalidRatingError as e:
        logger.error(f"Rejected review: {e}")

Exception Hierarchy
-------------------
    RecallForgeError (base)
    ├── ValidationError
    │   ├── InvalidRatingError
    │   ├── InvalidStateError
    │   └── ConfigValidationError
    └── StorageError
        └── CardNotFoundError

Design Principles
-----------------
1. All exceptions inherit from RecallForgeError
2. The scheduling core raises immediately and never clamps bad input
3. Every exception provides "why" and "how to fix" guidance
"""

from typing import Any, List, Optional


def get_root_cause(exc: BaseException) -> BaseException:
    """Extract the root cause from a chain of exceptions.

    Follows nested __cause__ and __context__ attributes to find
    the original error that started the chain.

    Args:
        exc: Exception to analyze

    Returns:
        Root cause exception (may be the same as input)
    """
    seen = set()
    current = exc

    while current is not None:
        if id(current) in seen:
            break
        seen.add(id(current))

        # Prefer explicit cause over implicit context
        if current.__cause__ is not None:
            current = current.__cause__
        elif current.__context__ is not None:
            current = current.__context__
        else:
            break

    return current


class RecallForgeError(Exception):
    """
    Base exception for all RecallForge errors.

    Example
    -------
        try:
            service.review(card_id, rating)
        except RecallForgeError as e:
            console.print(f"Review failed: {e}")
            console.print(f"Fix: {e.how_to_fix}")
    """

    # Default error info - subclasses should override
    error_code: str = "RF-ERR-000"
    why_it_happened: str = "An unexpected error occurred"
    how_to_fix: List[str] = ["Check the error message for details"]

    def __init__(
        self,
        message: str,
        *,
        error_code: Optional[str] = None,
        why_it_happened: Optional[str] = None,
        how_to_fix: Optional[List[str]] = None,
    ) -> None:
        """Initialize RecallForgeError with helpful information.

        Args:
            message: Human-readable error message
            error_code: Unique identifier (e.g., "RF-VAL-001")
            why_it_happened: Explanation of root cause
            how_to_fix: List of actionable fix suggestions
        """
        super().__init__(message)

        # Override class defaults if provided
        if error_code is not None:
            self.error_code = error_code
        if why_it_happened is not None:
            self.why_it_happened = why_it_happened
        if how_to_fix is not None:
            self.how_to_fix = how_to_fix

    @property
    def user_message(self) -> str:
        """Get the user-friendly error message."""
        return str(self)

    def get_root_cause(self) -> BaseException:
        """Get the root cause of this exception chain."""
        return get_root_cause(self)


# ============================================================================
# Validation Exceptions
# ============================================================================


class ValidationError(RecallForgeError):
    """
    Base exception for input validation errors.

    Attributes
    ----------
    field : str, optional
        Name of the offending field
    value : Any, optional
        The rejected value
    """

    error_code = "RF-VAL-000"
    why_it_happened = "An input value failed validation"
    how_to_fix = ["Check the value against the documented range"]

    def __init__(
        self,
        message: str,
        field: Optional[str] = None,
        value: Any = None,
        *,
        error_code: Optional[str] = None,
        why_it_happened: Optional[str] = None,
        how_to_fix: Optional[List[str]] = None,
    ) -> None:
        super().__init__(
            message,
            error_code=error_code,
            why_it_happened=why_it_happened,
            how_to_fix=how_to_fix,
        )
        self.field = field
        self.value = value


class InvalidRatingError(ValidationError):
    """
    Raised when a review rating falls outside the rating scale.

    Ratings are never clamped: an out-of-range quality would corrupt the
    easiness factor formula.

    Example
    -------
        schedule_next_review(state, 7, now)
        # Raises: InvalidRatingError("Rating must be an integer 0-5, got 7")
    """

    error_code = "RF-VAL-001"
    why_it_happened = (
        "The rating is not on the 0-5 recall quality scale "
        "(or the 1-5 difficulty scale where one is expected)"
    )
    how_to_fix = [
        "Use 0-2 for failed recall and 3-5 for successful recall",
        "Convert 1-5 difficulty ratings with Rating.from_difficulty()",
    ]


class InvalidStateError(ValidationError):
    """
    Raised when a card's scheduling state violates its invariants.

    The state is rejected rather than repaired; the layer that loaded it
    owns its integrity.
    """

    error_code = "RF-VAL-002"
    why_it_happened = (
        "The stored scheduling state is inconsistent, e.g. a negative "
        "interval or an easiness factor below the floor"
    )
    how_to_fix = [
        "Inspect the stored card record for corrupted fields",
        "Reset the card to a new state if the record cannot be repaired",
    ]


class ConfigValidationError(ValidationError):
    """Raised when configuration values are invalid."""

    error_code = "RF-VAL-003"
    why_it_happened = "A configuration value is missing, malformed or out of range"
    how_to_fix = [
        "Check recallforge.yaml against the documented sections",
        "Remove the offending key to fall back to the default",
        "Check RECALLFORGE_* environment variables",
    ]


# ============================================================================
# Storage Exceptions
# ============================================================================


class StorageError(RecallForgeError):
    """Raised when a card repository operation fails."""

    error_code = "RF-STORE-000"
    why_it_happened = "The card store could not be read or written"
    how_to_fix = [
        "Check that the data directory exists and is writable",
        "Make sure no other process holds a lock on the database",
    ]


class CardNotFoundError(StorageError):
    """Raised when a card id does not exist in the repository."""

    error_code = "RF-STORE-001"
    why_it_happened = "No card with the requested id is stored"
    how_to_fix = [
        "Check the card id printed by `recallforge add`",
        "Check the --project directory points at the right data store",
    ]

    def __init__(self, card_id: str) -> None:
        super().__init__(f"Card not found: {card_id}")
        self.card_id = card_id
