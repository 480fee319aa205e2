"""
Tests for the RecallForge exception hierarchy.

Verifies error codes, the why/how-to-fix guidance every error carries,
and root-cause extraction across exception chains.
"""

import pytest

from recallforge.core.exceptions import (
    CardNotFoundError,
    ConfigValidationError,
    InvalidRatingError,
    InvalidStateError,
    RecallForgeError,
    StorageError,
    ValidationError,
    get_root_cause,
)


class TestHierarchy:
    @pytest.mark.parametrize(
        "exc_class, code, parent",
        [
            (ValidationError, "RF-VAL-000", RecallForgeError),
            (InvalidRatingError, "RF-VAL-001", ValidationError),
            (InvalidStateError, "RF-VAL-002", ValidationError),
            (ConfigValidationError, "RF-VAL-003", ValidationError),
            (StorageError, "RF-STORE-000", RecallForgeError),
        ],
    )
    def test_codes_and_parents(self, exc_class, code, parent):
        exc = exc_class("boom")
        assert exc.error_code == code
        assert isinstance(exc, parent)
        assert exc.how_to_fix
        assert exc.user_message == "boom"

    def test_card_not_found(self):
        exc = CardNotFoundError("abc")
        assert str(exc) == "Card not found: abc"
        assert exc.card_id == "abc"
        assert exc.error_code == "RF-STORE-001"
        assert isinstance(exc, StorageError)


class TestOverrides:
    def test_instance_overrides(self):
        exc = RecallForgeError(
            "custom",
            error_code="RF-X-999",
            why_it_happened="because",
            how_to_fix=["do this"],
        )
        assert exc.error_code == "RF-X-999"
        assert exc.why_it_happened == "because"
        assert exc.how_to_fix == ["do this"]

    def test_override_does_not_leak_to_class(self):
        InvalidRatingError("x", how_to_fix=["only here"])
        assert InvalidRatingError("y").how_to_fix != ["only here"]

    def test_validation_fields(self):
        exc = ValidationError("bad", field="rating", value=9)
        assert exc.field == "rating"
        assert exc.value == 9


class TestRootCause:
    def test_explicit_cause(self):
        original = KeyError("missing")
        try:
            try:
                raise original
            except KeyError as e:
                raise StorageError("wrapped") from e
        except StorageError as wrapped:
            assert wrapped.get_root_cause() is original

    def test_implicit_context(self):
        try:
            try:
                raise ValueError("first")
            except ValueError:
                raise InvalidStateError("second")
        except InvalidStateError as exc:
            assert isinstance(get_root_cause(exc), ValueError)

    def test_no_chain(self):
        exc = RecallForgeError("alone")
        assert get_root_cause(exc) is exc
