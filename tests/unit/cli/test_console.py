"""Tests for console helpers and the error panel renderer."""

import pytest
from rich.console import Console

from recallforge.cli import console as console_module
from recallforge.cli.console import ErrorRenderer, is_verbose_mode, set_verbose_mode, tip
from recallforge.core.exceptions import CardNotFoundError, StorageError


@pytest.fixture
def recorded(monkeypatch):
    """Swap the shared console for a recording one."""
    recording = Console(record=True, width=100)
    monkeypatch.setattr(console_module, "_console", recording)
    yield recording
    set_verbose_mode(False)


class TestErrorRenderer:
    def test_renders_guidance(self, recorded):
        ErrorRenderer.render(CardNotFoundError("abc"), context="While reviewing")
        text = recorded.export_text()
        assert "Error: RF-STORE-001" in text
        assert "Card not found: abc" in text
        assert "While reviewing" in text
        assert "How to fix:" in text

    def test_root_cause_shown(self, recorded):
        try:
            try:
                raise OSError("disk full")
            except OSError as e:
                raise StorageError("Could not save card") from e
        except StorageError as exc:
            ErrorRenderer.render(exc)
        text = recorded.export_text()
        assert "Root cause: disk full" in text
        assert "Traceback" not in text

    def test_foreign_exception_uses_defaults(self, recorded):
        ErrorRenderer.render(RuntimeError("unexpected"))
        assert "RF-ERR-000" in recorded.export_text()

    def test_verbose_shows_traceback(self, recorded):
        set_verbose_mode(True)
        assert is_verbose_mode()
        try:
            raise StorageError("locked")
        except StorageError as exc:
            ErrorRenderer.render(exc)
        assert "Traceback (--verbose mode)" in recorded.export_text()


def test_tip(recorded):
    tip("Run `recallforge due`")
    assert "Tip: Run `recallforge due`" in recorded.export_text()
