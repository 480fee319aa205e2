"""
Tests for the RecallForge command line.

Each test runs commands against a temporary project directory so the
SQLite database lives under tmp_path/.data.
"""

import json

import pytest
from typer.testing import CliRunner

from recallforge import __version__
from recallforge.cli.main import app
from recallforge.storage.sqlite import SQLiteCardRepository

runner = CliRunner()


def invoke(*args):
    return runner.invoke(app, [str(a) for a in args])


def stored_cards(project):
    return SQLiteCardRepository(project / ".data" / "reviews.db").list_cards()


@pytest.fixture
def project(tmp_path):
    return tmp_path


@pytest.fixture
def card_id(project):
    result = invoke("add", "Mitochondria", "Powerhouse of the cell", "-t", "bio", "-p", project)
    assert result.exit_code == 0, result.output
    return stored_cards(project)[0].card_id


class TestVersion:
    def test_version(self):
        result = invoke("version")
        assert result.exit_code == 0
        assert __version__ in result.output


class TestAdd:
    def test_add(self, project):
        result = invoke("add", "Q", "A", "--topic", "chem", "--project", project)
        assert result.exit_code == 0
        assert "Added card" in result.output
        cards = stored_cards(project)
        assert [(c.front, c.topic_id) for c in cards] == [("Q", "chem")]

    def test_blank_front_rejected(self, project):
        result = invoke("add", "  ", "A", "-p", project)
        assert result.exit_code == 1
        assert "RF-VAL-000" in result.output


class TestReview:
    def test_configured_threshold_marks_miss(self, project, card_id):
        (project / "recallforge.yaml").write_text("scheduler:\n  success_threshold: 4\n")
        result = invoke("review", card_id, 3, "-p", project)
        assert result.exit_code == 0, result.output
        assert "(missed)" in result.output
        assert stored_cards(project)[0].state.repetition_count == 0

        result = invoke("review", card_id, 4, "-p", project)
        assert "(recalled)" in result.output

    def test_review_schedules(self, project, card_id):
        result = invoke("review", card_id, 5, "-p", project)
        assert result.exit_code == 0, result.output
        assert "Next review in 1 day(s)" in result.output

        state = stored_cards(project)[0].state
        assert state.repetition_count == 1
        assert state.easiness_factor == pytest.approx(2.6)

    def test_review_with_difficulty(self, project, card_id):
        result = invoke("review", card_id, 5, "--difficulty", "-p", project)
        assert result.exit_code == 0, result.output
        state = stored_cards(project)[0].state
        assert state.repetition_count == 0
        assert state.last_difficulty == 5

    def test_unknown_card(self, project):
        result = invoke("review", "missing", 4, "-p", project)
        assert result.exit_code == 1
        assert "RF-STORE-001" in result.output

    def test_invalid_rating(self, project, card_id):
        result = invoke("review", card_id, 9, "-p", project)
        assert result.exit_code == 1
        assert "RF-VAL-001" in result.output
        assert stored_cards(project)[0].state.repetition_count == 0


class TestDue:
    def test_due_json(self, project, card_id):
        result = invoke("due", "--json", "-p", project)
        assert result.exit_code == 0
        data = json.loads(result.stdout)
        assert data["total"] == 1
        assert data["due"][0]["card_id"] == card_id

    def test_nothing_due_after_review(self, project, card_id):
        invoke("review", card_id, 4, "-p", project)
        result = invoke("due", "-p", project)
        assert result.exit_code == 0
        assert "No cards due" in result.output

    def test_topic_filter(self, project, card_id):
        data = json.loads(invoke("due", "--json", "-t", "chem", "-p", project).stdout)
        assert data == {"due": [], "total": 0}


class TestRetention:
    def test_empty(self, project):
        result = invoke("retention", "-p", project)
        assert result.exit_code == 0
        assert "No cards yet" in result.output

    def test_json_report(self, project, card_id):
        invoke("review", card_id, 5, "-p", project)
        result = invoke("retention", "--json", "-s", "piecewise-linear", "-p", project)
        assert result.exit_code == 0, result.output
        data = json.loads(result.stdout)
        assert data["strategy"] == "piecewise-linear"
        assert data["card_count"] == 1
        assert data["average_retention"] == pytest.approx(1.0)
        assert list(data["retention_by_topic"]) == ["bio"]

    def test_never_reviewed_has_zero_retention(self, project, card_id):
        data = json.loads(invoke("retention", "--json", "-p", project).stdout)
        assert data["strategy"] == "exponential"
        assert data["average_retention"] == 0.0

    def test_unknown_strategy(self, project, card_id):
        result = invoke("retention", "-s", "hyperbolic", "-p", project)
        assert result.exit_code == 1
        assert "RF-VAL-000" in result.output


class TestMasteryAndStats:
    def test_mastery_json(self, project, card_id):
        invoke("add", "Untagged", "card", "-p", project)
        invoke("review", card_id, 5, "-p", project)

        data = json.loads(invoke("mastery", "--json", "-p", project).stdout)

        assert [t["topic_id"] for t in data["topics"]] == ["bio"]
        assert data["topics"][0]["card_count"] == 1
        statuses = {c["card_id"]: c["status"] for c in data["cards"]}
        assert statuses[card_id] == "learning"
        assert sorted(statuses.values()) == ["learning", "new"]

    def test_mastery_empty(self, project):
        result = invoke("mastery", "-p", project)
        assert "No tagged cards yet" in result.output

    def test_stats_json(self, project, card_id):
        data = json.loads(invoke("stats", "--json", "-p", project).stdout)
        assert data["total_cards"] == 1
        assert data["new_cards"] == 1
        assert data["due_cards"] == 1
        assert data["recommended_daily_reviews"] == 5

    def test_stats_table(self, project, card_id):
        result = invoke("stats", "-p", project)
        assert result.exit_code == 0
        assert "Learning Statistics" in result.output


class TestConfigFile:
    def test_invalid_config_reports_error(self, project):
        (project / "recallforge.yaml").write_text("scheduler:\n  failure_policy: forget\n")
        result = invoke("due", "-p", project)
        assert result.exit_code == 1
        assert "RF-VAL-003" in result.output
