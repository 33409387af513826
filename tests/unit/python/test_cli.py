#!/usr/bin/env python3
"""
Unit tests for ideation_workshop/cli.py - command-line interface

Each test points the CLI at a temporary state directory and runs with
NO_COLOR so output is plain text.
"""

import json
import os
import tempfile
from pathlib import Path
from unittest.mock import patch

import pytest

import sys
sys.path.insert(0, '.')
from ideation_workshop.cli import build_parser, main
from ideation_workshop.evaluations import EvaluationStore
from ideation_workshop.models import Card, CardCategory, CardCombination
from ideation_workshop.storage import JsonFileStorage
from ideation_workshop.store import WorkshopStore


@pytest.fixture
def home():
    with tempfile.TemporaryDirectory() as tmpdir:
        env = {"IDEATION_HOME": tmpdir, "NO_COLOR": "1"}
        with patch.dict(os.environ, env):
            for key in ("IDEATION_STATE_DIR", "IDEATION_LOG_DIR", "IDEATION_CONFIG_FILE"):
                os.environ.pop(key, None)
            yield Path(tmpdir)


def seed_workshop(state_dir):
    """Create one workshop with one idea on disk; returns (workshop, idea)."""
    storage = JsonFileStorage(state_dir)
    store = WorkshopStore(storage)
    workshop = store.create_workshop("Demo", date="2026-01-09", facilitator_name="Sam")
    store.set_current_workshop(workshop)
    combination = CardCombination()
    combination.set_cards(CardCategory.THING, [Card(id="t1", type="Thing", name="Clothing")])
    idea = store.create_idea(title="Smart Shirt", description="test", card_combination=combination)
    EvaluationStore(storage).toggle_criteria(idea.id, "c7")
    return workshop, idea


class TestParser:
    """Tests for build_parser."""

    def test_state_dir_option(self):
        args = build_parser().parse_args(["--state-dir", "/tmp/x", "workshops"])
        assert args.state_dir == "/tmp/x"
        assert args.command == "workshops"

    def test_catalog_rejects_unknown_category(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args(["catalog", "gadget"])

    def test_no_command_prints_help(self, home, capsys):
        assert main([]) == 1
        assert "usage:" in capsys.readouterr().out


class TestListingCommands:
    """Tests for workshops/ideas/summary/catalog."""

    def test_workshops_empty(self, home, capsys):
        assert main(["workshops"]) == 0
        assert "No workshops yet." in capsys.readouterr().out

    def test_workshops_lists_idea_counts(self, home, capsys):
        workshop, _ = seed_workshop(home / "state")

        assert main(["workshops"]) == 0

        output = capsys.readouterr().out
        assert workshop.id in output
        assert "ideas: 1" in output

    def test_explicit_state_dir(self, home, capsys):
        workshop, _ = seed_workshop(home / "elsewhere")

        assert main(["--state-dir", str(home / "elsewhere"), "ideas", workshop.id]) == 0

        assert "Smart Shirt  [Clothing]" in capsys.readouterr().out

    def test_summary(self, home, capsys):
        workshop, _ = seed_workshop(home / "state")

        assert main(["summary", workshop.id]) == 0

        output = capsys.readouterr().out
        assert "Smart Shirt" in output
        assert "Evaluation: 1 criterion" in output

    def test_unknown_workshop(self, home, capsys):
        assert main(["summary", "missing"]) == 1
        assert "Unknown workshop: missing" in capsys.readouterr().err

    def test_catalog(self, home, capsys):
        assert main(["catalog", "sensor"]) == 0

        output = capsys.readouterr().out
        assert "SENSORS" in output
        assert "Humidity" in output


class TestDeleteWorkshop:
    """Tests for delete-workshop."""

    def test_cascades_to_ideas_and_evaluations(self, home, capsys):
        # given
        workshop, idea = seed_workshop(home / "state")

        # when
        result = main(["delete-workshop", workshop.id])

        # then
        assert result == 0
        assert "Deleted workshop Demo and 1 idea(s)" in capsys.readouterr().out
        state = home / "state"
        assert json.loads((state / "workshops.json").read_text()) == []
        assert json.loads((state / "ideas.json").read_text()) == []
        assert idea.id not in json.loads((state / "selected_criteria.json").read_text())

    def test_writes_log(self, home):
        workshop, _ = seed_workshop(home / "state")

        main(["delete-workshop", workshop.id])

        logs = list((home / "logs" / "sessions").glob("*-workshop-cli.log"))
        assert len(logs) == 1
        assert "Workshop deleted" in logs[0].read_text()
