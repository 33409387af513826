#!/usr/bin/env python3
"""
Unit tests for ideation_workshop/logger.py - WorkshopLogger class
"""

import tempfile
import pytest
from pathlib import Path

import sys
sys.path.insert(0, '.')
from ideation_workshop.logger import WorkshopLogger


class TestWorkshopLoggerInit:
    """Tests for WorkshopLogger initialization."""

    def test_init_creates_session_directory(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            WorkshopLogger(Path(tmpdir) / "logs", "abc")
            assert (Path(tmpdir) / "logs" / "sessions").is_dir()

    def test_init_sets_session_id(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            logger = WorkshopLogger(Path(tmpdir), "my-session")
            assert logger.session_id == "my-session"

    def test_log_file_path(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            logger = WorkshopLogger(Path(tmpdir), "abc")
            assert logger.log_file.name.endswith("-workshop-abc.log")


class TestLogEvent:
    """Tests for log_event method."""

    def test_log_event_writes_formatted_entry(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            logger = WorkshopLogger(Path(tmpdir), "test")
            logger.log_event("CATEGORY", "Test message")

            content = logger.get_log_content()
            assert "[CATEGORY] Test message" in content
            # Should have timestamp format like [2026-01-11 10:30:00]
            assert content.startswith("[20")

    def test_newlines_are_escaped(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            logger = WorkshopLogger(Path(tmpdir), "test")
            logger.log_event("TEST", "Line1\nLine2")

            content = logger.get_log_content()
            assert "Line1\\nLine2" in content
            assert content.count("\n") == 1

    def test_daily_log_is_written(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            logger = WorkshopLogger(Path(tmpdir), "test")
            logger.log_event("TEST", "Daily message")

            daily_logs = list(Path(tmpdir).glob("*.log"))
            assert len(daily_logs) == 1
            assert "[workshop-test]" in daily_logs[0].read_text()

    def test_unwritable_directory_does_not_raise(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            blocker = Path(tmpdir) / "file"
            blocker.write_text("not a directory")

            logger = WorkshopLogger(blocker, "test")
            logger.log_event("TEST", "lost")

            assert logger.get_log_content() == ""


class TestCategoryMethods:
    """Tests for the category helpers."""

    @pytest.fixture
    def logger(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            yield WorkshopLogger(Path(tmpdir), "test")

    def test_store_and_evaluation(self, logger):
        logger.log_store("Workshop created: w1")
        logger.log_evaluation("Criteria toggled: c1")

        content = logger.get_log_content()
        assert "[STORE] Workshop created: w1" in content
        assert "[EVALUATION] Criteria toggled: c1" in content

    def test_generation_start_truncates_preview(self, logger):
        logger.log_generation_start("reflect", "x" * 80)

        content = logger.get_log_content()
        assert "[GENERATION] reflect started: " + "x" * 50 + "..." in content

    def test_generation_complete_with_chars(self, logger):
        logger.log_generation_complete("creative", 120)
        assert "creative complete | 120 chars" in logger.get_log_content()

    def test_discarded_response(self, logger):
        logger.log_discarded_response("storyboard", "i1")
        assert "storyboard response discarded, idea i1 no longer current" in logger.get_log_content()

    def test_error_with_exception(self, logger):
        logger.log_error("Failed to persist ideas", OSError("disk full"))
        assert "[ERROR] Failed to persist ideas: OSError: disk full" in logger.get_log_content()
