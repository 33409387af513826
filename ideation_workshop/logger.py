#!/usr/bin/env python3
"""
Ideation Workshop - Event Logger

Provides logging functionality for workshop sessions.
Logs to both:
- Session-specific log (log_dir/sessions/<date>-workshop-<session>.log)
- Daily log (log_dir/<date>.log)
"""

from datetime import datetime
from pathlib import Path
from typing import Optional


class WorkshopLogger:
    """Logger for store mutations, generation calls and facilitator events."""

    def __init__(self, log_dir: Path, session_id: str = "default"):
        """
        Initialize logger for a workshop session.

        Args:
            log_dir: Directory for log files (see WorkshopConfig.log_dir)
            session_id: Session identifier for log entries
        """
        self.log_dir = Path(log_dir)
        self.session_id = session_id
        self.session_dir = self.log_dir / "sessions"

        try:
            self.session_dir.mkdir(parents=True, exist_ok=True)
        except OSError:
            pass

        self.log_file = self.session_dir / f"{self._get_log_date()}-workshop-{session_id}.log"

    def _get_timestamp(self) -> str:
        """Get timestamp for log entries."""
        return datetime.now().strftime("%Y-%m-%d %H:%M:%S")

    def _sanitize_message(self, message: str) -> str:
        """Sanitize message by replacing newlines."""
        return message.replace("\n", "\\n")

    def _get_log_date(self) -> str:
        """Get date for log file naming."""
        return datetime.now().strftime("%Y-%m-%d")

    def log_event(self, category: str, message: str) -> None:
        """
        Log an event to both session and daily log files.

        Args:
            category: Event category (e.g., STORE, GENERATION, ERROR)
            message: Event message
        """
        timestamp = self._get_timestamp()
        safe_message = self._sanitize_message(message)
        log_line = f"[{timestamp}] [{category}] {safe_message}\n"

        try:
            with open(self.log_file, "a") as f:
                f.write(log_line)
        except OSError:
            pass

        daily_log = self.log_dir / f"{self._get_log_date()}.log"
        try:
            with open(daily_log, "a") as f:
                f.write(f"[workshop-{self.session_id}] {log_line}")
        except OSError:
            pass

    # --- Store Events ---

    def log_store(self, message: str) -> None:
        """Log a workshop/idea store mutation."""
        self.log_event("STORE", message)

    def log_evaluation(self, message: str) -> None:
        """Log an evaluation store mutation."""
        self.log_event("EVALUATION", message)

    # --- Generation Events ---

    def log_generation_start(self, command: str, prompt_preview: str = "") -> None:
        """Log start of a generation request."""
        if prompt_preview:
            preview = prompt_preview[:50] + "..." if len(prompt_preview) > 50 else prompt_preview
            self.log_event("GENERATION", f"{command} started: {preview}")
        else:
            self.log_event("GENERATION", f"{command} started")

    def log_generation_complete(self, command: str, chars: int = 0) -> None:
        """Log completion of a generation request."""
        if chars > 0:
            self.log_event("GENERATION", f"{command} complete | {chars} chars")
        else:
            self.log_event("GENERATION", f"{command} complete")

    def log_discarded_response(self, command: str, idea_id: str) -> None:
        """Log a response dropped because its idea is no longer current."""
        self.log_event("GENERATION", f"{command} response discarded, idea {idea_id} no longer current")

    # --- Facilitator Events ---

    def log_facilitator(self, message: str) -> None:
        self.log_event("FACILITATOR", message)

    # --- Error Events ---

    def log_error(self, message: str, error: Optional[Exception] = None) -> None:
        """Log an error."""
        if error:
            self.log_event("ERROR", f"{message}: {type(error).__name__}: {error}")
        else:
            self.log_event("ERROR", message)

    # --- Utility ---

    def get_log_content(self) -> str:
        """Get full session log content."""
        try:
            with open(self.log_file, 'r') as f:
                return f.read()
        except OSError:
            return ""
