#!/usr/bin/env python3
"""
Ideation Workshop - Configuration

Resolves directories and generation settings from environment variables
and an optional JSON config file. Environment wins over the file, the
file wins over built-in defaults.

Config file example (~/.ideation-workshop/config.json):
{
    "generation": {
        "url": "http://localhost:11434/api/generate",
        "model": "mistral:instruct",
        "temperature": 0.7,
        "topP": 0.9,
        "timeout": 120
    }
}
"""

import json
import os
from pathlib import Path
from typing import Optional

from .client import GenerationSettings


def get_config_value(path: str, config_file: str):
    """Read a value from JSON config using dot-notation path. Returns the value or None."""
    parts = path.split('.')

    try:
        with open(config_file, 'r') as f:
            data = json.load(f)
    except (OSError, ValueError):
        return None

    for part in parts:
        if isinstance(data, dict):
            data = data.get(part)
        else:
            return None

    return data


class WorkshopConfig:
    """Configuration for a workshop session."""

    def __init__(self, state_dir: Optional[str] = None):
        """
        Initialize config.

        Args:
            state_dir: Explicit state directory, overriding IDEATION_STATE_DIR
        """
        self.home = Path(os.environ.get(
            "IDEATION_HOME",
            str(Path.home() / ".ideation-workshop")
        )).expanduser()
        self.config_file = os.environ.get(
            "IDEATION_CONFIG_FILE",
            str(self.home / "config.json")
        )
        self.state_dir = Path(
            state_dir
            or os.environ.get("IDEATION_STATE_DIR")
            or str(self.home / "state")
        ).expanduser()
        self.log_dir = Path(os.environ.get(
            "IDEATION_LOG_DIR",
            str(self.home / "logs")
        )).expanduser()

    def _file_value(self, key: str):
        return get_config_value(f"generation.{key}", self.config_file)

    def generation_settings(self) -> GenerationSettings:
        """Build client settings: environment > config file > defaults."""
        defaults = GenerationSettings()

        url = os.environ.get("IDEATION_GENERATE_URL") or self._file_value("url") or defaults.url
        model = os.environ.get("IDEATION_MODEL") or self._file_value("model") or defaults.model

        return GenerationSettings(
            url=url,
            model=model,
            temperature=_as_float(self._file_value("temperature"), defaults.temperature),
            top_p=_as_float(self._file_value("topP"), defaults.top_p),
            timeout=_as_float(self._file_value("timeout"), defaults.timeout),
        )


def _as_float(value, default: Optional[float]) -> Optional[float]:
    if value is None:
        return default
    try:
        return float(value)
    except (TypeError, ValueError):
        return default
