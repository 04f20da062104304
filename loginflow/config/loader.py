from __future__ import annotations

import json
import os
from pathlib import Path

from loginflow.config.schema import TestSuiteConfig

CONFIG_ENV_VAR = "LOGINFLOW_CONFIG"


class ConfigLoader:
    """Loads and validates the JSON test suite configuration."""

    @staticmethod
    def load(path: str | Path) -> TestSuiteConfig:
        config_path = Path(path)
        with config_path.open("r", encoding="utf-8") as handle:
            payload = json.load(handle)
        return TestSuiteConfig.model_validate(payload)

    @staticmethod
    def resolve_path(default: str | Path) -> Path:
        override = os.getenv(CONFIG_ENV_VAR)
        return Path(override) if override else Path(default)
