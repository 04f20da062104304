from __future__ import annotations

from pathlib import Path

import pytest

from loginflow.config.loader import ConfigLoader
from loginflow.logging.artifacts import ArtifactManager
from tests.fakes import FakeDriver

PROJECT_ROOT = Path(__file__).resolve().parents[1]


@pytest.fixture(scope="session", autouse=True)
def reset_artifacts_for_test_run():
    manager = ArtifactManager(PROJECT_ROOT / "artifacts")
    manager.reset()
    return manager


@pytest.fixture()
def suite_config():
    config_path = ConfigLoader.resolve_path(PROJECT_ROOT / "config" / "test_suite.json")
    return ConfigLoader.load(config_path)


@pytest.fixture()
def fast_config(suite_config):
    """Suite configuration with short waits for tests against fake drivers."""

    suite_config.environment.base_url = "http://app.test"
    suite_config.environment.default_timeout_seconds = 0.3
    suite_config.environment.dialog_timeout_seconds = 0.3
    suite_config.environment.poll_interval_seconds = 0.01
    return suite_config


@pytest.fixture()
def fake_driver():
    return FakeDriver()
