from __future__ import annotations

from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import Iterator
from urllib import error, request

import pytest
from selenium.common.exceptions import WebDriverException

from loginflow.core.browser import BrowserSession
from loginflow.core.verifier import LoginFlowVerifier
from loginflow.logging.artifacts import ArtifactManager
from loginflow.logging.audit import StepRecorder

BROWSERS = ["chrome", "firefox"]
PLACEHOLDER_CREDENTIAL = "CHANGE_ME"
ARTIFACTS_ROOT = Path(__file__).resolve().parents[1] / "artifacts"


@dataclass(slots=True)
class FrameworkRuntime:
    driver: object
    browser_session: BrowserSession
    artifact_manager: ArtifactManager
    recorder: StepRecorder
    verifier: LoginFlowVerifier


def require_reachable_base_url(suite_config) -> None:
    try:
        with request.urlopen(suite_config.environment.base_url, timeout=2):
            return
    except (error.URLError, TimeoutError) as exc:
        pytest.skip(f"Target app is not reachable at {suite_config.environment.base_url}: {exc}")


def require_credentials(suite_config) -> None:
    credentials = suite_config.credentials
    if PLACEHOLDER_CREDENTIAL in (credentials.id, credentials.pw, credentials.user_name):
        pytest.skip("Fill in credentials in config/test_suite.json (or point LOGINFLOW_CONFIG at a real suite file)")


def require_browser_enabled(suite_config, browser_name: str) -> None:
    if browser_name not in suite_config.environment.browser_matrix:
        pytest.skip(f"{browser_name} is not in the configured browser matrix")


@contextmanager
def managed_runtime(suite_config, browser_name: str, test_name: str = "") -> Iterator[FrameworkRuntime]:
    browser_session = BrowserSession(suite_config.environment)
    try:
        driver = browser_session.start(browser_name)
    except WebDriverException as exc:
        pytest.skip(f"WebDriver could not start for {browser_name}: {exc}")
    artifact_manager = ArtifactManager(ARTIFACTS_ROOT)
    recorder = StepRecorder(artifact_manager, driver=driver, test_name=test_name)
    verifier = LoginFlowVerifier(driver, suite_config, recorder=recorder)
    runtime = FrameworkRuntime(
        driver=driver,
        browser_session=browser_session,
        artifact_manager=artifact_manager,
        recorder=recorder,
        verifier=verifier,
    )
    try:
        yield runtime
    finally:
        try:
            verifier.network.close()
        finally:
            driver.quit()


@contextmanager
def login_runtime(suite_config, browser_name: str, test_name: str = "") -> Iterator[LoginFlowVerifier]:
    """Skips unless the target app, credentials and browser are all usable."""

    require_browser_enabled(suite_config, browser_name)
    require_reachable_base_url(suite_config)
    require_credentials(suite_config)
    with managed_runtime(suite_config, browser_name, test_name) as runtime:
        yield runtime.verifier
