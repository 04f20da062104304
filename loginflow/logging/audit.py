from __future__ import annotations

import json
import logging
from contextlib import contextmanager
from dataclasses import asdict
from time import monotonic
from typing import Iterator

from selenium.common.exceptions import WebDriverException

from loginflow.core.metadata import StepRecord
from loginflow.logging.artifacts import ArtifactManager

log = logging.getLogger(__name__)


class StepRecorder:
    """Records named test steps to ``steps.jsonl`` and captures evidence on failure."""

    def __init__(self, artifact_manager: ArtifactManager, driver=None, test_name: str = "") -> None:
        self.artifact_manager = artifact_manager
        self.driver = driver
        self.test_name = test_name
        self.steps_path = artifact_manager.root / "steps.jsonl"

    @contextmanager
    def step(self, name: str) -> Iterator[None]:
        log.info("[%s] %s", self.test_name or "-", name)
        started = monotonic()
        try:
            yield
        except Exception as exc:
            record = StepRecord(
                test_name=self.test_name,
                step=name,
                status="failed",
                duration_seconds=round(monotonic() - started, 3),
                url=self._current_url(),
                error_type=type(exc).__name__,
                error=str(exc),
                artifact_paths=self.capture(f"{self.test_name}_{name}"),
            )
            self.write(record)
            raise
        self.write(
            StepRecord(
                test_name=self.test_name,
                step=name,
                status="passed",
                duration_seconds=round(monotonic() - started, 3),
                url=self._current_url(),
            )
        )

    def capture(self, label: str) -> dict[str, str]:
        if self.driver is None:
            return {}
        paths: dict[str, str] = {}
        timestamp = self.artifact_manager.timestamp()
        try:
            screenshot_path = self.artifact_manager.screenshot_path(label, timestamp)
            if self.driver.save_screenshot(str(screenshot_path)):
                paths["screenshot"] = str(screenshot_path)
            dom_path = self.artifact_manager.write_dom_snapshot(label, self.driver.page_source, timestamp)
            paths["dom_snapshot"] = str(dom_path)
        except WebDriverException as exc:
            # An open alert blocks page access; the step failure is reported regardless.
            log.warning("Could not capture artifacts for %s: %s", label, exc.msg)
        return paths

    def write(self, record: StepRecord) -> None:
        with self.steps_path.open("a", encoding="utf-8") as handle:
            handle.write(json.dumps(asdict(record), ensure_ascii=False) + "\n")

    def read(self) -> list[dict]:
        if not self.steps_path.exists():
            return []
        with self.steps_path.open("r", encoding="utf-8") as handle:
            return [json.loads(line) for line in handle if line.strip()]

    def _current_url(self) -> str:
        if self.driver is None:
            return ""
        try:
            return self.driver.current_url
        except WebDriverException:
            return ""
