from __future__ import annotations

import logging
import re
from dataclasses import dataclass

from selenium.common.exceptions import NoSuchElementException, StaleElementReferenceException

from loginflow.core.exceptions import ExpectationTimeout
from loginflow.core.finder import ElementRef, SafeFinder, describe
from loginflow.utils.patterns import compile_url_pattern
from loginflow.utils.text import describe_pattern, text_matches
from loginflow.utils.wait import poll

log = logging.getLogger(__name__)

MISSING = "<missing>"

# Element lookups can race with re-renders; such samples count as "not yet".
TRANSIENT_ERRORS = (NoSuchElementException, StaleElementReferenceException)


@dataclass(frozen=True, slots=True)
class ExpectedState:
    url_pattern: re.Pattern[str] | None = None
    text_pattern: re.Pattern[str] | str | None = None


class StateAssertions:
    """Polling assertions over the page's observable state."""

    def __init__(self, driver, finder: SafeFinder) -> None:
        self.driver = driver
        self.finder = finder

    @property
    def timeout(self) -> float:
        return self.finder.suite_config.environment.default_timeout_seconds

    def assert_url_matches(self, pattern: str | re.Pattern[str], timeout: float | None = None) -> str:
        compiled = compile_url_pattern(pattern)
        return self._expect(
            "URL did not match",
            lambda: self.driver.current_url,
            lambda url: bool(url) and compiled.search(url) is not None,
            f"/{compiled.pattern}/",
            timeout,
        )

    def assert_visible(self, element: ElementRef, timeout: float | None = None) -> str:
        def read_state() -> str:
            target = self.finder.query(element)
            if target is None:
                return MISSING
            return "visible" if target.is_displayed() else "hidden"

        return self._expect(f"{describe(element)} was not visible", read_state, lambda state: state == "visible", "visible", timeout)

    def assert_text_matches(
        self,
        element: ElementRef,
        pattern: str | re.Pattern[str],
        timeout: float | None = None,
    ) -> str:
        return self._expect(
            f"{describe(element)} text did not match",
            lambda: self._read(element, lambda target: target.text),
            lambda text: text != MISSING and text_matches(text, pattern),
            describe_pattern(pattern),
            timeout,
        )

    def assert_focused(self, element: ElementRef, timeout: float | None = None) -> str:
        def read_state() -> str:
            target = self.finder.query(element)
            if target is None:
                return MISSING
            active = self.driver.switch_to.active_element
            if active == target:
                return "focused"
            return f"focus on <{active.tag_name}>"

        return self._expect(f"{describe(element)} was not focused", read_state, lambda state: state == "focused", "focused", timeout)

    def assert_value(self, element: ElementRef, expected: str, timeout: float | None = None) -> str:
        return self._expect(
            f"{describe(element)} value did not match",
            lambda: self._read(element, lambda target: target.get_attribute("value") or ""),
            lambda value: value == expected,
            expected,
            timeout,
        )

    def assert_enabled(self, element: ElementRef, timeout: float | None = None) -> str:
        def read_state() -> str:
            target = self.finder.query(element)
            if target is None:
                return MISSING
            return "enabled" if target.is_enabled() else "disabled"

        return self._expect(f"{describe(element)} was not enabled", read_state, lambda state: state == "enabled", "enabled", timeout)

    def assert_state(self, expected: ExpectedState, element: ElementRef | None = None, timeout: float | None = None) -> None:
        if expected.url_pattern is not None:
            self.assert_url_matches(expected.url_pattern, timeout=timeout)
        if expected.text_pattern is not None:
            if element is None:
                raise ValueError("text_pattern requires an element")
            self.assert_text_matches(element, expected.text_pattern, timeout=timeout)

    def _read(self, element: ElementRef, reader):
        target = self.finder.query(element)
        if target is None:
            return MISSING
        return reader(target)

    def _expect(self, description: str, read_state, accept, expected, timeout: float | None):
        duration = timeout if timeout is not None else self.timeout

        def safe_sample():
            try:
                return read_state()
            except TRANSIENT_ERRORS as exc:
                return f"<{type(exc).__name__}>"

        held, actual = poll(safe_sample, accept, duration, self.finder.poll_interval)
        if not held:
            raise ExpectationTimeout(f"{description} within {duration}s", expected, actual)
        log.debug("Confirmed %s", expected)
        return actual
