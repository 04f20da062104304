from __future__ import annotations

import logging
from time import monotonic, sleep

from selenium.common.exceptions import (
    InvalidSelectorException,
    NoSuchElementException,
    StaleElementReferenceException,
    WebDriverException,
)

from loginflow.config.schema import TestSuiteConfig
from loginflow.core.exceptions import ElementLookupTimeout
from loginflow.core.locators import Locator, locator_from_selector

log = logging.getLogger(__name__)

ElementRef = str | Locator


class SafeFinder:
    """Centralized element lookup over configured keys and ad-hoc locators."""

    def __init__(self, driver, suite_config: TestSuiteConfig) -> None:
        self.driver = driver
        self.suite_config = suite_config

    @property
    def poll_interval(self) -> float:
        return self.suite_config.environment.poll_interval_seconds

    def find(self, element: ElementRef, timeout: float | None = None):
        duration = timeout if timeout is not None else self.suite_config.environment.default_timeout_seconds
        return self._wait_for_first_match(self.locators_for(element), duration, describe(element))

    def query(self, element: ElementRef):
        """Returns the current best match or ``None`` without waiting."""

        for locator in self.locators_for(element):
            match = self._first_match(locator)
            if match is not None:
                return match
        return None

    def locators_for(self, element: ElementRef) -> list[Locator]:
        if isinstance(element, Locator):
            return [element]
        element_definition = self.suite_config.get_element(element)
        locators = [Locator.from_definition(element_definition)]
        for fallback in element_definition.fallback_selectors:
            locators.append(locator_from_selector(fallback))
        return locators

    def _wait_for_first_match(self, locators: list[Locator], timeout: float, label: str):
        deadline = monotonic() + timeout
        last_error: Exception | None = None
        while True:
            for locator in locators:
                try:
                    match = self._first_match(locator, raise_invalid=True)
                except InvalidSelectorException as exc:
                    last_error = exc
                    continue
                if match is not None:
                    log.debug("Resolved %s via %s", label, locator.describe())
                    return match
            if monotonic() >= deadline:
                break
            sleep(self.poll_interval)
        message = f"Timed out after {timeout}s waiting for element {label}"
        if last_error:
            raise ElementLookupTimeout(f"{message}: {last_error}") from last_error
        raise ElementLookupTimeout(message)

    def _first_match(self, locator: Locator, raise_invalid: bool = False):
        by, selector = locator.to_selenium()
        try:
            matches = self.driver.find_elements(by, selector)
        except InvalidSelectorException:
            if raise_invalid:
                raise
            return None
        except (NoSuchElementException, StaleElementReferenceException):
            return None
        if not matches:
            return None
        for match in matches:
            try:
                if match.is_displayed():
                    return match
            except (StaleElementReferenceException, WebDriverException):
                continue
        return matches[0]


def describe(element: ElementRef) -> str:
    if isinstance(element, Locator):
        return element.describe()
    return element
