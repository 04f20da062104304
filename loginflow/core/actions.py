from __future__ import annotations

import logging
import re
from time import monotonic, sleep
from urllib.parse import urljoin

from selenium.common.exceptions import (
    ElementClickInterceptedException,
    ElementNotInteractableException,
    StaleElementReferenceException,
)
from selenium.webdriver.common.keys import Keys

from loginflow.core.exceptions import ElementLookupTimeout
from loginflow.core.finder import ElementRef, SafeFinder, describe

log = logging.getLogger(__name__)

# "PageDown" -> "Page_Down", matching the Keys constant names once upper-cased.
_WORD_BOUNDARY = re.compile(r"(?<=[a-z0-9])(?=[A-Z])")

RETRYABLE_ACTION_ERRORS = (
    ElementClickInterceptedException,
    ElementNotInteractableException,
    StaleElementReferenceException,
)


class SafeActions:
    """High-level browser actions with bounded retries for not-yet-actionable elements."""

    def __init__(self, driver, finder: SafeFinder, base_url: str) -> None:
        self.driver = driver
        self.finder = finder
        self.base_url = base_url

    def url_for(self, path: str) -> str:
        return urljoin(self.base_url.rstrip("/") + "/", path.lstrip("/"))

    def open(self, path: str) -> None:
        url = self.url_for(path)
        log.info("Opening %s", url)
        self.driver.get(url)

    def click(self, element: ElementRef, timeout: float | None = None) -> None:
        log.info("Clicking %s", describe(element))
        self._perform(element, lambda target: target.click(), timeout)

    def fill(self, element: ElementRef, value: str, timeout: float | None = None) -> None:
        log.info("Filling %s", describe(element))

        def _fill(target) -> None:
            target.clear()
            if target.get_attribute("value"):
                target.send_keys(Keys.CONTROL, "a")
                target.send_keys(Keys.DELETE)
            if value:
                target.send_keys(value)

        self._perform(element, _fill, timeout)

    def press_key(self, element: ElementRef, key: str, timeout: float | None = None) -> None:
        log.info("Pressing %s in %s", key, describe(element))
        keystroke = resolve_key(key)
        self._perform(element, lambda target: target.send_keys(keystroke), timeout)

    def _perform(self, element: ElementRef, action, timeout: float | None) -> None:
        duration = timeout if timeout is not None else self.finder.suite_config.environment.default_timeout_seconds
        deadline = monotonic() + duration
        while True:
            target = self.finder.find(element, timeout=max(deadline - monotonic(), self.finder.poll_interval))
            try:
                action(target)
                return
            except RETRYABLE_ACTION_ERRORS as exc:
                if monotonic() >= deadline:
                    raise ElementLookupTimeout(
                        f"Element {describe(element)} was not actionable within {duration}s: {type(exc).__name__}"
                    ) from exc
                log.debug("Retrying action on %s after %s", describe(element), type(exc).__name__)
                sleep(self.finder.poll_interval)


def resolve_key(key: str) -> str:
    """Maps a key name such as ``Enter`` or ``Tab`` to its WebDriver keystroke."""

    if len(key) == 1:
        return key
    name = _WORD_BOUNDARY.sub("_", key).upper()
    keystroke = getattr(Keys, name, None)
    if keystroke is None:
        raise ValueError(f"Unknown key: {key}")
    return keystroke
