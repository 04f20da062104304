from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum

from selenium.common.exceptions import NoAlertPresentException

from loginflow.core.exceptions import AssertionFailure, DialogStateError, DialogTimeout
from loginflow.utils.wait import wait_until

log = logging.getLogger(__name__)


class DialogAction(str, Enum):
    ACCEPT = "accept"
    DISMISS = "dismiss"


class DialogState(str, Enum):
    IDLE = "idle"
    ARMED = "armed"
    TRIGGERED = "triggered"
    RESOLVED = "resolved"


@dataclass(frozen=True, slots=True)
class DialogExpectation:
    message_substring: str
    action: DialogAction = DialogAction.ACCEPT


@dataclass(frozen=True, slots=True)
class DialogRecord:
    message: str
    action: DialogAction
    matched: bool


class DialogInterceptor:
    """Waits for one native dialog at a time, checks its message and resolves it.

    The interceptor must be armed before the action that raises the dialog;
    :meth:`expect` does both in the required order.
    """

    def __init__(self, driver, timeout: float = 5, interval: float = 0.2) -> None:
        self.driver = driver
        self.timeout = timeout
        self.interval = interval
        self.state = DialogState.IDLE
        self.expectation: DialogExpectation | None = None
        self.history: list[DialogRecord] = []

    def arm(self, expectation: DialogExpectation) -> None:
        if self.state in (DialogState.ARMED, DialogState.TRIGGERED):
            raise DialogStateError(f"Cannot arm a dialog wait while {self.state.value}")
        self.expectation = expectation
        self.state = DialogState.ARMED
        log.debug("Armed dialog wait for %r", expectation.message_substring)

    def wait(self, timeout: float | None = None) -> DialogRecord:
        if self.state is not DialogState.ARMED or self.expectation is None:
            raise DialogStateError("wait() requires an armed dialog expectation")
        duration = timeout if timeout is not None else self.timeout
        alert = wait_until(self._current_alert, duration, self.interval)
        if not alert:
            self._disarm()
            raise DialogTimeout(f"No dialog appeared within {duration}s")

        self.state = DialogState.TRIGGERED
        expectation = self.expectation
        try:
            message = alert.text or ""
            log.info("Dialog raised: %s", message)
            if expectation.action is DialogAction.ACCEPT:
                alert.accept()
            else:
                alert.dismiss()
        except Exception:
            self._disarm()
            raise
        record = DialogRecord(
            message=message,
            action=expectation.action,
            matched=expectation.message_substring in message,
        )
        self.history.append(record)
        self.state = DialogState.RESOLVED
        if not record.matched:
            raise AssertionFailure("Dialog message did not contain the expected text", expectation.message_substring, message)
        return record

    def expect(self, expectation: DialogExpectation, trigger, timeout: float | None = None) -> DialogRecord:
        """Arms the wait, runs ``trigger`` and returns the resolved dialog."""

        self.arm(expectation)
        try:
            trigger()
        except BaseException:
            self._disarm()
            raise
        return self.wait(timeout)

    def _disarm(self) -> None:
        self.state = DialogState.IDLE
        self.expectation = None

    def _current_alert(self):
        try:
            return self.driver.switch_to.alert
        except NoAlertPresentException:
            return None
