from __future__ import annotations

import logging
from contextlib import nullcontext

from loginflow.config.schema import TestSuiteConfig
from loginflow.core.actions import SafeActions
from loginflow.core.assertions import StateAssertions
from loginflow.core.browser import BrowserSession
from loginflow.core.dialogs import DialogAction, DialogExpectation, DialogInterceptor, DialogRecord
from loginflow.core.finder import SafeFinder
from loginflow.core.network import InterceptedRequestFlag, NetworkObserver
from loginflow.utils.text import display_name_pattern

log = logging.getLogger(__name__)

MYPAGE_LINK = "mypage_link"
ID_INPUT = "login_id_input"
PASSWORD_INPUT = "login_password_input"
LOGIN_BUTTON = "login_button"
USER_NAME = "mypage_user_name"

SUBMIT_BY_CLICK = "click"
SUBMIT_BY_ENTER = "enter"


class LoginFlowVerifier:
    """Drives and verifies the login flow of the application under test.

    Composes the navigation driver (:class:`SafeActions`), the polling
    assertions (:class:`StateAssertions`), the dialog interceptor and the
    network observer around a single WebDriver session.
    """

    def __init__(self, driver, suite_config: TestSuiteConfig, recorder=None) -> None:
        environment = suite_config.environment
        self.driver = driver
        self.suite_config = suite_config
        self.pages = suite_config.pages
        self.messages = suite_config.messages
        self.recorder = recorder
        self.finder = SafeFinder(driver, suite_config)
        self.actions = SafeActions(driver, self.finder, environment.base_url)
        self.assertions = StateAssertions(driver, self.finder)
        self.dialogs = DialogInterceptor(
            driver,
            timeout=environment.dialog_timeout_seconds,
            interval=environment.poll_interval_seconds,
        )
        self.network = NetworkObserver(driver)

    def step(self, name: str):
        if self.recorder is None:
            return nullcontext()
        return self.recorder.step(name)

    def start_logged_out(self) -> None:
        self.actions.open(self.pages.home_path)
        BrowserSession.clear_session(self.driver)

    def open_login_via_mypage_link(self) -> None:
        self.actions.click(MYPAGE_LINK)
        self.assert_on_login_page()

    def enter_credentials(self, user_id: str, password: str) -> None:
        self.actions.fill(ID_INPUT, user_id)
        self.actions.fill(PASSWORD_INPUT, password)

    def submit(self, method: str = SUBMIT_BY_CLICK) -> None:
        if method == SUBMIT_BY_CLICK:
            self.actions.click(LOGIN_BUTTON)
        elif method == SUBMIT_BY_ENTER:
            self.actions.press_key(PASSWORD_INPUT, "Enter")
        else:
            raise ValueError(f"Unsupported submit method: {method}")

    def login(self, user_id: str, password: str, method: str = SUBMIT_BY_CLICK) -> None:
        self.enter_credentials(user_id, password)
        self.submit(method)

    def assert_on_login_page(self, timeout: float | None = None) -> str:
        return self.assertions.assert_url_matches(self.pages.login_url_pattern, timeout=timeout)

    def assert_logged_in(self, expected_name: str, timeout: float | None = None) -> None:
        self.assertions.assert_url_matches(self.pages.mypage_url_pattern, timeout=timeout)
        self.assertions.assert_visible(USER_NAME, timeout=timeout)
        self.assertions.assert_text_matches(
            USER_NAME,
            display_name_pattern(expected_name, self.pages.display_name_suffix),
            timeout=timeout,
        )
        log.info("Logged in as %s", expected_name)

    def expect_dialog(
        self,
        message_substring: str,
        trigger,
        action: DialogAction = DialogAction.ACCEPT,
        timeout: float | None = None,
    ) -> DialogRecord:
        return self.dialogs.expect(DialogExpectation(message_substring, action), trigger, timeout=timeout)

    def submit_expecting_dialog(self, message_substring: str, method: str = SUBMIT_BY_CLICK) -> DialogRecord:
        return self.expect_dialog(message_substring, lambda: self.submit(method))

    def intercept_login_api(self) -> InterceptedRequestFlag:
        return self.network.intercept_route(self.pages.login_api_pattern)

    def login_api_was_called(self) -> bool:
        return self.network.was_requested(self.pages.login_api_pattern)

    def assert_login_api_not_called(self) -> None:
        self.network.assert_not_requested(self.pages.login_api_pattern)
