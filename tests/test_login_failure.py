from __future__ import annotations

import pytest

from loginflow.core.browser import BrowserSession
from loginflow.core.verifier import ID_INPUT, LOGIN_BUTTON, PASSWORD_INPUT
from tests.helpers import BROWSERS, login_runtime


@pytest.fixture()
def on_login_page(suite_config, browser_name, request):
    with login_runtime(suite_config, browser_name, request.node.name) as verifier:
        verifier.actions.open(suite_config.pages.home_path)
        verifier.open_login_via_mypage_link()
        BrowserSession.clear_session(verifier.driver)
        yield verifier


@pytest.mark.integration
@pytest.mark.parametrize("browser_name", BROWSERS)
def test_unknown_account_shows_mismatch_alert(suite_config, on_login_page):
    verifier = on_login_page
    scenario = suite_config.scenario("unknown_account")

    with verifier.step("enter unknown account"):
        verifier.enter_credentials(scenario.get("id", "no_user"), scenario.get("pw", "Any123!"))

    with verifier.step("submit and check the alert"):
        record = verifier.submit_expecting_dialog(suite_config.messages.invalid_credentials)
        assert record.matched

    with verifier.step("stay on the login page"):
        verifier.assert_on_login_page()


@pytest.mark.integration
@pytest.mark.parametrize("browser_name", BROWSERS)
def test_wrong_password_shows_same_mismatch_alert(suite_config, on_login_page):
    verifier = on_login_page
    scenario = suite_config.scenario("wrong_password")

    with verifier.step("enter valid id with a wrong password"):
        verifier.enter_credentials(suite_config.credentials.id, scenario.get("pw", "Wrong999"))

    with verifier.step("submit and check the alert"):
        verifier.submit_expecting_dialog(suite_config.messages.invalid_credentials)

    with verifier.step("stay on the login page"):
        verifier.assert_on_login_page()


@pytest.mark.integration
@pytest.mark.parametrize("browser_name", BROWSERS)
def test_empty_id_prompts_and_keeps_focus(suite_config, on_login_page):
    verifier = on_login_page
    verifier.intercept_login_api()

    with verifier.step("enter only the password"):
        verifier.actions.fill(PASSWORD_INPUT, suite_config.credentials.pw)
        verifier.assertions.assert_value(ID_INPUT, "")
        verifier.assertions.assert_enabled(LOGIN_BUTTON)

    with verifier.step("submit and check the alert"):
        verifier.submit_expecting_dialog(suite_config.messages.missing_id)

    with verifier.step("no login request was sent"):
        verifier.assert_login_api_not_called()

    with verifier.step("page and focus stay on the id field"):
        verifier.assert_on_login_page()
        verifier.assertions.assert_focused(ID_INPUT)


@pytest.mark.integration
@pytest.mark.parametrize("browser_name", BROWSERS)
def test_empty_password_prompts_and_keeps_focus(suite_config, on_login_page):
    verifier = on_login_page
    verifier.intercept_login_api()

    with verifier.step("enter only the id"):
        verifier.actions.fill(ID_INPUT, suite_config.credentials.id)
        verifier.assertions.assert_value(PASSWORD_INPUT, "")
        verifier.assertions.assert_enabled(LOGIN_BUTTON)

    with verifier.step("submit and check the alert"):
        verifier.submit_expecting_dialog(suite_config.messages.missing_password)

    with verifier.step("no login request was sent"):
        verifier.assert_login_api_not_called()

    with verifier.step("page and focus stay on the password field"):
        verifier.assert_on_login_page()
        verifier.assertions.assert_focused(PASSWORD_INPUT)
