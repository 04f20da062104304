from __future__ import annotations

import pytest
from selenium.common.exceptions import WebDriverException

from loginflow.core.exceptions import UnexpectedNetworkCall
from loginflow.core.network import (
    FLUSH_HITS_SCRIPT,
    INSTALL_ROUTES_SCRIPT,
    MODE_BIDI,
    MODE_SCRIPT,
    NetworkObserver,
    detect_mode,
)
from tests.fakes import FakeDriver, FakeNetwork

LOGIN_API = "**/member/login*"


@pytest.fixture()
def observer(fake_driver):
    return NetworkObserver(fake_driver)


def test_intercept_installs_route_with_translated_pattern(fake_driver, observer):
    flag = observer.intercept_route(LOGIN_API)
    assert fake_driver.scripts == [INSTALL_ROUTES_SCRIPT]
    assert fake_driver.routes == [{"pattern": LOGIN_API, "regex": r"^.*\/member\/login[^/]*$", "abort": True}]
    assert flag.requested is False


def test_no_request_keeps_flag_clear(fake_driver, observer):
    observer.intercept_route(LOGIN_API)
    fake_driver.request("https://api.example.com/member/join")
    assert observer.was_requested() is False
    observer.assert_not_requested(LOGIN_API)


def test_matching_request_sets_flag_and_fails_assertion(fake_driver, observer):
    flag = observer.intercept_route(LOGIN_API)
    fake_driver.request("https://api.example.com/member/login", method="post")

    assert observer.was_requested(LOGIN_API) is True
    assert flag.requests[0].method == "POST"
    with pytest.raises(UnexpectedNetworkCall) as excinfo:
        observer.assert_not_requested(LOGIN_API)
    assert excinfo.value.urls == ["https://api.example.com/member/login"]


def test_hits_survive_repeated_reads(fake_driver, observer):
    observer.intercept_route(LOGIN_API)
    fake_driver.request("https://api.example.com/member/login")
    assert observer.was_requested(LOGIN_API)
    assert observer.was_requested(LOGIN_API)
    assert FLUSH_HITS_SCRIPT in fake_driver.scripts


def test_unregistered_route_cannot_be_asserted(observer):
    with pytest.raises(KeyError):
        observer.assert_not_requested(LOGIN_API)
    assert observer.was_requested(LOGIN_API) is False


@pytest.fixture()
def bidi_driver():
    return FakeDriver(network=FakeNetwork())


def test_bidi_session_intercepts_at_protocol_level(bidi_driver):
    observer = NetworkObserver(bidi_driver)
    flag = observer.intercept_route(LOGIN_API)

    assert observer.mode == MODE_BIDI
    assert INSTALL_ROUTES_SCRIPT not in bidi_driver.scripts
    assert len(bidi_driver.network.handlers) == 1
    assert flag.requested is False


def test_native_form_post_is_recorded_and_failed(bidi_driver):
    observer = NetworkObserver(bidi_driver)
    observer.intercept_route(LOGIN_API)

    bidi_driver.request("https://api.example.com/member/login", method="post")
    other = bidi_driver.network.dispatch("https://api.example.com/member/join", "GET")

    assert bidi_driver.network.sent[0].outcome == "failed"
    assert other.outcome == "continued"
    assert observer.was_requested(LOGIN_API)
    with pytest.raises(UnexpectedNetworkCall):
        observer.assert_not_requested(LOGIN_API)


def test_observed_route_is_let_through_when_not_aborting(bidi_driver):
    observer = NetworkObserver(bidi_driver)
    flag = observer.intercept_route(LOGIN_API, abort=False)
    request = bidi_driver.network.dispatch("https://api.example.com/member/login", "POST")
    assert request.outcome == "continued"
    assert flag.requests[0].url == "https://api.example.com/member/login"


def test_close_removes_protocol_handler(bidi_driver):
    observer = NetworkObserver(bidi_driver)
    observer.intercept_route(LOGIN_API)
    observer.close()
    assert bidi_driver.network.handlers == {}
    observer.close()


def test_falls_back_to_page_script_without_bidi():
    driver = FakeDriver(network=FakeNetwork(error=WebDriverException("BiDi not supported")))
    observer = NetworkObserver(driver)
    observer.intercept_route(LOGIN_API)
    assert observer.mode == MODE_SCRIPT
    assert driver.scripts == [INSTALL_ROUTES_SCRIPT]


def test_plain_session_uses_page_script(fake_driver):
    assert detect_mode(fake_driver) == MODE_SCRIPT
    assert detect_mode(FakeDriver(network=FakeNetwork())) == MODE_BIDI
