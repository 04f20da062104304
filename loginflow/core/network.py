from __future__ import annotations

import logging
import re
import threading
from dataclasses import dataclass, field

from selenium.common.exceptions import WebDriverException

from loginflow.core.exceptions import UnexpectedNetworkCall
from loginflow.utils.patterns import glob_to_regex

log = logging.getLogger(__name__)

BIDI_EVENT = "before_request"
MODE_BIDI = "bidi"
MODE_SCRIPT = "script"

INSTALL_ROUTES_SCRIPT = r"""
const routes = arguments[0];
window.__loginflow_routes__ = routes;
if (!window.__loginflow_hits__) {
  window.__loginflow_hits__ = [];
}

if (!window.__loginflow_routes_installed__) {
  const absolute = (url) => {
    try {
      return new URL(String(url), window.location.href).href;
    } catch (error) {
      return String(url);
    }
  };

  const matchRoute = (url, method) => {
    const href = absolute(url);
    for (const route of window.__loginflow_routes__ || []) {
      if (new RegExp(route.regex).test(href)) {
        window.__loginflow_hits__.push({ pattern: route.pattern, url: href, method: method || "GET" });
        return route;
      }
    }
    return null;
  };

  const originalFetch = window.fetch;
  if (originalFetch) {
    window.fetch = function (input, init) {
      const url = input && input.url ? input.url : input;
      const method = (init && init.method) || (input && input.method) || "GET";
      const route = matchRoute(url, method);
      if (route && route.abort) {
        return Promise.reject(new TypeError("Failed to fetch"));
      }
      return originalFetch.apply(this, arguments);
    };
  }

  const originalOpen = XMLHttpRequest.prototype.open;
  const originalSend = XMLHttpRequest.prototype.send;
  XMLHttpRequest.prototype.open = function (method, url) {
    this.__loginflow_request__ = { method: method, url: url };
    return originalOpen.apply(this, arguments);
  };
  XMLHttpRequest.prototype.send = function () {
    const request = this.__loginflow_request__ || {};
    const route = matchRoute(request.url, request.method);
    if (route && route.abort) {
      const xhr = this;
      setTimeout(() => {
        xhr.dispatchEvent(new ProgressEvent("error"));
        xhr.dispatchEvent(new ProgressEvent("loadend"));
      }, 0);
      return undefined;
    }
    return originalSend.apply(this, arguments);
  };

  window.__loginflow_routes_installed__ = true;
}
"""

FLUSH_HITS_SCRIPT = """
const hits = window.__loginflow_hits__ || [];
window.__loginflow_hits__ = [];
return hits;
"""


@dataclass(slots=True)
class InterceptedRequest:
    pattern: str
    url: str
    method: str


@dataclass(slots=True)
class InterceptedRequestFlag:
    """Per-route record of whether a matching request was issued."""

    pattern: str
    abort: bool = True
    requests: list[InterceptedRequest] = field(default_factory=list)

    @property
    def requested(self) -> bool:
        return bool(self.requests)


class NetworkObserver:
    """Intercepts outbound requests matching URL globs and records what it caught.

    With a BiDi-enabled session every request the browser sends (fetch, XHR,
    form posts, beacons, frames, reloads) passes through a protocol-level
    ``before_request`` handler. Sessions without BiDi fall back to a page
    script that patches ``fetch`` and ``XMLHttpRequest`` in the current
    document only.
    """

    def __init__(self, driver, mode: str | None = None) -> None:
        self.driver = driver
        self.mode = mode or detect_mode(driver)
        self.routes: dict[str, InterceptedRequestFlag] = {}
        self._compiled: dict[str, re.Pattern[str]] = {}
        self._lock = threading.Lock()
        self._handler_id = None

    def intercept_route(self, url_pattern: str, abort: bool = True) -> InterceptedRequestFlag:
        with self._lock:
            flag = self.routes.get(url_pattern)
            if flag is None:
                flag = InterceptedRequestFlag(pattern=url_pattern, abort=abort)
                self.routes[url_pattern] = flag
                self._compiled[url_pattern] = re.compile(glob_to_regex(url_pattern))
        self.install()
        log.info("Intercepting requests matching %s (%s)", url_pattern, self.mode)
        return flag

    def install(self) -> None:
        if self.mode == MODE_BIDI:
            if self._handler_id is not None:
                return
            try:
                self._handler_id = self.driver.network.add_request_handler(BIDI_EVENT, self._on_request)
                return
            except WebDriverException as exc:
                log.warning("BiDi request interception unavailable, using page script: %s", exc.msg)
                self.mode = MODE_SCRIPT
        payload = [
            {"pattern": flag.pattern, "regex": glob_to_regex(flag.pattern), "abort": flag.abort}
            for flag in self.routes.values()
        ]
        self.driver.execute_script(INSTALL_ROUTES_SCRIPT, payload)

    def sync(self) -> None:
        if self.mode == MODE_BIDI:
            return
        for hit in self.driver.execute_script(FLUSH_HITS_SCRIPT) or []:
            self._record(hit.get("pattern", ""), hit.get("url", ""), hit.get("method", "GET"))
        if self.routes:
            self.install()

    def was_requested(self, url_pattern: str | None = None) -> bool:
        self.sync()
        with self._lock:
            if url_pattern is not None:
                flag = self.routes.get(url_pattern)
                return bool(flag and flag.requested)
            return any(flag.requested for flag in self.routes.values())

    def assert_not_requested(self, url_pattern: str) -> None:
        self.sync()
        with self._lock:
            flag = self.routes.get(url_pattern)
            if flag is None:
                raise KeyError(f"No route registered for {url_pattern}")
            urls = [request.url for request in flag.requests]
        if urls:
            raise UnexpectedNetworkCall(url_pattern, urls)

    def close(self) -> None:
        if self._handler_id is not None:
            self.driver.network.remove_request_handler(BIDI_EVENT, self._handler_id)
            self._handler_id = None

    def _on_request(self, request) -> None:
        # Runs on the BiDi listener thread; every paused request must be continued or failed.
        url = getattr(request, "url", "") or ""
        flag = self._match(url)
        if flag is None:
            request.continue_request()
            return
        self._record(flag.pattern, url, getattr(request, "method", None) or "GET")
        if flag.abort:
            request.fail_request()
        else:
            request.continue_request()

    def _match(self, url: str) -> InterceptedRequestFlag | None:
        with self._lock:
            for pattern, compiled in self._compiled.items():
                if compiled.match(url):
                    return self.routes[pattern]
        return None

    def _record(self, pattern: str, url: str, method: str) -> None:
        with self._lock:
            flag = self.routes.get(pattern)
            if flag is None:
                return
            request = InterceptedRequest(pattern=flag.pattern, url=url, method=str(method).upper())
            flag.requests.append(request)
        log.info("Intercepted %s %s", request.method, request.url)


def detect_mode(driver) -> str:
    """BiDi when the session negotiated a WebSocket URL, the page script otherwise."""

    capabilities = getattr(driver, "capabilities", None) or {}
    return MODE_BIDI if capabilities.get("webSocketUrl") else MODE_SCRIPT
