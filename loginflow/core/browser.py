from __future__ import annotations

import logging

from selenium import webdriver
from selenium.webdriver import ChromeOptions, FirefoxOptions

from loginflow.config.schema import EnvironmentConfig

log = logging.getLogger(__name__)

# Leave native dialogs open until the dialog interceptor resolves them.
UNHANDLED_PROMPT_BEHAVIOR = "ignore"

CLEAR_STORAGE_SCRIPT = """
try { window.localStorage.clear(); } catch (error) {}
try { window.sessionStorage.clear(); } catch (error) {}
"""


class BrowserSession:
    """Creates browser instances using Selenium Manager."""

    def __init__(self, environment: EnvironmentConfig) -> None:
        self.environment = environment

    def start(self, browser_name: str):
        normalized = browser_name.lower()
        if normalized == "chrome":
            options = ChromeOptions()
            if self.environment.headless:
                options.add_argument("--headless=new")
            options.add_argument("--window-size=1440,1200")
            options.set_capability("unhandledPromptBehavior", UNHANDLED_PROMPT_BEHAVIOR)
            options.enable_bidi = True
            driver = webdriver.Chrome(options=options)
        elif normalized == "firefox":
            options = FirefoxOptions()
            if self.environment.headless:
                options.add_argument("-headless")
            options.set_capability("unhandledPromptBehavior", UNHANDLED_PROMPT_BEHAVIOR)
            options.enable_bidi = True
            driver = webdriver.Firefox(options=options)
        else:
            raise ValueError(f"Unsupported browser: {browser_name}")
        driver.set_page_load_timeout(self.environment.default_timeout_seconds)
        driver.implicitly_wait(0)
        log.info("Started %s (headless=%s)", normalized, self.environment.headless)
        return driver

    @staticmethod
    def clear_session(driver) -> None:
        """Drops cookies and web storage so the next page load is unauthenticated."""

        driver.delete_all_cookies()
        driver.execute_script(CLEAR_STORAGE_SCRIPT)
