from __future__ import annotations

from dataclasses import dataclass

from selenium.webdriver.common.by import By

from loginflow.config.schema import ElementDefinition

# XPath fragments matching the implicit ARIA role of common controls.
ROLE_XPATHS = {
    "link": "self::a[@href] or @role='link'",
    "button": (
        "self::button or @role='button' or "
        "self::input[@type='submit' or @type='button' or @type='reset']"
    ),
    "textbox": (
        "self::textarea or @role='textbox' or "
        "self::input[not(@type) or @type='text' or @type='email' or @type='tel' or @type='search']"
    ),
    "checkbox": "self::input[@type='checkbox'] or @role='checkbox'",
    "heading": "self::h1 or self::h2 or self::h3 or self::h4 or self::h5 or self::h6 or @role='heading'",
    "menuitem": "@role='menuitem'",
}


@dataclass(frozen=True, slots=True)
class Locator:
    """One rule identifying a UI element."""

    strategy: str
    value: str
    role: str | None = None
    exact: bool = False

    @classmethod
    def css(cls, selector: str) -> "Locator":
        return cls("css", selector)

    @classmethod
    def xpath(cls, selector: str) -> "Locator":
        return cls("xpath", selector)

    @classmethod
    def placeholder(cls, text: str) -> "Locator":
        return cls("placeholder", text)

    @classmethod
    def by_role(cls, role: str, name: str, exact: bool = False) -> "Locator":
        return cls("role", name, role=role, exact=exact)

    @classmethod
    def from_definition(cls, definition: ElementDefinition) -> "Locator":
        return cls(definition.strategy, definition.selector, role=definition.role, exact=definition.exact)

    def to_selenium(self) -> tuple[str, str]:
        if self.strategy == "css":
            return By.CSS_SELECTOR, self.value
        if self.strategy == "xpath":
            return By.XPATH, self.value
        if self.strategy == "placeholder":
            return By.XPATH, f"//*[@placeholder={xpath_literal(self.value)}]"
        if self.strategy == "role":
            return By.XPATH, role_xpath(self.role or "", self.value, self.exact)
        raise ValueError(f"Unsupported locator strategy: {self.strategy}")

    def describe(self) -> str:
        if self.strategy == "role":
            mode = "exact" if self.exact else "contains"
            return f"role={self.role} name={self.value!r} ({mode})"
        return f"{self.strategy}={self.value}"


def infer_selector_type(selector: str) -> str:
    stripped = selector.strip()
    if stripped.startswith("/") or stripped.startswith("("):
        return "xpath"
    return "css"


def locator_from_selector(selector: str) -> Locator:
    return Locator(infer_selector_type(selector), selector)


def xpath_literal(value: str) -> str:
    """Quotes ``value`` as an XPath 1.0 string literal."""

    if "'" not in value:
        return f"'{value}'"
    if '"' not in value:
        return f'"{value}"'
    pieces = value.split("'")
    return "concat(" + ", \"'\", ".join(f"'{piece}'" for piece in pieces) + ")"


def role_xpath(role: str, name: str, exact: bool = False) -> str:
    role_condition = ROLE_XPATHS.get(role.lower(), f"@role={xpath_literal(role.lower())}")
    literal = xpath_literal(name)
    accessible_names = ("normalize-space(.)", "normalize-space(@aria-label)", "normalize-space(@value)")
    if exact:
        name_condition = " or ".join(f"{item}={literal}" for item in accessible_names)
    else:
        name_condition = " or ".join(f"contains({item}, {literal})" for item in accessible_names)
    return f"//*[({role_condition}) and ({name_condition})]"
