from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

SUPPORTED_STRATEGIES = {"css", "xpath", "placeholder", "role"}


class EnvironmentConfig(BaseModel):
    base_url: str
    browser_matrix: list[str] = Field(default_factory=lambda: ["chrome"])
    default_timeout_seconds: float = 10
    dialog_timeout_seconds: float = 5
    poll_interval_seconds: float = 0.2
    headless: bool = False

    @field_validator("browser_matrix")
    @classmethod
    def validate_browsers(cls, value: list[str]) -> list[str]:
        allowed = {"chrome", "firefox"}
        normalized = [item.lower() for item in value]
        invalid = [item for item in normalized if item not in allowed]
        if invalid:
            raise ValueError(f"Unsupported browsers: {', '.join(invalid)}")
        return normalized

    @field_validator("default_timeout_seconds", "dialog_timeout_seconds", "poll_interval_seconds")
    @classmethod
    def validate_positive(cls, value: float) -> float:
        if value <= 0:
            raise ValueError("timeouts and intervals must be positive")
        return value


class CredentialSet(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str
    pw: str
    user_name: str = Field(alias="userName")


class PagesConfig(BaseModel):
    home_path: str = "/"
    login_path: str = "/user-account/login"
    mypage_path: str = "/personal/mypage"
    login_url_pattern: str = r"/user-account/login(\?.*)?$"
    mypage_url_pattern: str = r"/personal/mypage$"
    login_api_pattern: str = "**/member/login*"
    display_name_suffix: str = "님"


class MessagesConfig(BaseModel):
    invalid_credentials: str = "아이디 또는 비밀번호가 일치하지 않습니다. 입력 내용을 다시 확인해 주세요."
    missing_id: str = "아이디를 입력해 주세요"
    missing_password: str = "비밀번호를 입력해 주세요"


class ElementDefinition(BaseModel):
    key: str
    strategy: str = "css"
    selector: str
    role: str | None = None
    exact: bool = False
    fallback_selectors: list[str] = Field(default_factory=list)

    @field_validator("strategy")
    @classmethod
    def validate_strategy(cls, value: str) -> str:
        normalized = value.lower()
        if normalized not in SUPPORTED_STRATEGIES:
            raise ValueError(f"strategy must be one of: {', '.join(sorted(SUPPORTED_STRATEGIES))}")
        return normalized

    @model_validator(mode="after")
    def validate_role(self) -> "ElementDefinition":
        if self.strategy == "role" and not self.role:
            raise ValueError("role strategy requires a role")
        return self


class TestSuiteConfig(BaseModel):
    environment: EnvironmentConfig
    credentials: CredentialSet
    pages: PagesConfig = Field(default_factory=PagesConfig)
    messages: MessagesConfig = Field(default_factory=MessagesConfig)
    elements: list[ElementDefinition]
    scenarios: dict[str, dict[str, Any]] = Field(default_factory=dict)

    def get_element(self, key: str) -> ElementDefinition:
        for element in self.elements:
            if element.key == key:
                return element
        raise KeyError(f"Unknown element key: {key}")

    def scenario(self, name: str) -> dict[str, Any]:
        return dict(self.scenarios.get(name, {}))
