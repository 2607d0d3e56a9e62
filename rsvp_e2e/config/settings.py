"""Runtime configuration for the end-to-end suite."""
from __future__ import annotations

import logging
import re
from functools import lru_cache
from typing import Literal

from pydantic import Field, SecretStr, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)

REQUIRED_VARIABLES = ("SITE_URL", "USER_NAME", "USER_PASSWORD")


class ConfigurationError(ValueError):
    """Raised when the environment does not describe a usable target site."""

    def __init__(self, message: str, missing: tuple[str, ...] = (), invalid: tuple[str, ...] = ()):
        super().__init__(message)
        self.missing = missing
        self.invalid = invalid


class Settings(BaseSettings):
    """Values loaded from environment variables (and an optional .env file)."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        populate_by_name=True,
        extra="ignore",
    )

    site_url: str = Field(
        alias="SITE_URL",
        description="Homepage of the site under test.",
    )
    user_name: str = Field(
        alias="USER_NAME",
        description="Login identifier typed into the e-mail field.",
    )
    user_password: SecretStr = Field(
        alias="USER_PASSWORD",
        description="Password typed into the password field.",
    )

    browser_name: Literal["chromium", "firefox", "webkit"] = Field(
        default="chromium",
        alias="E2E_BROWSER",
        description="Playwright browser type to launch.",
    )
    headless: bool = Field(
        default=True,
        alias="E2E_HEADLESS",
        description="Run the browser without a window.",
    )
    slow_mo: int = Field(
        default=0,
        ge=0,
        alias="E2E_SLOW_MO",
        description="Delay in milliseconds between browser actions.",
    )
    timeout_ms: int = Field(
        default=30000,
        gt=0,
        alias="E2E_TIMEOUT_MS",
        description="Default timeout for actions and navigations.",
    )
    results_dir: str = Field(
        default="test-results",
        alias="E2E_RESULTS_DIR",
        description="Directory for failure screenshots, console logs and videos.",
    )
    screenshots_dir: str = Field(
        default="screenshots",
        alias="E2E_SCREENSHOTS_DIR",
        description="Directory for the named screenshots taken by the tests.",
    )
    video: Literal["off", "on", "retain-on-failure"] = Field(
        default="retain-on-failure",
        alias="E2E_VIDEO",
        description="When to keep recorded videos.",
    )
    email_selector: str = Field(
        default='input[name="email"]',
        alias="E2E_EMAIL_SELECTOR",
    )
    password_selector: str = Field(
        default='input[name="password"]',
        alias="E2E_PASSWORD_SELECTOR",
    )
    submit_selector: str = Field(
        default='button[type="submit"]',
        alias="E2E_SUBMIT_SELECTOR",
    )
    logged_in_selector: str | None = Field(
        default=None,
        alias="E2E_LOGGED_IN_SELECTOR",
        description="Element that must become visible after a successful login.",
    )
    auth_url_pattern: str = Field(
        default=r"login|signin|sign-in|auth",
        alias="E2E_AUTH_URL_PATTERN",
        description="Case-insensitive regex matching login pages.",
    )

    @field_validator("site_url", "user_name", mode="before")
    @classmethod
    def _not_blank(cls, value):
        if isinstance(value, str):
            value = value.strip()
            if not value:
                raise ValueError("must not be blank")
        return value

    @field_validator("user_password", mode="before")
    @classmethod
    def _password_not_blank(cls, value):
        if isinstance(value, str) and not value.strip():
            raise ValueError("must not be blank")
        return value

    @field_validator("site_url")
    @classmethod
    def _http_url(cls, value: str) -> str:
        if not value.lower().startswith(("http://", "https://")):
            raise ValueError("must start with http:// or https://")
        return value

    @field_validator("auth_url_pattern")
    @classmethod
    def _compiles(cls, value: str) -> str:
        try:
            re.compile(value)
        except re.error as exc:
            raise ValueError(f"not a valid regular expression: {exc}") from exc
        return value

    @property
    def auth_url_regex(self) -> re.Pattern[str]:
        return re.compile(self.auth_url_pattern, re.IGNORECASE)


def _variable_name(loc: tuple) -> str:
    name = str(loc[0]) if loc else "?"
    field = Settings.model_fields.get(name)
    if field is not None and field.alias:
        return field.alias
    return name.upper()


def load_settings(env_file: str | None = ".env") -> Settings:
    """
    Build and validate settings from the environment.

    Every missing or invalid variable is reported at once so the suite
    stops before the browser is launched.

    Raises:
        ConfigurationError: when a required variable is unset or a value is invalid
    """
    try:
        return Settings(_env_file=env_file)
    except ValidationError as exc:
        missing: list[str] = []
        invalid: list[str] = []
        for error in exc.errors():
            name = _variable_name(error.get("loc", ()))
            if error.get("type") == "missing" or (
                name in REQUIRED_VARIABLES and "blank" in error.get("msg", "")
            ):
                missing.append(name)
            else:
                invalid.append(f"{name} ({error.get('msg')})")

        parts = []
        if missing:
            parts.append("Missing required environment variables: " + ", ".join(missing))
        if invalid:
            parts.append("Invalid environment variables: " + ", ".join(invalid))
        message = "; ".join(parts)
        logger.error(message)
        raise ConfigurationError(message, missing=tuple(missing), invalid=tuple(invalid)) from None


@lru_cache()
def get_settings() -> Settings:
    """Return the memoized settings instance."""

    return load_settings()
