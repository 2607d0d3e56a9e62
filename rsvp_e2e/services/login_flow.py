"""Login form submission against the site under test."""
from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from urllib.parse import urlparse

from playwright.sync_api import Page
from playwright.sync_api import TimeoutError as PlaywrightTimeoutError

from rsvp_e2e.config.settings import Settings

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LoginSelectors:
    email: str
    password: str
    submit: str
    logged_in: str | None = None

    @classmethod
    def from_settings(cls, settings: Settings) -> "LoginSelectors":
        return cls(
            email=settings.email_selector,
            password=settings.password_selector,
            submit=settings.submit_selector,
            logged_in=settings.logged_in_selector or None,
        )


@dataclass
class LoginResult:
    start_url: str
    final_url: str
    left_auth_page: bool
    navigated: bool
    marker_visible: bool | None = None

    @property
    def logged_in(self) -> bool:
        """
        A login counts only when the browser ends outside any auth page and
        either the configured marker showed up or the URL actually changed.
        """
        if not self.left_auth_page:
            return False
        if self.marker_visible is not None:
            return self.marker_visible
        return self.navigated


class LoginError(AssertionError):
    """Submitting the credentials did not take the browser past the login page."""

    def __init__(self, message: str, result: LoginResult):
        super().__init__(message)
        self.result = result


def is_auth_url(url: str, pattern: str | re.Pattern[str]) -> bool:
    """
    Tell whether ``url`` looks like a login/sign-in page.

    Path, query and fragment are searched. The host only counts when its
    leftmost label is an auth word as a whole (``login.example.com``),
    so ``authors.example.com`` is not an auth page.
    """
    if isinstance(pattern, str):
        pattern = re.compile(pattern, re.IGNORECASE)
    parts = urlparse(url)
    label = (parts.hostname or "").split(".")[0]
    if label and pattern.fullmatch(label):
        return True
    target = parts.path
    if parts.query:
        target += "?" + parts.query
    if parts.fragment:
        target += "#" + parts.fragment
    return pattern.search(target) is not None


def _marker_visible(page: Page, selector: str, timeout_ms: int) -> bool:
    try:
        page.wait_for_selector(selector, state="visible", timeout=timeout_ms)
    except PlaywrightTimeoutError:
        logger.warning("Logged-in marker %s did not become visible", selector)
        return False
    return True


def submit_login(page: Page, settings: Settings) -> LoginResult:
    """
    Fill the login form on the current page and submit it.

    Playwright's auto-waiting covers the fields; the function then waits
    for the network to go idle before reading the final URL.
    """
    selectors = LoginSelectors.from_settings(settings)
    start_url = page.url
    logger.info("Submitting login form on %s as %s", start_url, settings.user_name)

    page.fill(selectors.email, settings.user_name)
    page.fill(selectors.password, settings.user_password.get_secret_value())
    page.click(selectors.submit)
    page.wait_for_load_state("networkidle")

    final_url = page.url
    marker = None
    if selectors.logged_in:
        marker = _marker_visible(page, selectors.logged_in, settings.timeout_ms)

    result = LoginResult(
        start_url=start_url,
        final_url=final_url,
        left_auth_page=not is_auth_url(final_url, settings.auth_url_regex),
        navigated=final_url != start_url,
        marker_visible=marker,
    )
    logger.info(
        "Login finished on %s (left auth page: %s, navigated: %s, marker: %s)",
        final_url, result.left_auth_page, result.navigated, marker,
    )
    return result


def assert_logged_in(result: LoginResult) -> None:
    if result.logged_in:
        return
    if not result.left_auth_page:
        message = f"Still on an authentication page after login: {result.final_url}"
    elif result.marker_visible is False:
        message = f"Logged-in marker never appeared on {result.final_url}"
    else:
        message = f"Login did not navigate away from {result.start_url}"
    raise LoginError(message, result=result)
