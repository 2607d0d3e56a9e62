import logging
from dataclasses import dataclass

from playwright.sync_api import Page

from rsvp_e2e.config.settings import Settings

logger = logging.getLogger(__name__)


class NavigationError(RuntimeError):
    """The homepage could not be opened or came back without usable content."""

    def __init__(self, message: str, url: str, status: int | None = None):
        super().__init__(message)
        self.url = url
        self.status = status


@dataclass
class HomepageResult:
    url: str
    status: int
    title: str


def open_homepage(page: Page, settings: Settings) -> HomepageResult:
    url = settings.site_url
    logger.info("Navigating to %s", url)
    response = page.goto(url, wait_until="domcontentloaded", timeout=settings.timeout_ms)

    if response is None:
        raise NavigationError(f"No response received from {url}", url=url)
    if response.status >= 400:
        raise NavigationError(
            f"{url} answered with HTTP {response.status}", url=url, status=response.status
        )

    title = page.title()
    logger.info("Loaded %s (HTTP %s) title=%r", page.url, response.status, title)
    return HomepageResult(url=page.url, status=response.status, title=title)


def ensure_title(result: HomepageResult) -> str:
    title = (result.title or "").strip()
    if not title:
        raise NavigationError(f"{result.url} has an empty <title>", url=result.url, status=result.status)
    return title
