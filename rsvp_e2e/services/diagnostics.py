import logging
from typing import Any

from playwright.sync_api import Page

logger = logging.getLogger(__name__)


def _read(obj: Any, name: str) -> str:
    # ConsoleMessage exposes properties; older bindings exposed methods
    value = getattr(obj, name, "")
    if callable(value):
        value = value()
    return value or ""


def _location(msg: Any) -> str:
    loc = getattr(msg, "location", None)
    if callable(loc):
        loc = loc()
    if not loc:
        return ""
    url = loc.get("url") or ""
    line = loc.get("lineNumber")
    if url and line is not None:
        return f"{url}:{line}"
    return url


class ConsoleCollector:
    """Keeps the console errors, warnings and uncaught page errors of one page."""

    def __init__(self):
        self.errors: list[str] = []
        self.warnings: list[str] = []
        self.page_errors: list[str] = []

    def attach(self, page: Page) -> "ConsoleCollector":
        page.on("console", self._on_console)
        page.on("pageerror", self._on_page_error)
        return self

    def _on_console(self, msg) -> None:
        try:
            msg_type = _read(msg, "type").lower()
            if msg_type not in ("error", "warning"):
                return
            text = _read(msg, "text")
            where = _location(msg)
            entry = f"{text} ({where})" if where else text
            if msg_type == "error":
                self.errors.append(entry)
                logger.warning("Console error: %s", entry)
            else:
                self.warnings.append(entry)
        except Exception:
            logger.exception("Could not record console message")

    def _on_page_error(self, error) -> None:
        self.page_errors.append(str(error))
        logger.warning("Uncaught page error: %s", error)

    @property
    def has_errors(self) -> bool:
        return bool(self.errors or self.page_errors)

    def as_dict(self) -> dict:
        return {
            "errors": list(self.errors),
            "warnings": list(self.warnings),
            "page_errors": list(self.page_errors),
        }

    def format_report(self) -> str:
        sections = [
            ("Console errors", self.errors),
            ("Page errors", self.page_errors),
            ("Console warnings", self.warnings),
        ]
        lines: list[str] = []
        for heading, entries in sections:
            if not entries:
                continue
            lines.append(f"{heading} ({len(entries)}):")
            lines.extend(f"  - {entry}" for entry in entries)
        if not lines:
            return "No console output captured."
        return "\n".join(lines)
