"""
Driver capability over a Playwright page.

Tests and condition checks talk to the demo site through :class:`PageDriver`
instead of the raw page: navigation relative to the base URL, element state
queries, a small action vocabulary, waits, and a poller factory whose sleeps
keep Playwright's event loop running.

Key Concepts Demonstrated:
- Locator strategies (CSS, XPath, accessible role/name)
- State queries that never raise for missing elements
- Bounded polling wired to the browser's own timer
"""

from __future__ import annotations

import logging
import os
import re
from dataclasses import dataclass
from typing import Any

from playwright.sync_api import Locator, Page, expect

from shared.polling import BoundedConditionPoller, PollConfig

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ElementState:
    """Snapshot of the elements matching a selector."""

    visible: bool
    text: str | None
    count: int

    @property
    def present(self) -> bool:
        return self.count > 0


class PageDriver:
    """
    Thin driver over a Playwright page.

    Attributes:
        page: Playwright page instance.
        base_url: Root URL of the site under test.
        artifacts_dir: Directory for screenshots.
    """

    ACTIONS = (
        "click",
        "right_click",
        "hover",
        "check",
        "uncheck",
        "fill",
        "select_option",
        "press",
        "scroll_into_view",
    )

    def __init__(self, page: Page, base_url: str, artifacts_dir: str = "test-results"):
        self.page = page
        self.base_url = base_url.rstrip("/")
        self.artifacts_dir = artifacts_dir

    # -------------------------------------------------------------------------
    # Navigation
    # -------------------------------------------------------------------------

    def url_for(self, path: str = "") -> str:
        """Resolve ``path`` against the base URL; absolute URLs pass through."""
        if path.startswith(("http://", "https://")):
            return path
        if path and not path.startswith("/"):
            path = f"/{path}"
        return f"{self.base_url}{path}"

    def navigate_to(self, path: str = "") -> None:
        url = self.url_for(path)
        logger.debug("Navigating to %s", url)
        self.page.goto(url)

    def open_example(self, link_name: str | re.Pattern[str]) -> None:
        """
        Open one of the examples listed on the index page.

        Args:
            link_name: Accessible name of the index link, or a pattern.
        """
        self.page.get_by_role("link", name=link_name).click()
        self.wait_for_load()

    def reload(self) -> None:
        self.page.reload()

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    def locator(self, selector: str) -> Locator:
        return self.page.locator(selector)

    def query(self, selector: str) -> ElementState:
        """
        Report visibility, text and match count for ``selector``.

        Visibility and text describe the first match. Missing elements yield
        ``ElementState(visible=False, text=None, count=0)``.
        """
        matches = self.page.locator(selector)
        count = matches.count()
        if count == 0:
            return ElementState(visible=False, text=None, count=0)
        first = matches.first
        return ElementState(visible=first.is_visible(), text=first.text_content(), count=count)

    def is_visible(self, selector: str) -> bool:
        return self.page.locator(selector).first.is_visible()

    def is_in_viewport(self, selector: str) -> bool:
        """True when the first match intersects the visible part of the page."""
        matches = self.page.locator(selector)
        if matches.count() == 0:
            return False
        return matches.first.evaluate(
            "el => { const r = el.getBoundingClientRect();"
            " return r.bottom > 0 && r.top < window.innerHeight; }"
        )

    # -------------------------------------------------------------------------
    # Actions
    # -------------------------------------------------------------------------

    def perform(self, selector: str, action: str, value: Any = None, **kwargs: Any) -> None:
        """
        Perform ``action`` on the first element matching ``selector``.

        Args:
            selector: CSS or XPath selector.
            action: One of :attr:`ACTIONS`.
            value: Text for ``fill``, option for ``select_option``, key for ``press``.
            **kwargs: Passed through to the Playwright call.

        Raises:
            ValueError: If the action is not supported.
        """
        if action not in self.ACTIONS:
            raise ValueError(f"Unsupported action '{action}', expected one of {self.ACTIONS}")

        target = self.page.locator(selector).first
        logger.debug("%s on %s", action, selector)
        if action == "click":
            target.click(**kwargs)
        elif action == "right_click":
            target.click(button="right", **kwargs)
        elif action == "hover":
            target.hover(**kwargs)
        elif action == "check":
            target.check(**kwargs)
        elif action == "uncheck":
            target.uncheck(**kwargs)
        elif action == "fill":
            target.fill(value, **kwargs)
        elif action == "select_option":
            target.select_option(value, **kwargs)
        elif action == "press":
            target.press(value, **kwargs)
        else:
            target.scroll_into_view_if_needed(**kwargs)

    def mouse_wheel(self, delta_x: float, delta_y: float) -> None:
        self.page.mouse.wheel(delta_x, delta_y)

    def move_mouse_out_of_viewport(self) -> None:
        """Move the pointer above the top edge, which fires exit-intent handlers."""
        viewport = self.page.viewport_size or {"width": 1280, "height": 720}
        self.page.mouse.move(viewport["width"] / 2, 0)
        self.page.mouse.move(viewport["width"] / 2, -50)

    # -------------------------------------------------------------------------
    # Waits
    # -------------------------------------------------------------------------

    def wait_for_load(self, state: str = "load") -> None:
        self.page.wait_for_load_state(state)

    def sleep(self, duration_ms: float) -> None:
        self.page.wait_for_timeout(duration_ms)

    def poller(self, config: PollConfig, name: str = "poll") -> BoundedConditionPoller:
        """Build a poller that sleeps through the page's timer."""
        return BoundedConditionPoller(config, sleep=self.sleep, name=name)

    # -------------------------------------------------------------------------
    # Assertions and artifacts
    # -------------------------------------------------------------------------

    def assert_url_contains(self, expected: str) -> None:
        expect(self.page).to_have_url(re.compile(re.escape(expected)))

    def screenshot(self, name: str) -> str:
        """
        Save a screenshot of the current page.

        Args:
            name: File name without extension.

        Returns:
            Path of the saved screenshot.
        """
        screenshot_dir = os.path.join(self.artifacts_dir, "screenshots")
        os.makedirs(screenshot_dir, exist_ok=True)
        path = os.path.join(screenshot_dir, f"{name}.png")
        self.page.screenshot(path=path)
        return path
