"""Playwright fixtures for the herokuapp E2E tests."""

from __future__ import annotations

import logging
import os
import re
from collections.abc import Generator

import pytest
from playwright.sync_api import Browser, BrowserContext, Page, expect

from config import Config, get_config
from shared.driver import PageDriver
from shared.live_site import wait_for_site

logger = logging.getLogger(__name__)

phase_report_key = pytest.StashKey[dict]()


def _artifact_name(item: pytest.Item) -> str:
    return re.sub(r"[^\w.-]+", "_", item.nodeid)


def pytest_collection_modifyitems(config, items):
    """Give every E2E test the configured time budget unless it sets its own."""
    default_timeout_s = get_config().TEST_TIMEOUT_MS / 1000
    for item in items:
        if item.get_closest_marker("e2e") and not item.get_closest_marker("timeout"):
            item.add_marker(pytest.mark.timeout(default_timeout_s))


@pytest.fixture(scope="session", autouse=True)
def live_site(suite_config: type[Config]) -> str:
    """Skip the E2E suite when the demo site does not come up within the wait window."""
    try:
        wait_for_site(
            suite_config.BASE_URL,
            timeout=suite_config.SITE_WAIT_S,
            interval=suite_config.SITE_POLL_INTERVAL_S,
        )
    except RuntimeError as exc:
        pytest.skip(f"{exc}; set HEROKU_BASE_URL to run E2E tests")
    return suite_config.BASE_URL


@pytest.fixture(scope="session", autouse=True)
def expect_timeout(suite_config: type[Config]) -> None:
    expect.set_options(timeout=suite_config.EXPECT_TIMEOUT_MS)


@pytest.fixture(scope="session")
def base_url(suite_config: type[Config]) -> str:
    return suite_config.BASE_URL


@pytest.fixture(scope="session")
def browser_type_launch_args(browser_type_launch_args: dict, suite_config: type[Config]) -> dict:
    launch_args = dict(browser_type_launch_args)
    launch_args.setdefault("headless", suite_config.HEADLESS)
    if suite_config.SLOW_MO_MS and "slow_mo" not in launch_args:
        launch_args["slow_mo"] = suite_config.SLOW_MO_MS
    return launch_args


@pytest.fixture(scope="session")
def browser_context_args(suite_config: type[Config]) -> dict:
    context_args = {
        "base_url": suite_config.BASE_URL,
        "viewport": dict(suite_config.VIEWPORT),
        "accept_downloads": True,
    }
    if suite_config.VIDEO == "on":
        context_args["record_video_dir"] = os.path.join(suite_config.ARTIFACTS_DIR, "videos")
    return context_args


@pytest.fixture(scope="function")
def context(
    request: pytest.FixtureRequest,
    browser: Browser,
    browser_context_args: dict,
    suite_config: type[Config],
) -> Generator[BrowserContext, None, None]:
    """
    Create a fresh browser context per test, tracing it when configured.

    The trace is written to ``<artifacts>/traces`` when the policy is ``on``,
    or when it is ``only-on-failure`` and the test failed.
    """
    context = browser.new_context(**browser_context_args)
    context.set_default_timeout(suite_config.ACTION_TIMEOUT_MS)
    tracing = suite_config.TRACE != "off"
    if tracing:
        context.tracing.start(screenshots=True, snapshots=True, sources=True)

    yield context

    if tracing:
        reports = request.node.stash.get(phase_report_key, {})
        failed = any(report.failed for report in reports.values())
        if suite_config.TRACE == "on" or failed:
            trace_dir = os.path.join(suite_config.ARTIFACTS_DIR, "traces")
            os.makedirs(trace_dir, exist_ok=True)
            trace_path = os.path.join(trace_dir, f"{_artifact_name(request.node)}.zip")
            context.tracing.stop(path=trace_path)
            logger.info("Trace saved: %s", trace_path)
        else:
            context.tracing.stop()
    context.close()


@pytest.fixture(scope="function")
def page(context: BrowserContext) -> Generator[Page, None, None]:
    page = context.new_page()
    yield page
    page.close()


@pytest.fixture
def driver(page: Page, suite_config: type[Config]) -> PageDriver:
    """Driver positioned on the site index, where every example starts."""
    page_driver = PageDriver(page, suite_config.BASE_URL, artifacts_dir=suite_config.ARTIFACTS_DIR)
    page_driver.navigate_to("/")
    return page_driver


@pytest.hookimpl(tryfirst=True, hookwrapper=True)
def pytest_runtest_makereport(item, call):
    """Record phase reports and capture a screenshot on UI test failure."""
    outcome = yield
    report = outcome.get_result()
    item.stash.setdefault(phase_report_key, {})[report.when] = report

    if report.when != "call" or not item.get_closest_marker("e2e"):
        return
    suite_config = get_config()
    if suite_config.SCREENSHOT == "off" or (
        suite_config.SCREENSHOT == "only-on-failure" and not report.failed
    ):
        return

    page = item.funcargs.get("page")
    if page:
        screenshot_dir = os.path.join(suite_config.ARTIFACTS_DIR, "screenshots")
        os.makedirs(screenshot_dir, exist_ok=True)
        screenshot_path = os.path.join(screenshot_dir, f"{_artifact_name(item)}.png")
        try:
            page.screenshot(path=screenshot_path)
            logger.info("Screenshot saved: %s", screenshot_path)
        except Exception as exc:  # pragma: no cover - best effort logging
            logger.warning("Failed to capture screenshot: %s", exc)
