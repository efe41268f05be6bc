"""
Suite configuration module.

This module defines configuration classes for the environments the UI suite
runs in (default, ci, debug). Values are loaded from environment variables
with sensible defaults and mirror the browser runner settings: base URL,
browser target, viewport, timeouts, and artifact capture.
"""

import os
from pathlib import Path

# Base directory of the project
BASE_DIR = Path(__file__).resolve().parent


def _env_bool(name: str, default: bool) -> bool:
    value = os.environ.get(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


class Config:
    """Base configuration with default settings."""

    BASE_URL: str = os.environ.get("HEROKU_BASE_URL", "https://the-internet.herokuapp.com")

    # Browser
    BROWSER: str = os.environ.get("E2E_BROWSER", "firefox")
    HEADLESS: bool = _env_bool("E2E_HEADLESS", True)
    SLOW_MO_MS: int = 0
    VIEWPORT: dict = {"width": 1280, "height": 720}

    # Timeouts (milliseconds)
    TEST_TIMEOUT_MS: int = 8000
    ACTION_TIMEOUT_MS: int = 5000
    EXPECT_TIMEOUT_MS: int = 5000

    # Site availability check before the E2E session (seconds)
    SITE_WAIT_S: float = 10
    SITE_POLL_INTERVAL_S: float = 2

    # Artifacts: "off", "on", "only-on-failure" (video is "off" or "on")
    VIDEO: str = "off"
    SCREENSHOT: str = "only-on-failure"
    TRACE: str = "only-on-failure"
    ARTIFACTS_DIR: str = os.environ.get("E2E_ARTIFACTS_DIR", str(BASE_DIR / "test-results"))

    # Fixtures
    UPLOAD_FILE: Path = BASE_DIR / "tests" / "e2e" / "fixtures" / "empty_txt_file_for_uploading.txt"


class CIConfig(Config):
    """Continuous integration configuration."""

    HEADLESS: bool = True
    ACTION_TIMEOUT_MS: int = 10000
    EXPECT_TIMEOUT_MS: int = 10000
    SITE_WAIT_S: float = 30


class DebugConfig(Config):
    """Local debugging configuration: visible browser, slowed down, full traces."""

    HEADLESS: bool = False
    SLOW_MO_MS: int = 250
    TRACE: str = "on"
    SCREENSHOT: str = "on"


# Configuration mapping for easy access
config = {
    "ci": CIConfig,
    "debug": DebugConfig,
    "default": Config,
}


def get_config(env: str | None = None) -> type[Config]:
    """
    Get the configuration class for the specified environment.

    Args:
        env: Environment name (default, ci, debug).
             If None, uses E2E_ENV environment variable.

    Returns:
        Configuration class for the specified environment.
    """
    if env is None:
        env = os.environ.get("E2E_ENV", "default")
    return config.get(env, config["default"])
