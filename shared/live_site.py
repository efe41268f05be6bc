"""Reachability helpers for the live demo site used by the E2E suite."""

from __future__ import annotations

import logging

import requests

from shared.polling import PollConfig, poll, until

logger = logging.getLogger(__name__)


def is_site_reachable(url: str, timeout: float = 5) -> bool:
    """Return True when the site index responds with a non-5xx status."""
    try:
        response = requests.get(url, timeout=timeout)
    except requests.RequestException as exc:
        logger.warning("Site %s unreachable: %s", url, exc)
        return False
    return response.status_code < 500


def wait_for_site(url: str, timeout: float = 30, interval: float = 1) -> None:
    """
    Poll the site index until it responds or ``timeout`` seconds pass.

    Raises:
        RuntimeError: If the site never became reachable.
    """
    result = poll(
        until(lambda: is_site_reachable(url, timeout=min(timeout, 5))),
        PollConfig(max_elapsed_ms=timeout * 1000, inter_attempt_delay_ms=interval * 1000),
        name=f"site {url}",
    )
    if not result.satisfied:
        raise RuntimeError(f"Site at {url} not reachable after {timeout}s")
