"""
Scoped interception of browser dialogs (alert, confirm, prompt, beforeunload).

Playwright delivers dialogs as page events that arrive while the action that
opened them is still running. The interceptor subscribes before the action is
triggered, answers every dialog so the page never blocks, and resolves a
future with the first one so the test can assert on it afterwards::

    with DialogInterceptor(page, action="accept") as dialogs:
        page.locator("#hot-spot").click(button="right")
        record = dialogs.wait()
    assert record.message == "You selected a context menu"
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from concurrent.futures import Future
from dataclasses import dataclass

from playwright.sync_api import Dialog, Page

from shared.polling import PollConfig, poll, until

logger = logging.getLogger(__name__)

DIALOG_ACTIONS = ("accept", "dismiss")


class DialogTimeout(TimeoutError):
    """Raised when no dialog arrives within the wait budget."""


@dataclass(frozen=True)
class DialogRecord:
    """What a dialog said and how it was answered."""

    type: str
    message: str
    default_value: str
    action: str


class DialogInterceptor:
    """
    Context manager that owns a ``dialog`` subscription on a page.

    Attributes:
        page: Playwright page being observed.
        action: ``"accept"`` or ``"dismiss"``.
        prompt_text: Text submitted when accepting a prompt dialog.
        history: Every dialog handled while subscribed, in arrival order.
    """

    def __init__(
        self,
        page: Page,
        action: str = "accept",
        prompt_text: str | None = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        if action not in DIALOG_ACTIONS:
            raise ValueError(f"Unsupported dialog action '{action}', expected one of {DIALOG_ACTIONS}")
        self.page = page
        self.action = action
        self.prompt_text = prompt_text
        self.history: list[DialogRecord] = []
        self._future: Future[DialogRecord] = Future()
        self._subscribed = False
        self._clock = clock

    def __enter__(self) -> "DialogInterceptor":
        self.page.on("dialog", self._handle)
        self._subscribed = True
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def close(self) -> None:
        """Remove the page subscription. Safe to call more than once."""
        if self._subscribed:
            self.page.remove_listener("dialog", self._handle)
            self._subscribed = False

    @property
    def resolved(self) -> bool:
        return self._future.done()

    def _handle(self, dialog: Dialog) -> None:
        if self.action == "accept":
            if self.prompt_text is not None:
                dialog.accept(self.prompt_text)
            else:
                dialog.accept()
        else:
            dialog.dismiss()

        record = DialogRecord(
            type=dialog.type,
            message=dialog.message,
            default_value=dialog.default_value,
            action=self.action,
        )
        self.history.append(record)
        logger.info("Handled %s dialog (%s): %s", record.type, record.action, record.message)
        if not self._future.done():
            self._future.set_result(record)

    def wait(self, timeout_ms: float = 5000, interval_ms: float = 100) -> DialogRecord:
        """
        Wait for the first dialog to be handled.

        Sleeping goes through ``page.wait_for_timeout`` so Playwright keeps
        dispatching page events while we wait.

        Args:
            timeout_ms: Maximum time to wait in milliseconds.
            interval_ms: Delay between checks in milliseconds.

        Returns:
            Record of the first dialog.

        A ``timeout_ms`` that is zero, negative or NaN checks once without
        waiting.

        Raises:
            DialogTimeout: If no dialog arrived in time.
        """
        if not timeout_ms > 0:
            if self._future.done():
                return self._future.result()
            raise DialogTimeout(f"No dialog had appeared (timeout {timeout_ms} ms)")
        result = poll(
            until(self._future.done),
            PollConfig(max_elapsed_ms=timeout_ms, inter_attempt_delay_ms=interval_ms),
            sleep=self.page.wait_for_timeout,
            clock=self._clock,
            name="dialog",
        )
        if not result.satisfied:
            raise DialogTimeout(f"No dialog appeared within {timeout_ms:.0f} ms")
        return self._future.result()


def expect_dialog(
    page: Page,
    trigger: Callable[[], object],
    action: str = "accept",
    prompt_text: str | None = None,
    timeout_ms: float = 5000,
) -> DialogRecord:
    """
    Subscribe, run ``trigger``, wait for the dialog, then unsubscribe.

    Args:
        page: Page the dialog will open on.
        trigger: Callable performing the action that opens the dialog.
        action: ``"accept"`` or ``"dismiss"``.
        prompt_text: Text to submit when accepting a prompt.
        timeout_ms: Wait budget in milliseconds.

    Returns:
        Record of the dialog.
    """
    with DialogInterceptor(page, action=action, prompt_text=prompt_text) as interceptor:
        trigger()
        return interceptor.wait(timeout_ms=timeout_ms)
