"""
Fixtures for unit tests of the shared helpers.

Provides a fake clock so polling budgets can be tested without real sleeps,
and a fake page that records event subscriptions and can emit dialogs.
"""

from __future__ import annotations

from collections.abc import Callable

import pytest


class FakeClock:
    """Monotonic clock advanced only by sleeps and explicit ticks."""

    def __init__(self):
        self.now = 0.0
        self.sleeps: list[float] = []

    def __call__(self) -> float:
        return self.now

    def sleep(self, duration_ms: float) -> None:
        self.sleeps.append(duration_ms)
        self.now += duration_ms / 1000

    def advance(self, duration_ms: float) -> None:
        self.now += duration_ms / 1000


class FakeDialog:
    """Stand-in for a Playwright dialog."""

    def __init__(self, type: str = "alert", message: str = "", default_value: str = ""):
        self.type = type
        self.message = message
        self.default_value = default_value
        self.accepted_with: list[str | None] = []
        self.dismissed = False

    def accept(self, prompt_text: str | None = None) -> None:
        self.accepted_with.append(prompt_text)

    def dismiss(self) -> None:
        self.dismissed = True


class FakePage:
    """Page double exposing the event and timer surface the helpers use."""

    def __init__(self, clock: FakeClock):
        self.clock = clock
        self.listeners: dict[str, list[Callable]] = {}

    def on(self, event: str, handler: Callable) -> None:
        self.listeners.setdefault(event, []).append(handler)

    def remove_listener(self, event: str, handler: Callable) -> None:
        self.listeners[event].remove(handler)

    def emit(self, event: str, payload) -> None:
        for handler in list(self.listeners.get(event, [])):
            handler(payload)

    def wait_for_timeout(self, timeout: float) -> None:
        self.clock.sleep(timeout)


@pytest.fixture
def fake_clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def fake_page(fake_clock: FakeClock) -> FakePage:
    return FakePage(fake_clock)


@pytest.fixture
def scripted_check() -> Callable:
    """
    Factory for condition checks that replay a fixed sequence of outcomes.

    Example:
        def test_something(scripted_check):
            check = scripted_check([PollOutcome.CONTINUE, PollOutcome.SATISFIED])
            ...
            assert check.calls == 2
    """

    def _make(outcomes, clock: FakeClock | None = None, cost_ms: float = 0):
        remaining = list(outcomes)

        def check():
            check.calls += 1
            if clock is not None and cost_ms:
                clock.advance(cost_ms)
            if len(remaining) > 1:
                return remaining.pop(0)
            return remaining[0]

        check.calls = 0
        return check

    return _make
