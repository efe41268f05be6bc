"""
Bounded condition polling for UI tests.

Browser tests against a live site often need to repeat an observation until
something happens: reload until an element disappears, close a modal until it
stops coming back, scroll until the footer shows up. This module wraps that
loop once so each call site only supplies the condition check.

A condition check returns a :class:`PollOutcome` for one attempt. The poller
stops on ``SATISFIED``, on ``REGRESSED`` (when configured to), or when the
attempt/time budget runs out, and reports exactly one terminal
:class:`PollStatus` in a :class:`PollResult`.
"""

from __future__ import annotations

import logging
import math
import threading
import time
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum

logger = logging.getLogger(__name__)


class InvalidConfig(ValueError):
    """Raised when a poll configuration would never terminate or is malformed."""


class PollCancelled(RuntimeError):
    """Raised when the caller's cancellation signal aborts a poll session."""


class PollOutcome(str, Enum):
    """Result of a single condition check."""

    CONTINUE = "continue"
    SATISFIED = "satisfied"
    REGRESSED = "regressed"


class PollStatus(str, Enum):
    """Terminal outcome of a poll session."""

    SATISFIED = "satisfied"
    REGRESSED = "regressed"
    TIMED_OUT = "timed_out"


class PollerState(str, Enum):
    IDLE = "idle"
    POLLING = "polling"
    SATISFIED = "satisfied"
    REGRESSED = "regressed"
    TIMED_OUT = "timed_out"


@dataclass(frozen=True)
class PollConfig:
    """
    Immutable budget for one poll session.

    At least one of ``max_attempts`` and ``max_elapsed_ms`` must be set. When
    both are set the session stops at whichever limit is reached first.

    Attributes:
        max_attempts: Maximum number of condition checks.
        max_elapsed_ms: Maximum wall-clock time in milliseconds.
        inter_attempt_delay_ms: Pause between attempts in milliseconds.
        stop_on_regression: Stop on ``REGRESSED``; otherwise treat it as
            ``CONTINUE``.
    """

    max_attempts: int | None = None
    max_elapsed_ms: float | None = None
    inter_attempt_delay_ms: float = 0
    stop_on_regression: bool = True

    def __post_init__(self) -> None:
        if self.max_attempts is None and self.max_elapsed_ms is None:
            raise InvalidConfig("Either max_attempts or max_elapsed_ms must be set")
        if self.max_attempts is not None and (
            not isinstance(self.max_attempts, int) or isinstance(self.max_attempts, bool)
        ):
            raise InvalidConfig(f"max_attempts must be an integer, got {self.max_attempts!r}")
        if self.max_attempts is not None and self.max_attempts < 1:
            raise InvalidConfig(f"max_attempts must be positive, got {self.max_attempts}")
        if self.max_elapsed_ms is not None and not (
            math.isfinite(self.max_elapsed_ms) and self.max_elapsed_ms > 0
        ):
            raise InvalidConfig(
                f"max_elapsed_ms must be a positive finite duration, got {self.max_elapsed_ms}"
            )
        if not (math.isfinite(self.inter_attempt_delay_ms) and self.inter_attempt_delay_ms >= 0):
            raise InvalidConfig(
                f"inter_attempt_delay_ms must be finite and not negative, got {self.inter_attempt_delay_ms}"
            )


@dataclass(frozen=True)
class PollResult:
    """Final record of a poll session."""

    status: PollStatus
    attempts: int
    elapsed_ms: float

    @property
    def satisfied(self) -> bool:
        return self.status is PollStatus.SATISFIED

    @property
    def regressed(self) -> bool:
        return self.status is PollStatus.REGRESSED

    @property
    def timed_out(self) -> bool:
        return self.status is PollStatus.TIMED_OUT

    def raise_for_status(self, message: str = "Condition was not satisfied") -> "PollResult":
        """
        Fail with ``AssertionError`` unless the session was satisfied.

        Args:
            message: Prefix for the assertion message.

        Returns:
            Self, for chaining.
        """
        if not self.satisfied:
            raise AssertionError(
                f"{message}: {self.status.value} after {self.attempts} attempt(s) "
                f"in {self.elapsed_ms:.0f} ms"
            )
        return self


def _sleep_ms(duration_ms: float) -> None:
    time.sleep(duration_ms / 1000)


class BoundedConditionPoller:
    """
    Run a condition check until it reports a terminal outcome or the budget ends.

    A poller instance runs exactly one session; create a new one per poll.

    Attributes:
        config: Budget and behaviour for the session.
        state: Current :class:`PollerState`.
    """

    def __init__(
        self,
        config: PollConfig,
        *,
        sleep: Callable[[float], None] = _sleep_ms,
        clock: Callable[[], float] = time.monotonic,
        cancel_event: threading.Event | None = None,
        name: str = "poll",
    ):
        """
        Initialize the poller.

        Args:
            config: Poll budget.
            sleep: Sleeps for the given number of milliseconds.
            clock: Monotonic clock returning seconds.
            cancel_event: Optional signal checked at the top of every attempt.
            name: Label used in log messages.
        """
        self.config = config
        self.state = PollerState.IDLE
        self._sleep = sleep
        self._clock = clock
        self._cancel_event = cancel_event
        self._name = name

    def run(self, check: Callable[[], PollOutcome]) -> PollResult:
        """
        Poll ``check`` until a terminal outcome.

        Exceptions raised by ``check`` propagate unchanged.

        Args:
            check: Condition check invoked once per attempt.

        Returns:
            PollResult with the terminal status, attempts used and elapsed time.

        Raises:
            RuntimeError: If this poller already ran.
            PollCancelled: If the cancellation signal was set.
            TypeError: If ``check`` returns something other than a PollOutcome.
        """
        if self.state is not PollerState.IDLE:
            raise RuntimeError(f"Poller '{self._name}' already ran ({self.state.value})")
        self.state = PollerState.POLLING

        config = self.config
        started = self._clock()
        attempts = 0

        while True:
            elapsed_ms = (self._clock() - started) * 1000
            if self._budget_exhausted(attempts, elapsed_ms):
                return self._finish(PollStatus.TIMED_OUT, attempts, elapsed_ms)
            if self._cancel_event is not None and self._cancel_event.is_set():
                raise PollCancelled(f"Poll '{self._name}' cancelled after {attempts} attempt(s)")

            attempts += 1
            outcome = check()
            if not isinstance(outcome, PollOutcome):
                raise TypeError(
                    f"Condition check for '{self._name}' must return PollOutcome, got {outcome!r}"
                )
            logger.debug("%s: attempt %d -> %s", self._name, attempts, outcome.value)

            if outcome is PollOutcome.SATISFIED:
                return self._finish(PollStatus.SATISFIED, attempts, self._elapsed_ms(started))
            if outcome is PollOutcome.REGRESSED and config.stop_on_regression:
                return self._finish(PollStatus.REGRESSED, attempts, self._elapsed_ms(started))

            elapsed_ms = self._elapsed_ms(started)
            if self._budget_exhausted(attempts, elapsed_ms):
                return self._finish(PollStatus.TIMED_OUT, attempts, elapsed_ms)

            delay_ms = config.inter_attempt_delay_ms
            if config.max_elapsed_ms is not None:
                delay_ms = min(delay_ms, config.max_elapsed_ms - elapsed_ms)
            if delay_ms > 0:
                self._sleep(delay_ms)

    def _elapsed_ms(self, started: float) -> float:
        return (self._clock() - started) * 1000

    def _budget_exhausted(self, attempts: int, elapsed_ms: float) -> bool:
        config = self.config
        if config.max_attempts is not None and attempts >= config.max_attempts:
            return True
        return config.max_elapsed_ms is not None and elapsed_ms >= config.max_elapsed_ms

    def _finish(self, status: PollStatus, attempts: int, elapsed_ms: float) -> PollResult:
        self.state = PollerState(status.value)
        logger.info(
            "%s: %s after %d attempt(s) in %.0f ms", self._name, status.value, attempts, elapsed_ms
        )
        return PollResult(status=status, attempts=attempts, elapsed_ms=elapsed_ms)


def poll(
    check: Callable[[], PollOutcome],
    config: PollConfig,
    **kwargs,
) -> PollResult:
    """Run ``check`` in a fresh :class:`BoundedConditionPoller` session."""
    return BoundedConditionPoller(config, **kwargs).run(check)


def until(predicate: Callable[[], bool]) -> Callable[[], PollOutcome]:
    """Adapt a boolean predicate into a condition check (True means satisfied)."""

    def _check() -> PollOutcome:
        return PollOutcome.SATISFIED if predicate() else PollOutcome.CONTINUE

    return _check
