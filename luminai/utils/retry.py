"""Bounded-retry state machine for unreliable completion calls.

A :class:`ResilientCaller` drives one external call through the states

    ATTEMPTING(n) --accept--> ACCEPTED
    ATTEMPTING(n) --reject, n < max--> ATTEMPTING(n + 1)
    ATTEMPTING(n) --reject, n == max--> EXHAUSTED

The acceptance predicate, the attempt budget, and the fixed inter-attempt
delay all come from a :class:`RetryPolicy`, so each caller opts into its own
behaviour:

* caption generation -- :func:`caption_policy` (15 attempts, 1 s apart,
  accept non-empty output without a rejection phrase)
* per-group summarization -- :func:`single_attempt_policy` (one attempt;
  the orchestrator skips the group instead of retrying it)

The delay is awaited through an injected ``sleep`` coroutine function so
tests can run the machine without real time passing.  Only the calling task
is suspended.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from enum import Enum
from typing import Awaitable, Callable, Generic, TypeVar

import structlog

from luminai.utils.logging import get_logger

_T = TypeVar("_T")

SleepFn = Callable[[float], Awaitable[None]]

_logger: structlog.BoundLogger = get_logger(__name__)


class RetryState(str, Enum):
    """States of the bounded-retry machine."""

    ATTEMPTING = "attempting"
    ACCEPTED = "accepted"
    EXHAUSTED = "exhausted"


@dataclass(frozen=True)
class RetryPolicy(Generic[_T]):
    """Attempt budget, fixed delay, and acceptance predicate for one caller."""

    max_attempts: int
    delay: float
    accept: Callable[[_T], bool]
    name: str = "call"

    def __post_init__(self) -> None:
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        if self.delay < 0:
            raise ValueError("delay must be non-negative")


@dataclass
class RetryOutcome(Generic[_T]):
    """Terminal result of running a :class:`ResilientCaller`."""

    state: RetryState
    attempts: int
    value: _T | None = None
    last_error: BaseException | None = None
    history: list[RetryState] = field(default_factory=list)

    @property
    def accepted(self) -> bool:
        return self.state is RetryState.ACCEPTED


class ResilientCaller(Generic[_T]):
    """Runs an async call until its policy accepts the result or gives up.

    Exceptions raised by the call count as a rejected attempt: they are
    logged, recorded in :attr:`RetryOutcome.last_error`, and the machine
    moves on exactly as it would for a rejected value.
    """

    def __init__(self, policy: RetryPolicy[_T], sleep: SleepFn | None = None) -> None:
        self._policy = policy
        self._sleep = sleep or asyncio.sleep

    @property
    def policy(self) -> RetryPolicy[_T]:
        return self._policy

    async def run(self, call: Callable[[], Awaitable[_T]]) -> RetryOutcome[_T]:
        policy = self._policy
        history: list[RetryState] = []
        last_value: _T | None = None
        last_error: BaseException | None = None

        attempt = 1
        while True:
            history.append(RetryState.ATTEMPTING)
            try:
                last_value = await call()
                last_error = None
                accepted = policy.accept(last_value)
            except Exception as exc:
                last_error = exc
                accepted = False
                _logger.warning(
                    "retry_attempt_error",
                    policy=policy.name,
                    attempt=attempt,
                    error=str(exc),
                )

            if accepted:
                history.append(RetryState.ACCEPTED)
                _logger.info("retry_accepted", policy=policy.name, attempt=attempt)
                return RetryOutcome(
                    state=RetryState.ACCEPTED,
                    attempts=attempt,
                    value=last_value,
                    history=history,
                )

            if attempt >= policy.max_attempts:
                history.append(RetryState.EXHAUSTED)
                _logger.warning(
                    "retry_exhausted",
                    policy=policy.name,
                    attempts=attempt,
                )
                return RetryOutcome(
                    state=RetryState.EXHAUSTED,
                    attempts=attempt,
                    value=last_value,
                    last_error=last_error,
                    history=history,
                )

            _logger.debug(
                "retry_rejected",
                policy=policy.name,
                attempt=attempt,
                delay_s=policy.delay,
            )
            await self._sleep(policy.delay)
            attempt += 1


# ---------------------------------------------------------------------------
# Predicates and preset policies
# ---------------------------------------------------------------------------

CAPTION_REJECTION_PHRASE = "no image"


def non_empty(text: str | None) -> bool:
    return bool(text and text.strip())


def non_empty_without_phrase(phrase: str) -> Callable[[str | None], bool]:
    """Accept non-empty text that does not contain *phrase* (case-insensitive)."""
    lowered = phrase.lower()

    def _accept(text: str | None) -> bool:
        return non_empty(text) and lowered not in text.lower()  # type: ignore[union-attr]

    return _accept


def caption_policy(max_attempts: int = 15, delay: float = 1.0) -> RetryPolicy[str]:
    return RetryPolicy(
        max_attempts=max_attempts,
        delay=delay,
        accept=non_empty_without_phrase(CAPTION_REJECTION_PHRASE),
        name="caption",
    )


def single_attempt_policy(name: str = "summarize_group") -> RetryPolicy[str]:
    return RetryPolicy(max_attempts=1, delay=0.0, accept=non_empty, name=name)
