"""
Pacing strategies that keep sequential uploads under GitHub's rate limit.

Every strategy exposes the same two hooks. ``before_upload`` runs right before
a Contents API PUT, ``after_upload`` right after it with the response headers
(empty when the call never produced a response). Nothing here retries a call.
"""

import time
from typing import Callable, Mapping, Optional

from loguru import logger

from ..core.models import UploadConfig

SleepFn = Callable[[float], None]
ClockFn = Callable[[], float]


class Pacer:
    """Base pacer: no waiting at all."""

    def __init__(self, sleep: SleepFn = time.sleep):
        self._sleep = sleep

    def before_upload(self) -> None:
        pass

    def after_upload(self, headers: Optional[Mapping[str, str]] = None) -> None:
        pass

    def _wait(self, seconds: float) -> None:
        if seconds > 0:
            self._sleep(seconds)


class FixedDelayPacer(Pacer):
    """Sleeps a constant delay after every upload."""

    def __init__(self, delay: float = 0.3, sleep: SleepFn = time.sleep):
        super().__init__(sleep)
        self.delay = delay

    def after_upload(self, headers: Optional[Mapping[str, str]] = None) -> None:
        self._wait(self.delay)


class TokenBucketPacer(Pacer):
    """Allows ``burst`` calls at once, refilled at ``requests_per_minute``."""

    def __init__(self, requests_per_minute: float = 60.0, burst: int = 1,
                 sleep: SleepFn = time.sleep, clock: ClockFn = time.monotonic):
        super().__init__(sleep)
        if requests_per_minute <= 0:
            raise ValueError("requests_per_minute must be positive")
        self.rate_per_second = requests_per_minute / 60.0
        self.capacity = float(max(burst, 1))
        self._clock = clock
        self._tokens = self.capacity
        self._updated_at = clock()

    def _refill(self) -> None:
        now = self._clock()
        elapsed = max(0.0, now - self._updated_at)
        self._tokens = min(self.capacity, self._tokens + elapsed * self.rate_per_second)
        self._updated_at = now

    def before_upload(self) -> None:
        self._refill()
        if self._tokens < 1.0:
            wait = (1.0 - self._tokens) / self.rate_per_second
            logger.debug(f"Token bucket empty, waiting {wait:.2f}s")
            self._wait(wait)
            self._refill()
            # The injected clock may not advance with the sleep
            self._tokens = max(self._tokens, 1.0)
        self._tokens -= 1.0


class RateLimitHeaderPacer(Pacer):
    """Honours GitHub's rate-limit headers, with a floor of ``min_delay``."""

    def __init__(self, min_delay: float = 0.3, sleep: SleepFn = time.sleep,
                 clock: ClockFn = time.time):
        super().__init__(sleep)
        self.min_delay = min_delay
        self._clock = clock

    def after_upload(self, headers: Optional[Mapping[str, str]] = None) -> None:
        self._wait(self.delay_for(headers or {}))

    def delay_for(self, headers: Mapping[str, str]) -> float:
        lowered = {key.lower(): value for key, value in headers.items()}

        retry_after = _as_float(lowered.get("retry-after"))
        if retry_after is not None:
            logger.warning(f"GitHub asked to retry after {retry_after:.0f}s, pausing uploads")
            return max(self.min_delay, retry_after)

        remaining = _as_float(lowered.get("x-ratelimit-remaining"))
        reset_at = _as_float(lowered.get("x-ratelimit-reset"))
        if remaining is not None and remaining <= 0 and reset_at is not None:
            wait = reset_at - self._clock()
            logger.warning(f"Rate limit exhausted, pausing uploads for {max(wait, 0):.0f}s")
            return max(self.min_delay, wait)

        return self.min_delay


def _as_float(value: Optional[str]) -> Optional[float]:
    if value is None:
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def build_pacer(config: UploadConfig, sleep: SleepFn = time.sleep) -> Pacer:
    """Pick the pacing strategy named in the upload configuration."""
    if config.pacing == "fixed":
        return FixedDelayPacer(config.delay, sleep=sleep)
    if config.pacing == "token_bucket":
        return TokenBucketPacer(config.requests_per_minute, config.burst, sleep=sleep)
    if config.pacing == "adaptive":
        return RateLimitHeaderPacer(config.delay, sleep=sleep)
    raise ValueError(f"Unknown pacing strategy: {config.pacing}")
