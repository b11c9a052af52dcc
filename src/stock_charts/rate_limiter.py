from __future__ import annotations

import logging
import threading
import time
from collections.abc import Callable

DEFAULT_MIN_INTERVAL_SECONDS = 15.0


class RateLimiter:
  """Spaces outbound requests at least `min_interval_seconds` apart.

  One instance represents one API key's call budget. Share the same instance
  between every client that spends that budget.
  """

  def __init__(
    self,
    min_interval_seconds: float = DEFAULT_MIN_INTERVAL_SECONDS,
    clock: Callable[[], float] = time.monotonic,
    sleep: Callable[[float], None] = time.sleep,
  ):
    if min_interval_seconds < 0:
      raise ValueError("min_interval_seconds must be non-negative.")
    self.min_interval_seconds = min_interval_seconds
    self._clock = clock
    self._sleep = sleep
    self._last_request: float | None = None
    self._lock = threading.Lock()

  @property
  def last_request(self) -> float | None:
    return self._last_request

  def wait(self) -> None:
    """Blocks until a request may be issued, then stamps the issue time."""
    with self._lock:
      if self._last_request is not None:
        elapsed = self._clock() - self._last_request
        remaining = self.min_interval_seconds - elapsed
        if remaining > 0:
          logging.info(f"Waiting {remaining:.0f} seconds for API rate limit...")
          self._sleep(remaining)
      self._last_request = self._clock()

  def penalize(self) -> None:
    """Sleeps one full interval after the provider reports throttling."""
    logging.info(
      f"Pausing {self.min_interval_seconds:.0f} seconds after rate limit notice..."
    )
    self._sleep(self.min_interval_seconds)
