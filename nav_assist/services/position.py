"""One-shot device position acquisition.

PositionSource wraps a blocking platform provider, bounds it with a
timeout and serves a cached fix while it is fresh enough.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Protocol

import structlog

from nav_assist.core.errors import PositionUnavailable
from nav_assist.core.profile import PositionOptions

if TYPE_CHECKING:
  from collections.abc import Callable

  from nav_assist.core.models import Coordinate

logger = structlog.get_logger()


@dataclass(frozen=True)
class PositionFix:
  """A single resolved device position reading."""

  coordinate: Coordinate
  timestamp: datetime = field(default_factory=lambda: datetime.now(UTC))
  accuracy_m: float | None = None


class PositionProvider(Protocol):
  """Blocking platform geolocation query.

  Implementations raise on permission or signal problems.
  """

  def __call__(self, high_accuracy: bool) -> PositionFix: ...


class StaticPositionProvider:
  """Provider that always reports the same coordinate as a fresh fix."""

  def __init__(self, coordinate: Coordinate, accuracy_m: float | None = None) -> None:
    self.coordinate = coordinate
    self.accuracy_m = accuracy_m

  def __call__(self, high_accuracy: bool) -> PositionFix:
    return PositionFix(coordinate=self.coordinate, accuracy_m=self.accuracy_m)


class PositionSource:
  """Asynchronous single-shot position source.

  Args:
      provider: Blocking provider queried in a worker thread
      options: Accuracy, timeout and cache-age settings
      clock: Returns the current aware datetime (overridden in tests)
  """

  def __init__(
    self,
    provider: PositionProvider,
    options: PositionOptions | None = None,
    clock: Callable[[], datetime] | None = None,
  ) -> None:
    self.provider = provider
    self.options = options or PositionOptions()
    self._clock = clock or (lambda: datetime.now(UTC))
    self._last_fix: PositionFix | None = None

  @property
  def last_fix(self) -> PositionFix | None:
    return self._last_fix

  def _cached(self) -> PositionFix | None:
    if self._last_fix is None:
      return None
    age = (self._clock() - self._last_fix.timestamp).total_seconds()
    if age <= self.options.max_age_s:
      return self._last_fix
    return None

  async def acquire(self) -> Coordinate:
    """Return the device coordinate.

    Returns:
        Coordinate from a cached fix within max_age_s, or a new fix

    Raises:
        PositionUnavailable: If the provider fails or the timeout elapses
    """
    cached = self._cached()
    if cached is not None:
      logger.debug("position_cache_hit", coordinate=str(cached.coordinate))
      return cached.coordinate

    try:
      fix = await asyncio.wait_for(
        asyncio.to_thread(self.provider, self.options.high_accuracy),
        timeout=self.options.timeout_s,
      )
    except TimeoutError as e:
      raise PositionUnavailable(
        f"no fix within {self.options.timeout_s:g}s"
      ) from e
    except Exception as e:
      raise PositionUnavailable(f"provider error: {e}") from e

    self._last_fix = fix
    return fix.coordinate
