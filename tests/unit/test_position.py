"""Unit tests for PositionSource."""

from __future__ import annotations

import time
from datetime import UTC, datetime, timedelta
from unittest.mock import MagicMock

import pytest

from nav_assist.core.errors import PositionUnavailable
from nav_assist.core.models import Coordinate
from nav_assist.core.profile import PositionOptions
from nav_assist.services.position import (
  PositionFix,
  PositionSource,
  StaticPositionProvider,
)

HERE = Coordinate(lon=-122.42, lat=37.77)
THERE = Coordinate(lon=-122.40, lat=37.78)


class FakeClock:
  """Manually advanced clock."""

  def __init__(self, start: datetime) -> None:
    self.now = start

  def __call__(self) -> datetime:
    return self.now

  def advance(self, seconds: float) -> None:
    self.now += timedelta(seconds=seconds)


class TestStaticPositionProvider:
  """Tests for StaticPositionProvider."""

  def test_returns_fixed_coordinate(self) -> None:
    """Test that every call reports the configured coordinate."""
    provider = StaticPositionProvider(HERE, accuracy_m=5.0)
    fix = provider(high_accuracy=True)
    assert fix.coordinate == HERE
    assert fix.accuracy_m == 5.0


class TestPositionSource:
  """Tests for PositionSource.acquire."""

  @pytest.mark.asyncio
  async def test_acquire_from_provider(self) -> None:
    """Test a normal one-shot acquisition."""
    source = PositionSource(StaticPositionProvider(HERE))
    assert await source.acquire() == HERE
    assert source.last_fix is not None

  @pytest.mark.asyncio
  async def test_passes_accuracy_flag(self) -> None:
    """Test that the high-accuracy option reaches the provider."""
    provider = MagicMock(return_value=PositionFix(coordinate=HERE))
    source = PositionSource(provider, PositionOptions(high_accuracy=False))
    await source.acquire()
    provider.assert_called_once_with(False)

  @pytest.mark.asyncio
  async def test_cached_fix_within_max_age(self) -> None:
    """Test that a fresh cached fix is reused without querying."""
    clock = FakeClock(datetime(2026, 1, 1, tzinfo=UTC))
    provider = MagicMock(
      side_effect=[
        PositionFix(coordinate=HERE, timestamp=clock.now),
        PositionFix(coordinate=THERE, timestamp=clock.now),
      ]
    )
    source = PositionSource(provider, PositionOptions(max_age_s=10), clock=clock)

    assert await source.acquire() == HERE
    clock.advance(9)
    assert await source.acquire() == HERE
    assert provider.call_count == 1

  @pytest.mark.asyncio
  async def test_stale_fix_requeried(self) -> None:
    """Test that a cached fix older than max_age triggers a new query."""
    clock = FakeClock(datetime(2026, 1, 1, tzinfo=UTC))
    provider = MagicMock(
      side_effect=[
        PositionFix(coordinate=HERE, timestamp=clock.now),
        PositionFix(coordinate=THERE, timestamp=clock.now + timedelta(seconds=11)),
      ]
    )
    source = PositionSource(provider, PositionOptions(max_age_s=10), clock=clock)

    await source.acquire()
    clock.advance(11)
    assert await source.acquire() == THERE
    assert provider.call_count == 2

  @pytest.mark.asyncio
  async def test_provider_error(self) -> None:
    """Test that provider failures become PositionUnavailable."""
    provider = MagicMock(side_effect=PermissionError("denied"))
    source = PositionSource(provider)
    with pytest.raises(PositionUnavailable, match="denied"):
      await source.acquire()
    assert source.last_fix is None

  @pytest.mark.asyncio
  async def test_timeout(self) -> None:
    """Test that a provider slower than timeout_s becomes PositionUnavailable."""

    def slow_provider(high_accuracy: bool) -> PositionFix:
      time.sleep(0.3)
      return PositionFix(coordinate=HERE)

    source = PositionSource(slow_provider, PositionOptions(timeout_s=0.05))
    with pytest.raises(PositionUnavailable, match="no fix within"):
      await source.acquire()
