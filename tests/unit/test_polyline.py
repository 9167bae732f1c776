"""Unit tests for the route shape codec."""

from __future__ import annotations

import pytest

from nav_assist.core.errors import MalformedPolyline, RouteError
from nav_assist.core.models import Coordinate
from nav_assist.core.polyline import (
  decode_coordinates,
  parse_pair,
  parse_polyline,
)


class TestParsePolyline:
  """Tests for parse_polyline."""

  def test_two_pairs(self) -> None:
    """Test that 'a,b;c,d' yields exactly [(a, b), (c, d)]."""
    assert parse_polyline("1.5,2.5;-3,4") == [(1.5, 2.5), (-3.0, 4.0)]

  def test_values_are_floats(self) -> None:
    """Test that integers in the shape decode as floats."""
    (lon, lat), _ = parse_polyline("1,2;3,4")
    assert isinstance(lon, float)
    assert isinstance(lat, float)

  def test_single_pair(self) -> None:
    """Test that a single segment decodes to one pair."""
    assert parse_polyline("-122.42,37.77") == [(-122.42, 37.77)]

  @pytest.mark.parametrize(
    "shape",
    [
      "1,2;x,4",
      "1,2;3",
      "1,2;3,4,5",
      "1,2;;3,4",
      "1,2;3,4;",
      "",
      "1,nan",
      "inf,2",
    ],
  )
  def test_malformed_segment_fails_whole_shape(self, shape: str) -> None:
    """Test that any malformed segment fails the parse, never a partial result."""
    with pytest.raises(MalformedPolyline):
      parse_polyline(shape)

  def test_malformed_is_a_route_error(self) -> None:
    """Test that MalformedPolyline specialises RouteError."""
    with pytest.raises(RouteError) as exc_info:
      parse_pair("abc,1")
    assert exc_info.value.segment == "abc,1"  # type: ignore[attr-defined]


class TestDecodeCoordinates:
  """Tests for decode_coordinates."""

  def test_decodes_to_coordinates(self) -> None:
    """Test decoding into Coordinate values."""
    points = decode_coordinates("-122.42,37.77;-122.40,37.78")
    assert points == (
      Coordinate(lon=-122.42, lat=37.77),
      Coordinate(lon=-122.40, lat=37.78),
    )

  def test_out_of_range_pair_is_malformed(self) -> None:
    """Test that a numeric but out-of-range pair fails the shape."""
    with pytest.raises(MalformedPolyline):
      decode_coordinates("0,0;0,95")
