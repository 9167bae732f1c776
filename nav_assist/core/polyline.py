"""Codec for route shapes encoded as "lon,lat;lon,lat;..."."""

from __future__ import annotations

import math

from pydantic import ValidationError

from nav_assist.core.errors import MalformedPolyline
from nav_assist.core.models import Coordinate

SEGMENT_SEPARATOR = ";"
PAIR_SEPARATOR = ","


def parse_pair(segment: str) -> tuple[float, float]:
  """Decode one "lon,lat" segment into two finite floats.

  Raises:
      MalformedPolyline: If the segment is not exactly two finite numbers
  """
  tokens = segment.split(PAIR_SEPARATOR)
  if len(tokens) != 2:
    raise MalformedPolyline(segment)
  try:
    lon, lat = float(tokens[0]), float(tokens[1])
  except ValueError as e:
    raise MalformedPolyline(segment) from e
  if not (math.isfinite(lon) and math.isfinite(lat)):
    raise MalformedPolyline(segment)
  return lon, lat


def parse_polyline(shape: str) -> list[tuple[float, float]]:
  """Decode a shape string into (lon, lat) pairs.

  "a,b;c,d" yields [(a, b), (c, d)]. Any malformed segment fails the whole
  shape; there is no partial result.

  Args:
      shape: Semicolon-separated "lon,lat" pairs

  Returns:
      List of (lon, lat) float pairs in travel order

  Raises:
      MalformedPolyline: If any segment is malformed
  """
  return [parse_pair(segment) for segment in shape.split(SEGMENT_SEPARATOR)]


def decode_coordinates(shape: str) -> tuple[Coordinate, ...]:
  """Decode a shape string straight into Coordinates.

  Raises:
      MalformedPolyline: If a segment is malformed or out of range
  """
  coordinates: list[Coordinate] = []
  for lon, lat in parse_polyline(shape):
    try:
      coordinates.append(Coordinate(lon=lon, lat=lat))
    except ValidationError as e:
      raise MalformedPolyline(f"{lon},{lat}") from e
  return tuple(coordinates)
