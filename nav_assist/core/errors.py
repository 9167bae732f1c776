"""Error taxonomy for the navigation clients.

Every error raised by a client is caught by NavigationSession at the call
site and turned into a log record; none of them end a session.
"""

from __future__ import annotations


class NavigationError(Exception):
  """Base class for recoverable navigation failures."""


class PositionUnavailable(NavigationError):
  """Raised when no position fix could be obtained in time."""


class GeocodeError(NavigationError):
  """Raised when an autocomplete request fails."""

  def __init__(self, cause: str) -> None:
    super().__init__(f"Geocoding failed: {cause}")
    self.cause = cause


class RouteError(NavigationError):
  """Raised when a route cannot be fetched or parsed.

  Network failures, non-2xx responses and missing trip data share this
  type and differ only by `cause`.
  """

  def __init__(self, cause: str) -> None:
    super().__init__(f"Routing failed: {cause}")
    self.cause = cause


class MalformedPolyline(RouteError):
  """Raised when a shape segment does not decode to two finite floats."""

  def __init__(self, segment: str) -> None:
    super().__init__(f"malformed polyline segment {segment!r}")
    self.segment = segment
