"""Core navigation models, errors and codecs."""

from nav_assist.core.errors import (
  GeocodeError,
  MalformedPolyline,
  NavigationError,
  PositionUnavailable,
  RouteError,
)
from nav_assist.core.models import (
  Coordinate,
  Instruction,
  NavigationPhase,
  NavigationState,
  PlaceCandidate,
  Route,
)
from nav_assist.core.profile import NavigationConfig, PositionOptions, RoutingProfile

__all__ = [
  "Coordinate",
  "GeocodeError",
  "Instruction",
  "MalformedPolyline",
  "NavigationConfig",
  "NavigationError",
  "NavigationPhase",
  "NavigationState",
  "PlaceCandidate",
  "PositionOptions",
  "PositionUnavailable",
  "Route",
  "RouteError",
  "RoutingProfile",
]
