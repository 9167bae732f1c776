"""Clients for the geocoding, routing and position services."""

from nav_assist.services.geocoder import Geocoder
from nav_assist.services.position import (
  PositionFix,
  PositionProvider,
  PositionSource,
  StaticPositionProvider,
)
from nav_assist.services.route_client import RouteClient

__all__ = [
  "Geocoder",
  "PositionFix",
  "PositionProvider",
  "PositionSource",
  "RouteClient",
  "StaticPositionProvider",
]
