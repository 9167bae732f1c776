"""Routing client.

Requests a driving route between two coordinates from the Stadia Maps
(Valhalla) route endpoint and parses the first leg into a Route: the
decoded shape polyline plus the ordered maneuver instructions.
"""

from __future__ import annotations

from typing import Any

import requests
import structlog
from pydantic import ValidationError

from nav_assist.core.errors import RouteError
from nav_assist.core.models import Coordinate, Instruction, Route
from nav_assist.core.polyline import decode_coordinates
from nav_assist.core.profile import DEFAULT_PROFILE, RoutingProfile
from nav_assist.services.http import ServiceClient, describe_failure

logger = structlog.get_logger()

ROUTE_PATH = "/route/v1"


def build_route_request(
  origin: Coordinate,
  destination: Coordinate,
  profile: RoutingProfile = DEFAULT_PROFILE,
) -> dict[str, Any]:
  """Build the JSON body of a route request."""
  return {
    "locations": [
      {"lon": origin.lon, "lat": origin.lat, "type": "break"},
      {"lon": destination.lon, "lat": destination.lat, "type": "break"},
    ],
    **profile.to_request_options(),
  }


def parse_instruction(maneuver: Any) -> Instruction:
  if not isinstance(maneuver, dict) or not isinstance(
    maneuver.get("instruction"), str
  ):
    raise RouteError("maneuver without instruction text")
  try:
    return Instruction(
      text=maneuver["instruction"],
      length=maneuver.get("length"),
      time_s=maneuver.get("time"),
    )
  except ValidationError as e:
    raise RouteError(f"invalid maneuver: {e}") from e


def parse_route(data: Any) -> Route:
  """Parse a route response body into a Route.

  Only the first leg is read. It must carry a shape string and a non-empty
  maneuver list; the shape must decode completely.

  Args:
      data: Decoded JSON body

  Returns:
      Route with at least two polyline points and one instruction

  Raises:
      RouteError: If trip data is missing or malformed
      MalformedPolyline: If a shape segment does not decode
  """
  trip = data.get("trip") if isinstance(data, dict) else None
  legs = trip.get("legs") if isinstance(trip, dict) else None
  if not isinstance(legs, list) or not legs or not isinstance(legs[0], dict):
    raise RouteError("invalid API response: no trip legs")

  leg = legs[0]
  shape = leg.get("shape")
  maneuvers = leg.get("maneuvers")
  if not isinstance(shape, str) or not shape:
    raise RouteError("invalid API response: leg has no shape")
  if not isinstance(maneuvers, list) or not maneuvers:
    raise RouteError("invalid API response: leg has no maneuvers")

  polyline = decode_coordinates(shape)
  if len(polyline) < 2:
    raise RouteError(f"polyline has {len(polyline)} point(s), need at least 2")

  instructions = tuple(parse_instruction(m) for m in maneuvers)

  summary = trip.get("summary") or {}
  if not isinstance(summary, dict):
    raise RouteError("invalid API response: summary is not an object")
  try:
    return Route(
      polyline=polyline,
      instructions=instructions,
      distance=summary.get("length"),
      duration_s=summary.get("time"),
    )
  except ValidationError as e:
    raise RouteError(f"invalid trip summary: {e}") from e


class RouteClient(ServiceClient):
  """Client for the route endpoint.

  Args:
      profile: Default routing profile for requests that do not pass one
  """

  def __init__(
    self,
    base_url: str,
    api_key: str,
    timeout_s: float = 10.0,
    session: requests.Session | None = None,
    profile: RoutingProfile = DEFAULT_PROFILE,
  ) -> None:
    super().__init__(base_url, api_key, timeout_s, session)
    self.profile = profile

  async def route(
    self,
    origin: Coordinate,
    destination: Coordinate,
    profile: RoutingProfile | None = None,
  ) -> Route:
    """Fetch and parse a route.

    Args:
        origin: Start coordinate
        destination: End coordinate
        profile: Routing profile, defaults to the client's profile

    Returns:
        Parsed Route

    Raises:
        RouteError: On network failure, non-2xx response or bad trip data
    """
    body = build_route_request(origin, destination, profile or self.profile)
    try:
      data = await self.request_json("POST", ROUTE_PATH, json_body=body)
    except (requests.RequestException, ValueError) as e:
      raise RouteError(describe_failure(e)) from e

    route = parse_route(data)
    logger.debug(
      "route_parsed",
      points=len(route.polyline),
      instructions=len(route.instructions),
    )
    return route
