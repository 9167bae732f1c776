"""Autocomplete geocoding client.

Turns free text into ranked PlaceCandidates using the Stadia Maps (Pelias)
autocomplete endpoint. Candidate order is the service's ranking.
"""

from __future__ import annotations

from typing import Any

import requests
import structlog
from pydantic import ValidationError

from nav_assist.core.errors import GeocodeError
from nav_assist.core.models import Coordinate, PlaceCandidate
from nav_assist.services.http import ServiceClient, describe_failure

logger = structlog.get_logger()

AUTOCOMPLETE_PATH = "/geocoding/v1/autocomplete"


def parse_feature(feature: dict[str, Any]) -> PlaceCandidate:
  """Convert one GeoJSON feature into a PlaceCandidate.

  Raises:
      KeyError, IndexError, TypeError, ValueError: If the feature is malformed
  """
  properties = feature["properties"]
  lon, lat = feature["geometry"]["coordinates"][:2]
  return PlaceCandidate(
    id=str(properties["id"]),
    label=properties.get("label") or properties.get("name") or "",
    coordinate=Coordinate(lon=lon, lat=lat),
  )


def parse_features(data: Any) -> list[PlaceCandidate]:
  """Extract candidates from an autocomplete response body.

  A body without `features` yields no candidates. Malformed features are
  skipped, as are repeats of an id already seen in this batch.

  Raises:
      GeocodeError: If the body or its `features` member has the wrong type
  """
  if not isinstance(data, dict):
    raise GeocodeError("response body is not a JSON object")

  features = data.get("features") or []
  if not isinstance(features, list):
    raise GeocodeError("invalid response body: features is not a list")
  candidates: list[PlaceCandidate] = []
  seen: set[str] = set()
  for index, feature in enumerate(features):
    try:
      candidate = parse_feature(feature)
    except (KeyError, IndexError, TypeError, ValueError, ValidationError) as e:
      logger.warning("geocode_feature_skipped", index=index, error=str(e))
      continue
    if candidate.id in seen:
      logger.debug("geocode_duplicate_skipped", id=candidate.id)
      continue
    seen.add(candidate.id)
    candidates.append(candidate)
  return candidates


class Geocoder(ServiceClient):
  """Client for the autocomplete endpoint."""

  async def suggest(self, query: str) -> list[PlaceCandidate]:
    """Return ranked candidates for a free-text query.

    Blank queries return an empty list without a network call.

    Args:
        query: Free text typed by the user

    Returns:
        Candidates in service ranking order

    Raises:
        GeocodeError: On network failure, non-2xx response or a bad body
    """
    if not query.strip():
      return []

    try:
      data = await self.request_json("GET", AUTOCOMPLETE_PATH, params={"text": query})
    except (requests.RequestException, ValueError) as e:
      raise GeocodeError(describe_failure(e)) from e

    candidates = parse_features(data)
    logger.debug("geocode_complete", query=query, candidates=len(candidates))
    return candidates
