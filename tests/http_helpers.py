"""Helpers for faking the requests layer and building service payloads."""

from __future__ import annotations

from typing import Any
from unittest.mock import MagicMock

import requests

SAMPLE_SHAPE = "-122.42,37.77;-122.41,37.775;-122.40,37.78"
SAMPLE_MANEUVERS = ["Head north", "Turn right", "Arrive"]


def make_response(
  payload: Any = None,
  status: int = 200,
  json_error: Exception | None = None,
) -> MagicMock:
  """Create a fake requests.Response.

  Args:
      payload: Decoded JSON body returned by `.json()`
      status: HTTP status code; >= 400 makes raise_for_status raise HTTPError
      json_error: Exception raised by `.json()` instead of returning payload
  """
  response = MagicMock(spec=requests.Response)
  response.status_code = status
  if status >= 400:
    response.raise_for_status.side_effect = requests.HTTPError(
      f"{status} Error", response=response
    )
  else:
    response.raise_for_status.return_value = None
  if json_error is not None:
    response.json.side_effect = json_error
  else:
    response.json.return_value = payload
  return response


def make_http_session(*outcomes: MagicMock | Exception) -> MagicMock:
  """Create a fake requests.Session whose request() yields outcomes in order."""
  session = MagicMock(spec=requests.Session)
  session.request.side_effect = list(outcomes)
  return session


def autocomplete_payload(*places: tuple[str, str, float, float]) -> dict[str, Any]:
  """Build an autocomplete body from (id, label, lon, lat) tuples."""
  return {
    "type": "FeatureCollection",
    "features": [
      {
        "type": "Feature",
        "geometry": {"type": "Point", "coordinates": [lon, lat]},
        "properties": {"id": place_id, "label": label},
      }
      for place_id, label, lon, lat in places
    ],
  }


def route_payload(
  shape: str = SAMPLE_SHAPE,
  instructions: list[str] | None = None,
  summary: Any = None,
) -> dict[str, Any]:
  """Build a route body with a single leg."""
  maneuvers = [
    {"instruction": text, "length": 0.1, "time": 12.0}
    for text in (SAMPLE_MANEUVERS if instructions is None else instructions)
  ]
  trip: dict[str, Any] = {"legs": [{"shape": shape, "maneuvers": maneuvers}]}
  if summary is not None:
    trip["summary"] = summary
  return {"trip": trip}
