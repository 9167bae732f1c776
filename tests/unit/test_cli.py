"""Tests for the nav-assist command line."""

from __future__ import annotations

from unittest.mock import patch

import pytest
from typer.testing import CliRunner

from nav_assist.cli.app import app
from nav_assist.settings import Settings
from tests.http_helpers import (
  autocomplete_payload,
  make_http_session,
  make_response,
  route_payload,
)

runner = CliRunner()


@pytest.fixture
def configured():
  """Settings with an API key, isolated from any local .env file."""
  with patch(
    "nav_assist.cli.app.settings",
    Settings(_env_file=None, stadia_api_key="test-key"),
  ):
    yield


def fake_http(*outcomes):
  """Patch the requests.Session constructor used by every service client."""
  session = make_http_session(*outcomes)
  return patch("nav_assist.services.http.requests.Session", return_value=session)


def test_missing_api_key():
  with patch("nav_assist.cli.app.settings", Settings(_env_file=None)):
    result = runner.invoke(app, ["suggest", "Coffee"])
  assert result.exit_code == 1
  assert "STADIA_API_KEY is not set" in result.output


def test_suggest(configured):
  payload = autocomplete_payload(("1", "Blue Bottle", -122.40, 37.78))
  with fake_http(make_response(payload)) as session_cls:
    result = runner.invoke(app, ["suggest", "Coffee"])

  assert result.exit_code == 0
  assert "Blue Bottle" in result.stdout
  call = session_cls.return_value.request.call_args
  assert call.kwargs["params"] == {"text": "Coffee", "api_key": "test-key"}


def test_suggest_no_results(configured):
  with fake_http(make_response(autocomplete_payload())):
    result = runner.invoke(app, ["suggest", "Nowhere"])
  assert result.exit_code == 0
  assert "No places found." in result.output


def test_suggest_service_error(configured):
  with fake_http(make_response(status=500)):
    result = runner.invoke(app, ["suggest", "Coffee"])
  assert result.exit_code == 1
  assert "HTTP 500" in result.output


def test_route(configured):
  with fake_http(make_response(route_payload())):
    result = runner.invoke(app, ["route", "-122.42,37.77", "-122.40,37.78"])

  assert result.exit_code == 0
  for text in ("Head north", "Turn right", "Arrive"):
    assert text in result.stdout


def test_route_southern_western_hemisphere(configured):
  with fake_http(make_response(route_payload())) as session_cls:
    result = runner.invoke(app, ["route", "-58.38,-34.60", "-58.37,-34.61"])

  assert result.exit_code == 0
  body = session_cls.return_value.request.call_args.kwargs["json"]
  assert body["locations"][0]["lat"] == -34.60
  assert body["locations"][1]["lon"] == -58.37


def test_route_malformed_polyline(configured):
  with fake_http(make_response(route_payload(shape="-122.42,37.77;oops"))):
    result = runner.invoke(app, ["route", "-122.42,37.77", "-122.40,37.78"])
  assert result.exit_code == 1
  assert "malformed polyline" in result.output


def test_route_rejects_bad_coordinate(configured):
  result = runner.invoke(app, ["route", "north", "-122.40,37.78"])
  assert result.exit_code == 2


def test_invalid_config_file(configured, tmp_path):
  config_file = tmp_path / "nav.yaml"
  config_file.write_text("refresh_interval_s: -1\n")
  result = runner.invoke(app, ["suggest", "Coffee", "--config", str(config_file)])
  assert result.exit_code == 1
  assert "Invalid navigation configuration" in result.output


def test_navigate(configured):
  with fake_http(
    make_response(autocomplete_payload(("1", "Blue Bottle", -122.40, 37.78))),
    make_response(route_payload()),
  ) as session_cls:
    result = runner.invoke(
      app, ["navigate", "--at", "-122.42,37.77", "--search", "Coffee"]
    )

  assert result.exit_code == 0
  assert "Routed" in result.output
  assert "3 instructions" in result.output
  body = session_cls.return_value.request.call_args.kwargs["json"]
  assert body["locations"][0] == {"lon": -122.42, "lat": 37.77, "type": "break"}
  assert body["locations"][1] == {"lon": -122.40, "lat": 37.78, "type": "break"}


def test_navigate_route_failure(configured):
  with fake_http(
    make_response(autocomplete_payload(("1", "Blue Bottle", -122.40, 37.78))),
    make_response(status=500),
  ):
    result = runner.invoke(
      app, ["navigate", "--at", "-122.42,37.77", "--search", "Coffee"]
    )
  assert result.exit_code == 1
  assert "No route could be computed." in result.output
