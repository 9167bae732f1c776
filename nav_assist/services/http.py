"""Shared HTTP plumbing for the Stadia Maps clients.

Requests are made with a blocking requests.Session executed in a worker
thread, so the event loop keeps processing other navigation events while a
call is in flight.
"""

from __future__ import annotations

import asyncio
from typing import Any

import requests
import structlog

logger = structlog.get_logger()


class ServiceClient:
  """Base class for clients of one JSON web service.

  Args:
      base_url: Service root, e.g. https://api.stadiamaps.com
      api_key: Key appended to every request as `api_key`
      timeout_s: Per-request timeout in seconds
      session: Optional requests.Session (injected in tests)
  """

  def __init__(
    self,
    base_url: str,
    api_key: str,
    timeout_s: float = 10.0,
    session: requests.Session | None = None,
  ) -> None:
    self.base_url = base_url.rstrip("/")
    self.api_key = api_key
    self.timeout_s = timeout_s
    self._session = session or requests.Session()

  def url_for(self, path: str) -> str:
    return f"{self.base_url}/{path.lstrip('/')}"

  def _request_json(
    self,
    method: str,
    path: str,
    params: dict[str, Any] | None = None,
    json_body: dict[str, Any] | None = None,
  ) -> Any:
    """Perform one request and decode its JSON body.

    Raises:
        requests.RequestException: On network failure, timeout or non-2xx status
        ValueError: If the body is not valid JSON
    """
    query = {**(params or {}), "api_key": self.api_key}
    response = self._session.request(
      method,
      self.url_for(path),
      params=query,
      json=json_body,
      headers={"Accept": "application/json"},
      timeout=self.timeout_s,
    )
    response.raise_for_status()
    return response.json()

  async def request_json(
    self,
    method: str,
    path: str,
    params: dict[str, Any] | None = None,
    json_body: dict[str, Any] | None = None,
  ) -> Any:
    """Async wrapper running `_request_json` in a worker thread."""
    logger.debug("http_request", method=method, path=path)
    return await asyncio.to_thread(
      self._request_json, method, path, params, json_body
    )

  def close(self) -> None:
    self._session.close()


def describe_failure(error: Exception) -> str:
  """Summarise a transport or decoding failure for an error `cause`."""
  if isinstance(error, requests.HTTPError) and error.response is not None:
    return f"HTTP {error.response.status_code}"
  if isinstance(error, requests.Timeout):
    return "request timed out"
  # requests' JSONDecodeError is both a ValueError and a RequestException
  if isinstance(error, ValueError):
    return f"invalid response body: {error}"
  return f"network error: {error}"
