"""Navigation session state machine.

This module provides NavigationSession, the single owner of the
NavigationState. It reacts to four kinds of events (position fixes,
search text changes, destination selection and refresh timer ticks),
calls the geocoding and routing clients, and publishes a new immutable
snapshot to its listeners after every transition.

All state writes happen under one asyncio.Lock. Network calls run outside
the lock, so every handler re-checks on resumption that its request is
still the latest of its kind before applying the result.
"""

from __future__ import annotations

import asyncio
import contextlib
from typing import TYPE_CHECKING, Any

import structlog

from nav_assist.core.errors import GeocodeError, PositionUnavailable, RouteError
from nav_assist.core.models import NavigationPhase, NavigationState
from nav_assist.services.geocoder import Geocoder
from nav_assist.services.route_client import RouteClient

if TYPE_CHECKING:
  from collections.abc import Callable, Coroutine

  from nav_assist.core.models import Coordinate, PlaceCandidate, Route
  from nav_assist.core.profile import NavigationConfig
  from nav_assist.services.position import PositionSource

  StateListener = Callable[[NavigationState], None]

logger = structlog.get_logger()


class NavigationSession:
  """Orchestrates position, suggestions, routing and instruction refresh.

  Typical lifecycle:
      async with NavigationSession(config, position_source=source) as session:
        await session.set_search_query("Coffee")
        await session.select_destination(session.state.suggestions[0])

  Args:
      config: Service endpoint, key, routing profile and timing
      geocoder: Autocomplete client; built from config if omitted
      route_client: Routing client; built from config if omitted
      position_source: Device position source; `locate()` is a no-op without one
  """

  def __init__(
    self,
    config: NavigationConfig,
    geocoder: Geocoder | None = None,
    route_client: RouteClient | None = None,
    position_source: PositionSource | None = None,
  ) -> None:
    self.config = config
    self._owned_clients: list[Geocoder | RouteClient] = []
    if geocoder is None:
      geocoder = Geocoder(config.base_url, config.api_key, config.request_timeout_s)
      self._owned_clients.append(geocoder)
    if route_client is None:
      route_client = RouteClient(
        config.base_url,
        config.api_key,
        config.request_timeout_s,
        profile=config.profile,
      )
      self._owned_clients.append(route_client)
    self.geocoder = geocoder
    self.route_client = route_client
    self.position_source = position_source

    self._state = NavigationState()
    self._lock = asyncio.Lock()
    self._listeners: list[StateListener] = []

    # Generation counters: a result is applied only if no newer request of
    # the same kind was issued while it was in flight.
    self._query_generation = 0
    self._route_generation = 0

    self._ticker: asyncio.Task[None] | None = None
    self._pending: set[asyncio.Task[Any]] = set()
    self._started = False
    self._stopped = False

  # ------------------------------------------------------------------
  # State access
  # ------------------------------------------------------------------

  @property
  def state(self) -> NavigationState:
    """Current immutable snapshot."""
    return self._state

  @property
  def phase(self) -> NavigationPhase:
    return self._state.phase

  @property
  def is_running(self) -> bool:
    return self._started and not self._stopped

  def subscribe(self, listener: StateListener) -> Callable[[], None]:
    """Register a listener for new snapshots.

    The listener is called immediately with the current snapshot, then once
    per transition.

    Returns:
        Callable that removes the listener
    """
    self._listeners.append(listener)
    self._notify(listener, self._state)

    def unsubscribe() -> None:
      if listener in self._listeners:
        self._listeners.remove(listener)

    return unsubscribe

  def _notify(self, listener: StateListener, state: NavigationState) -> None:
    try:
      listener(state)
    except Exception as e:
      logger.error("state_listener_failed", listener=repr(listener), error=str(e))

  def _apply(self, **changes: Any) -> None:
    """Replace the snapshot. Caller must hold the lock."""
    new_state = self._state.evolve(**changes)
    if new_state == self._state:
      return
    self._state = new_state
    for listener in list(self._listeners):
      self._notify(listener, new_state)

  # ------------------------------------------------------------------
  # Lifecycle
  # ------------------------------------------------------------------

  async def start(self) -> None:
    """Start the refresh timer and one position acquisition.

    Raises:
        RuntimeError: If the session was already stopped
    """
    if self._stopped:
      raise RuntimeError("NavigationSession cannot be restarted after stop()")
    if self._started:
      return
    self._started = True

    self._ticker = asyncio.create_task(self._run_ticker(), name="nav-refresh-timer")
    if self.position_source is not None:
      self._spawn(self.locate())

    logger.info(
      "session_started",
      refresh_interval_s=self.config.refresh_interval_s,
      refresh_target=self.config.refresh_target,
    )

  async def stop(self) -> None:
    """End the session. Safe to call more than once.

    Cancels the refresh timer exactly once and drops in-flight handlers;
    any late network result is discarded.
    """
    if self._stopped:
      return
    self._stopped = True

    ticker, self._ticker = self._ticker, None
    if ticker is not None:
      ticker.cancel()
      with contextlib.suppress(asyncio.CancelledError):
        await ticker

    pending = list(self._pending)
    for task in pending:
      task.cancel()
    if pending:
      await asyncio.gather(*pending, return_exceptions=True)
    self._pending.clear()

    for client in self._owned_clients:
      client.close()

    logger.info("session_stopped", phase=self._state.phase.value)

  async def __aenter__(self) -> NavigationSession:
    await self.start()
    return self

  async def __aexit__(self, *exc_info: object) -> None:
    await self.stop()

  async def drain(self) -> None:
    """Wait until every handler spawned by the session has finished."""
    while self._pending:
      await asyncio.gather(*list(self._pending), return_exceptions=True)

  def _spawn(self, coro: Coroutine[Any, Any, None]) -> asyncio.Task[None]:
    task = asyncio.create_task(coro)
    self._pending.add(task)
    task.add_done_callback(self._on_task_done)
    return task

  def _on_task_done(self, task: asyncio.Task[Any]) -> None:
    self._pending.discard(task)
    if task.cancelled():
      return
    error = task.exception()
    if error is not None:
      logger.error("session_handler_failed", error=repr(error))

  async def _run_ticker(self) -> None:
    while True:
      await asyncio.sleep(self.config.refresh_interval_s)
      # Ticks do not wait for each other; overlapping refreshes are allowed.
      self._spawn(self.on_timer_tick())

  # ------------------------------------------------------------------
  # Events
  # ------------------------------------------------------------------

  async def locate(self) -> None:
    """Acquire one position fix and feed it to `on_position_acquired`.

    A missing fix leaves current_position unset.
    """
    if self.position_source is None or self._stopped:
      return
    try:
      coordinate = await self.position_source.acquire()
    except PositionUnavailable as e:
      logger.warning("position_unavailable", error=str(e))
      return
    await self.on_position_acquired(coordinate)

  async def on_position_acquired(self, coordinate: Coordinate) -> None:
    """Record the most recent device position."""
    if self._stopped:
      return
    async with self._lock:
      self._apply(current_position=coordinate)
    logger.debug("position_acquired", coordinate=str(coordinate))

  async def on_search_query_changed(self, query: str) -> None:
    """Update the search text and fetch suggestions for it.

    Blank text clears suggestions without a network call. A result is
    dropped if another query was issued (or a destination selected) while
    it was in flight.
    """
    if self._stopped:
      return
    async with self._lock:
      self._query_generation += 1
      generation = self._query_generation
      if not query.strip():
        self._apply(search_query=query, suggestions=())
        return
      self._apply(search_query=query)

    try:
      candidates = await self.geocoder.suggest(query)
    except GeocodeError as e:
      logger.warning("geocode_failed", query=query, cause=e.cause)
      return

    async with self._lock:
      if self._stopped or generation != self._query_generation:
        logger.debug("stale_suggestions_discarded", query=query)
        return
      self._apply(suggestions=tuple(candidates))

  async def on_destination_selected(self, candidate: PlaceCandidate) -> None:
    """Route from the current position to the chosen candidate.

    Without a known position this only clears suggestions. On success the
    destination, route and instructions are replaced together; on failure
    they stay as they were.
    """
    if self._stopped:
      return
    async with self._lock:
      self._query_generation += 1
      self._apply(suggestions=())
      origin = self._state.current_position
      if origin is None:
        logger.info("destination_ignored_no_fix", candidate=candidate.id)
        return
      self._route_generation += 1
      generation = self._route_generation

    destination = candidate.coordinate
    logger.info(
      "route_requested",
      origin=str(origin),
      destination=str(destination),
      label=candidate.label,
    )
    try:
      route = await self.route_client.route(origin, destination, self.config.profile)
    except RouteError as e:
      logger.warning("route_fetch_failed", destination=str(destination), cause=e.cause)
      return

    async with self._lock:
      if self._stopped or generation != self._route_generation:
        logger.debug("stale_route_discarded", destination=str(destination))
        return
      self._apply(
        active_destination=destination,
        route=route,
        instructions=route.instructions,
      )
    logger.info(
      "route_ready",
      points=len(route.polyline),
      instructions=len(route.instructions),
    )

  def _refresh_target(self, route: Route, destination: Coordinate | None) -> Coordinate:
    if self.config.refresh_target == "destination" and destination is not None:
      return destination
    return route.end

  async def on_timer_tick(self) -> None:
    """Refresh the instruction list toward the current route's target.

    Does nothing unless the session is routed. Only the instructions are
    replaced; the displayed polyline stays as it is.
    """
    if self._stopped:
      return
    async with self._lock:
      state = self._state
      route = state.route
      origin = state.current_position
      if route is None or origin is None:
        return
      target = self._refresh_target(route, state.active_destination)
      generation = self._route_generation

    try:
      refreshed = await self.route_client.route(origin, target, self.config.profile)
    except RouteError as e:
      logger.warning("instruction_refresh_failed", cause=e.cause)
      return

    async with self._lock:
      # A destination selected meanwhile owns the instruction list now.
      if self._stopped or generation != self._route_generation:
        logger.debug("stale_refresh_discarded")
        return
      self._apply(instructions=refreshed.instructions)
    logger.debug("instructions_refreshed", instructions=len(refreshed.instructions))

  # ------------------------------------------------------------------
  # Presentation intents
  # ------------------------------------------------------------------

  async def set_search_query(self, text: str) -> None:
    await self.on_search_query_changed(text)

  async def select_destination(self, candidate: PlaceCandidate) -> None:
    await self.on_destination_selected(candidate)
