"""Core CLI app setup."""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import TYPE_CHECKING, Annotated

import structlog
import typer
from pydantic import ValidationError
from rich.console import Console

if TYPE_CHECKING:
  from structlog.typing import FilteringBoundLogger

from nav_assist.core.errors import GeocodeError, RouteError
from nav_assist.core.models import Coordinate, NavigationState, Route
from nav_assist.core.profile import NavigationConfig, format_validation_errors
from nav_assist.logging_config import configure_logging
from nav_assist.navigator.presentation import (
  ConsoleRenderer,
  build_instruction_table,
  build_suggestion_table,
)
from nav_assist.navigator.session import NavigationSession
from nav_assist.services.geocoder import Geocoder
from nav_assist.services.position import PositionSource, StaticPositionProvider
from nav_assist.services.route_client import RouteClient
from nav_assist.settings import settings

# stderr console for logs/status, stdout console for the directions themselves
err_console = Console(stderr=True)
out_console = Console()


def get_logger() -> FilteringBoundLogger:
  """Configure logging and return a logger instance."""
  configure_logging(settings.log_level)
  return structlog.get_logger()


def parse_coordinate(value: str) -> Coordinate:
  """Typer parser for "lon,lat" arguments."""
  try:
    return Coordinate.parse(value)
  except ValueError as e:
    raise typer.BadParameter(f"expected 'lon,lat' in range, got {value!r}") from e


def load_config(config_file: Path | None, **overrides: object) -> NavigationConfig:
  """Build the session config from settings and an optional YAML file.

  Raises:
      typer.Exit: If the API key is missing or the config is invalid
  """
  try:
    overrides = {"api_key": settings.require_api_key(), **overrides}
    if config_file is not None:
      return NavigationConfig.from_yaml_file(config_file, **overrides)
    return NavigationConfig.from_settings(settings, **overrides)
  except ValidationError as e:
    err_console.print(f"[red]{format_validation_errors(e.errors())}[/red]")
    raise typer.Exit(code=1) from e
  except (ValueError, FileNotFoundError) as e:
    err_console.print(f"[red]Configuration error: {e}[/red]")
    raise typer.Exit(code=1) from e


ConfigOption = Annotated[
  Path | None,
  typer.Option("--config", "-c", help="YAML navigation config file."),
]


app = typer.Typer(
  help="nav-assist: live turn-by-turn driving directions.",
  no_args_is_help=True,
)


@app.command()
def suggest(
  query: Annotated[str, typer.Argument(help="Free-text place search.")],
  config_file: ConfigOption = None,
):
  """
  List autocomplete candidates for a place search.
  """
  log = get_logger()
  config = load_config(config_file)
  geocoder = Geocoder(config.base_url, config.api_key, config.request_timeout_s)

  try:
    candidates = asyncio.run(geocoder.suggest(query))
  except GeocodeError as e:
    log.error("geocode_failed", query=query, cause=e.cause)
    err_console.print(f"[red]Search failed: {e.cause}[/red]")
    raise typer.Exit(code=1) from e
  finally:
    geocoder.close()

  if not candidates:
    err_console.print("[yellow]No places found.[/yellow]")
    return

  out_console.print(
    build_suggestion_table(
      NavigationState(search_query=query, suggestions=tuple(candidates))
    )
  )


@app.command(context_settings={"ignore_unknown_options": True})
def route(
  origin: Annotated[
    Coordinate, typer.Argument(parser=parse_coordinate, help="Start as lon,lat.")
  ],
  destination: Annotated[
    Coordinate, typer.Argument(parser=parse_coordinate, help="End as lon,lat.")
  ],
  config_file: ConfigOption = None,
):
  """
  Print driving directions between two coordinates.
  """
  log = get_logger()
  config = load_config(config_file)
  client = RouteClient(
    config.base_url,
    config.api_key,
    config.request_timeout_s,
    profile=config.profile,
  )

  try:
    result: Route = asyncio.run(client.route(origin, destination))
  except RouteError as e:
    log.error("route_fetch_failed", cause=e.cause)
    err_console.print(f"[red]Routing failed: {e.cause}[/red]")
    raise typer.Exit(code=1) from e
  finally:
    client.close()

  state = NavigationState(
    current_position=origin,
    active_destination=destination,
    route=result,
    instructions=result.instructions,
  )
  out_console.print(build_instruction_table(state, config.profile.units))


async def run_navigation(
  config: NavigationConfig,
  position: Coordinate,
  search: str,
  pick: int,
  ticks: int,
) -> NavigationState:
  """Drive one session: fix, search, select, then let refresh ticks elapse."""
  source = PositionSource(StaticPositionProvider(position), config.position)
  renderer = ConsoleRenderer(out_console, units=config.profile.units)

  async with NavigationSession(config, position_source=source) as session:
    session.subscribe(renderer)
    await session.drain()

    await session.set_search_query(search)
    suggestions = session.state.suggestions
    if not suggestions:
      err_console.print(f"[yellow]No places found for {search!r}.[/yellow]")
      return session.state
    if pick > len(suggestions):
      err_console.print(
        f"[yellow]Only {len(suggestions)} suggestion(s); using the last one.[/yellow]"
      )
    await session.select_destination(suggestions[min(pick, len(suggestions)) - 1])

    if ticks and session.state.route is not None:
      await asyncio.sleep(config.refresh_interval_s * ticks)
      await session.drain()

    return session.state


@app.command()
def navigate(
  at: Annotated[
    Coordinate,
    typer.Option("--at", parser=parse_coordinate, help="Device position as lon,lat."),
  ],
  search: Annotated[str, typer.Option("--search", "-s", help="Destination search.")],
  pick: Annotated[
    int, typer.Option("--pick", "-p", min=1, help="Suggestion number to route to.")
  ] = 1,
  ticks: Annotated[
    int, typer.Option("--ticks", min=0, help="Refresh ticks to wait for.")
  ] = 0,
  interval: Annotated[
    float | None,
    typer.Option("--interval", help="Refresh interval in seconds."),
  ] = None,
  config_file: ConfigOption = None,
):
  """
  Run a navigation session from a fixed position to a searched place.
  """
  log = get_logger()
  overrides = {} if interval is None else {"refresh_interval_s": interval}
  config = load_config(config_file, **overrides)

  log.info("navigation_starting", position=str(at), search=search)
  state = asyncio.run(run_navigation(config, at, search, pick, ticks))

  if state.route is None:
    err_console.print("[red]No route could be computed.[/red]")
    raise typer.Exit(code=1)

  err_console.print(
    f"[bold green]✓ Routed[/bold green] to {state.active_destination} "
    f"with {len(state.instructions)} instructions"
  )


if __name__ == "__main__":
  app()
