"""Presentation boundary.

A presentation adapter receives every NavigationState snapshot published
by a NavigationSession and renders it. ConsoleRenderer is the terminal
adapter used by the CLI.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

from rich.console import Console
from rich.table import Table

if TYPE_CHECKING:
  from nav_assist.core.models import NavigationState


class PresentationAdapter(Protocol):
  """Anything that can render a NavigationState snapshot."""

  def render(self, state: NavigationState) -> None: ...


class ConsoleRenderer:
  """Render snapshots to a rich Console.

  Only the parts that changed since the previous snapshot are printed:
  position, suggestions and instructions.
  """

  def __init__(self, console: Console | None = None, units: str = "miles") -> None:
    self.console = console or Console()
    self.units = units
    self._last: NavigationState | None = None

  def __call__(self, state: NavigationState) -> None:
    self.render(state)

  def render(self, state: NavigationState) -> None:
    last = self._last
    self._last = state

    if state.current_position and (
      last is None or last.current_position != state.current_position
    ):
      self.console.print(f"[bold]Position[/bold] {state.current_position}")

    if state.suggestions and (last is None or last.suggestions != state.suggestions):
      self.console.print(build_suggestion_table(state))

    if state.instructions and (
      last is None or last.instructions != state.instructions
    ):
      self.console.print(build_instruction_table(state, self.units))


def build_suggestion_table(state: NavigationState) -> Table:
  table = Table(title=f"Suggestions for {state.search_query!r}")
  table.add_column("#", justify="right", style="dim")
  table.add_column("Place")
  table.add_column("Coordinates", style="dim")
  for index, candidate in enumerate(state.suggestions, start=1):
    table.add_row(str(index), candidate.label, str(candidate.coordinate))
  return table


def build_instruction_table(state: NavigationState, units: str = "miles") -> Table:
  route = state.route
  title = "Directions"
  if route is not None:
    title += f" ({len(route.polyline)} points"
    if route.distance is not None:
      title += f", {route.distance:.1f} {units}"
    title += ")"
  table = Table(title=title)
  table.add_column("#", justify="right", style="dim")
  table.add_column("Instruction")
  for index, instruction in enumerate(state.instructions, start=1):
    table.add_row(str(index), instruction.text)
  return table
