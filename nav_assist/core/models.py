"""Navigation data models.

This module provides the immutable Pydantic models exchanged between the
clients, the NavigationSession and the presentation layer: coordinates,
place candidates, routes with their instructions, and the aggregate
NavigationState snapshot.
"""

from __future__ import annotations

from enum import Enum
from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field, model_validator


class Coordinate(BaseModel):
  """A (longitude, latitude) pair in finite decimal degrees."""

  model_config = ConfigDict(frozen=True, allow_inf_nan=False)

  lon: Annotated[float, Field(ge=-180, le=180, description="Longitude in degrees")]
  lat: Annotated[float, Field(ge=-90, le=90, description="Latitude in degrees")]

  @classmethod
  def parse(cls, text: str) -> Coordinate:
    """Parse a "lon,lat" string.

    Raises:
        ValueError: If the text is not two comma-separated numbers in range
    """
    parts = text.split(",")
    if len(parts) != 2:
      raise ValueError(f"Expected 'lon,lat', got {text!r}")
    return cls(lon=float(parts[0]), lat=float(parts[1]))

  def __str__(self) -> str:
    return f"{self.lon},{self.lat}"


class PlaceCandidate(BaseModel):
  """An autocomplete suggestion that can become a destination."""

  model_config = ConfigDict(frozen=True)

  id: Annotated[str, Field(min_length=1, description="Unique within one batch")]
  label: str = Field(description="Display label")
  coordinate: Coordinate


class Instruction(BaseModel):
  """A single maneuver in travel order."""

  model_config = ConfigDict(frozen=True)

  text: str = Field(description="Maneuver description")
  length: float | None = Field(
    default=None, ge=0, description="Maneuver length in profile units"
  )
  time_s: float | None = Field(default=None, ge=0, description="Maneuver time")

  def __str__(self) -> str:
    return self.text


class Route(BaseModel):
  """A route polyline plus its ordered instructions.

  Replaced wholesale on every successful fetch.
  """

  model_config = ConfigDict(frozen=True)

  polyline: tuple[Coordinate, ...] = Field(min_length=2)
  instructions: tuple[Instruction, ...] = Field(min_length=1)
  distance: float | None = Field(default=None, ge=0, description="Total length")
  duration_s: float | None = Field(default=None, ge=0, description="Total time")

  @property
  def end(self) -> Coordinate:
    return self.polyline[-1]


class NavigationPhase(str, Enum):
  """Behavioural phase derived from a NavigationState."""

  IDLE = "idle"
  POSITIONED = "positioned"
  ROUTED = "routed"


class NavigationState(BaseModel):
  """Snapshot of everything the presentation layer renders.

  Snapshots are immutable; NavigationSession publishes a new one for
  every transition.
  """

  model_config = ConfigDict(frozen=True)

  current_position: Coordinate | None = None
  active_destination: Coordinate | None = None
  route: Route | None = None
  instructions: tuple[Instruction, ...] = ()
  search_query: str = ""
  suggestions: tuple[PlaceCandidate, ...] = ()

  @model_validator(mode="after")
  def check_consistency(self) -> NavigationState:
    """Validate the cross-field invariants."""
    if self.instructions and self.route is None:
      raise ValueError("Instructions require a route")
    if not self.search_query.strip() and self.suggestions:
      raise ValueError("Suggestions require a non-empty search query")
    return self

  @property
  def phase(self) -> NavigationPhase:
    if self.current_position is None:
      return NavigationPhase.IDLE
    if self.route is not None and len(self.route.polyline) >= 2:
      return NavigationPhase.ROUTED
    return NavigationPhase.POSITIONED

  @property
  def polyline(self) -> tuple[Coordinate, ...]:
    return self.route.polyline if self.route else ()

  def evolve(self, **changes: object) -> NavigationState:
    """Return a validated copy with the given fields replaced."""
    return NavigationState.model_validate({**dict(self), **changes})
