"""Routing profile and session configuration models.

This module provides Pydantic models for the static routing profile sent
with every route request and the NavigationConfig handed to a
NavigationSession at construction. Both can be loaded from YAML.
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, Annotated, Any, Literal

import yaml
from pydantic import BaseModel, ConfigDict, Field

if TYPE_CHECKING:
  from nav_assist.settings import Settings


class RoutingProfile(BaseModel):
  """Vehicle mode and costing options applied to every route request."""

  model_config = ConfigDict(extra="forbid", frozen=True)

  costing: Literal["auto"] = "auto"
  use_tolls: Annotated[
    float, Field(default=1.0, ge=0, le=1, description="Preference for toll roads")
  ]
  use_highways: Annotated[
    float, Field(default=0.0, ge=0, le=1, description="Preference for highways")
  ]
  units: Literal["miles", "kilometers"] = "miles"

  def to_request_options(self) -> dict[str, Any]:
    """Render the costing and directions members of a route request body."""
    return {
      "costing": self.costing,
      "costing_options": {
        self.costing: {
          "use_tolls": self.use_tolls,
          "use_highways": self.use_highways,
        }
      },
      "directions_options": {"units": self.units},
    }


DEFAULT_PROFILE = RoutingProfile()


class PositionOptions(BaseModel):
  """One-shot position query options."""

  model_config = ConfigDict(extra="forbid", frozen=True)

  high_accuracy: bool = True
  timeout_s: Annotated[float, Field(default=15.0, gt=0)]
  max_age_s: Annotated[
    float, Field(default=10.0, ge=0, description="Oldest cached fix accepted")
  ]


class NavigationConfig(BaseModel):
  """Everything a NavigationSession needs, passed explicitly.

  The config is immutable; build a new one to change the service endpoint,
  key or timing.
  """

  model_config = ConfigDict(extra="forbid", frozen=True)

  base_url: str = "https://api.stadiamaps.com"
  api_key: str = Field(default="", repr=False, description="Static service key")
  profile: RoutingProfile = Field(default_factory=RoutingProfile)
  refresh_interval_s: Annotated[float, Field(default=10.0, gt=0)]
  request_timeout_s: Annotated[float, Field(default=10.0, gt=0)]
  refresh_target: Literal["route_end", "destination"] = Field(
    default="route_end",
    description="Where periodic refreshes route to: last polyline point or "
    "the originally selected destination",
  )
  position: PositionOptions = Field(default_factory=PositionOptions)

  @classmethod
  def from_settings(cls, settings: Settings, **overrides: Any) -> NavigationConfig:
    """Build a config from application settings.

    Args:
        settings: Loaded Settings instance
        **overrides: Field values taking precedence over settings

    Returns:
        Validated NavigationConfig
    """
    data: dict[str, Any] = {
      "base_url": settings.stadia_base_url,
      "api_key": settings.stadia_api_key or "",
      "refresh_interval_s": settings.refresh_interval_s,
      "request_timeout_s": settings.request_timeout_s,
    }
    data.update(overrides)
    return cls.model_validate(data)

  @classmethod
  def from_yaml(cls, yaml_content: str, **overrides: Any) -> NavigationConfig:
    """Parse and validate a config from YAML string.

    Raises:
        ValueError: If YAML is invalid or doesn't match schema
    """
    try:
      data = yaml.safe_load(yaml_content)
    except yaml.YAMLError as e:
      raise ValueError(f"Invalid YAML syntax: {e}") from e

    if data is None:
      data = {}
    if not isinstance(data, dict):
      raise ValueError("Navigation config must be a YAML mapping")

    data.update(overrides)
    return cls.model_validate(data)

  @classmethod
  def from_yaml_file(cls, path: Path | str, **overrides: Any) -> NavigationConfig:
    """Load and validate a config from a YAML file.

    Raises:
        FileNotFoundError: If file doesn't exist
        ValueError: If YAML is invalid or doesn't match schema
    """
    path = Path(path)
    if not path.exists():
      raise FileNotFoundError(f"Navigation config not found: {path}")

    return cls.from_yaml(path.read_text(encoding="utf-8"), **overrides)

  def to_yaml(self) -> str:
    """Serialize to YAML, leaving out the API key."""
    data = self.model_dump(exclude={"api_key"}, exclude_defaults=True)
    return yaml.safe_dump(data, default_flow_style=False, sort_keys=False)


def format_validation_errors(errors: list[Any]) -> str:
  """Format Pydantic validation errors for user-friendly display."""
  lines = ["Invalid navigation configuration:", ""]
  for error in errors:
    loc = ".".join(str(x) for x in error["loc"])
    lines.append(f"  - {loc}: {error['msg']}")
  return "\n".join(lines)
