"""Navigation session and presentation boundary.

Key components:
- NavigationSession: the state machine owning NavigationState
- PresentationAdapter: protocol for renderers of session snapshots
- ConsoleRenderer: rich-based terminal renderer
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
  from nav_assist.navigator.presentation import ConsoleRenderer, PresentationAdapter
  from nav_assist.navigator.session import NavigationSession

__all__ = [
  "ConsoleRenderer",
  "NavigationSession",
  "PresentationAdapter",
]


# Lazy imports keep `import nav_assist.navigator` free of rich/requests
def __getattr__(name: str):
  if name == "NavigationSession":
    from nav_assist.navigator.session import NavigationSession

    return NavigationSession
  if name in ("ConsoleRenderer", "PresentationAdapter"):
    from nav_assist.navigator.presentation import ConsoleRenderer, PresentationAdapter

    return {
      "ConsoleRenderer": ConsoleRenderer,
      "PresentationAdapter": PresentationAdapter,
    }[name]
  raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
