"""Interactive Qt front end for the trajectory viewer."""

from .app import ViewerWindow, run

__all__ = ["ViewerWindow", "run"]
