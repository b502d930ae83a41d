"""FocusZone - focus timeline and break planner."""

__version__ = "0.1.0"
