"""Falling-block puzzle engine with a heuristic AI and two-board battles."""

__version__ = "0.1.0"
