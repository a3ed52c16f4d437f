"""Generator module for creating block puzzles."""

from .generator import LevelGenerator

__all__ = ["LevelGenerator"]
