"""Mad King RPG character-sheet backend."""

__version__ = "1.0.0"
