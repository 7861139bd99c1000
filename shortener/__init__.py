"""URL shortener service: in-memory link store with JSON snapshot persistence."""

__version__ = "1.0.0"
