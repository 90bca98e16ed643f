"""Task lifecycle and time accounting with a live countdown."""

__version__ = "0.1.0"
