"""Real-time exercise form analysis from pose landmarks."""

__version__ = "0.1.0"
