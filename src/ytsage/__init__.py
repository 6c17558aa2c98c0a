"""ytsage - resilient AI analysis of YouTube videos."""

__version__ = "0.1.0"
