"""Client records backend with address geocoding and navigation links."""

__version__ = "0.1.0"
