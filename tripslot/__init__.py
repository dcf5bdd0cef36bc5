"""tripslot: constraint-based day-scheduling engine for travel itineraries."""

__version__ = "1.0.0"
