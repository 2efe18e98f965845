"""Link health monitoring and preview metadata cache."""

__version__ = "0.1.0"
