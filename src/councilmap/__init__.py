"""Council boundary to status-catalog matching and map styling."""

__version__ = "0.1.0"
