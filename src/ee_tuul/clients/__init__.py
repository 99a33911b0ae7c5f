"""HTTP clients for weather data sources."""

from .emhi import EMHIClient, extract_entries

__all__ = [
    "EMHIClient",
    "extract_entries",
]
