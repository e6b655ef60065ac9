"""GeoConnect — map-synchronized search for location-tagged posts."""

__version__ = "0.1.0"
