"""Geocoding services."""

from .mapbox_client import GeoResolver, MapboxGeocoder, check_health

__all__ = ["GeoResolver", "MapboxGeocoder", "check_health"]
