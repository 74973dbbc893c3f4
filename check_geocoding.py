#!/usr/bin/env python3
"""Script to verify Mapbox geocoding connectivity."""

import sys
from pathlib import Path

project_root = Path(__file__).parent
sys.path.insert(0, str(project_root / "src"))

from cement_tracker.config import settings
from cement_tracker.errors import GeocodingError
from cement_tracker.services.geocoding import MapboxGeocoder
from cement_tracker.services.geospatial import format_distance, haversine_km


def main():
    print("=" * 60)
    print("Geocoding Connection Test")
    print("=" * 60)
    print()

    print("1. Checking geocoding configuration...")
    if not settings.mapbox_token:
        print("   [ERROR] Mapbox token is not configured")
        print("   Please set CT_MAPBOX_TOKEN in your .env file")
        return 1
    print(f"   [OK] Base URL: {settings.mapbox_base_url}")
    print(f"   [OK] Country/language hints: {settings.geocoding_country}/{settings.geocoding_language}")
    print()

    geocoder = MapboxGeocoder()

    print("2. Testing forward geocoding...")
    try:
        origin = geocoder.forward("Av. Paulista, 1000, São Paulo")
        destination = geocoder.forward("Rua Augusta, 500, São Paulo")
    except GeocodingError as e:
        print(f"   [ERROR] {type(e).__name__}: {e}")
        return 1
    print(f"   [OK] {origin.normalized_address} -> ({origin.latitude:.6f}, {origin.longitude:.6f})")
    print(f"   [OK] {destination.normalized_address} -> ({destination.latitude:.6f}, {destination.longitude:.6f})")
    distance = haversine_km(origin.latitude, origin.longitude, destination.latitude, destination.longitude)
    print(f"   [OK] Straight-line distance: {format_distance(distance)}")
    print()

    print("3. Testing reverse geocoding...")
    try:
        address = geocoder.reverse(origin.latitude, origin.longitude)
    except GeocodingError as e:
        print(f"   [ERROR] {type(e).__name__}: {e}")
        return 1
    print(f"   [OK] ({origin.latitude:.6f}, {origin.longitude:.6f}) -> {address}")
    print()

    print("=" * 60)
    print("[SUCCESS] Geocoding provider is connected and working!")
    print("=" * 60)
    return 0


if __name__ == "__main__":
    sys.exit(main())
