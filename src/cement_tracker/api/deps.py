"""API dependencies: record store, geocoder, identity and the services built from them."""

from __future__ import annotations

import logging
from functools import lru_cache
from typing import Optional

from fastapi import Depends, Header

from ..config import settings
from ..db.auth import IdentityProvider, SupabaseIdentity
from ..db.supabase import get_supabase_client
from ..persistence.store import InMemoryRecordStore, RecordStore
from ..persistence.supabase_store import SupabaseRecordStore
from ..services.geocoding import GeoResolver, MapboxGeocoder
from ..services.geospatial import DistanceEstimator
from ..services.lifecycle import DeliveryLifecycle
from ..services.public_view import PublicTrackingView

logger = logging.getLogger(__name__)


@lru_cache()
def get_record_store() -> RecordStore:
    client = get_supabase_client()
    if client is None:
        logger.warning("Supabase not configured - deliveries are kept in memory only")
        return InMemoryRecordStore()
    return SupabaseRecordStore(client)


@lru_cache()
def get_geocoder() -> Optional[GeoResolver]:
    if not settings.mapbox_token:
        logger.warning("Mapbox token not configured - geocoding is unavailable")
        return None
    return MapboxGeocoder()


def get_estimator() -> DistanceEstimator:
    return DistanceEstimator(settings.average_speed_kmh)


def get_identity(authorization: Optional[str] = Header(default=None)) -> IdentityProvider:
    token = None
    if authorization and authorization.lower().startswith("bearer "):
        token = authorization[7:].strip() or None
    return SupabaseIdentity(token)


def get_lifecycle(
    store: RecordStore = Depends(get_record_store),
    geocoder: Optional[GeoResolver] = Depends(get_geocoder),
    identity: IdentityProvider = Depends(get_identity),
    estimator: DistanceEstimator = Depends(get_estimator),
) -> DeliveryLifecycle:
    return DeliveryLifecycle(store, geocoder=geocoder, identity=identity, estimator=estimator)


def get_public_view(
    store: RecordStore = Depends(get_record_store),
    geocoder: Optional[GeoResolver] = Depends(get_geocoder),
    estimator: DistanceEstimator = Depends(get_estimator),
) -> PublicTrackingView:
    return PublicTrackingView(store, geocoder=geocoder, estimator=estimator)
