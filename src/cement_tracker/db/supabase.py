"""Supabase client factory shared by the record store and identity lookups."""

import logging
from functools import lru_cache

from supabase import Client, ClientOptions, create_client

from ..config import settings

logger = logging.getLogger(__name__)


@lru_cache()
def get_supabase_client() -> Client | None:
    """Cached client for the configured project, or None without credentials.

    Creating the client does not contact the server; the first query does.
    """
    if not settings.supabase_url or not settings.supabase_key:
        logger.warning("Supabase credentials not configured (missing CT_SUPABASE_URL or CT_SUPABASE_KEY)")
        return None

    options = ClientOptions(
        schema=settings.supabase_schema,
        postgrest_client_timeout=settings.supabase_timeout_seconds,
    )
    try:
        client = create_client(settings.supabase_url, settings.supabase_key, options=options)
    except Exception as e:
        logger.error(f"Failed to create Supabase client for {settings.supabase_url}: {e}")
        return None
    logger.info(f"Supabase client ready (schema '{settings.supabase_schema}')")
    return client
