"""Record store backed by Supabase (PostgREST)."""

from __future__ import annotations

import logging
from typing import Any, Mapping, Optional

from postgrest.exceptions import APIError
from supabase import Client

from ..db.supabase import get_supabase_client
from ..errors import DuplicateRecord

logger = logging.getLogger(__name__)

UNIQUE_VIOLATION = "23505"


class SupabaseRecordStore:
    def __init__(self, client: Client | None = None) -> None:
        self.client = client or get_supabase_client()
        if self.client is None:
            raise ConnectionError(
                "Supabase not configured. Set CT_SUPABASE_URL and CT_SUPABASE_KEY environment variables."
            )

    def get(self, kind: str, record_id: str) -> Optional[dict]:
        response = self.client.table(kind).select("*").eq("id", record_id).limit(1).execute()
        rows = response.data or []
        return rows[0] if rows else None

    def query(
        self,
        kind: str,
        filters: Optional[Mapping[str, Any]] = None,
        order_by: Optional[str] = None,
        descending: bool = False,
        limit: Optional[int] = None,
    ) -> list[dict]:
        builder = self.client.table(kind).select("*")
        for column, value in (filters or {}).items():
            builder = builder.eq(column, value)
        if order_by:
            builder = builder.order(order_by, desc=descending)
        if limit is not None:
            builder = builder.limit(limit)
        response = builder.execute()
        return list(response.data or [])

    def insert(self, kind: str, record: dict) -> dict:
        try:
            response = self.client.table(kind).insert(record).execute()
        except APIError as exc:
            if exc.code == UNIQUE_VIOLATION:
                logger.info(f"Unique violation inserting into {kind}: {exc.message}")
                raise DuplicateRecord(kind) from exc
            raise
        rows = response.data or []
        return rows[0] if rows else dict(record)

    def update(self, kind: str, record_id: str, patch: Mapping[str, Any]) -> Optional[dict]:
        response = self.client.table(kind).update(dict(patch)).eq("id", record_id).execute()
        rows = response.data or []
        return rows[0] if rows else None
