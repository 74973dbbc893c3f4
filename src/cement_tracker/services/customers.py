"""Customer directory: customers are referenced by deliveries, never owned by them."""

from __future__ import annotations

import logging
import uuid
from typing import Optional

from ..errors import CustomerNotFound, ValidationError
from ..models.domain import Customer
from ..persistence.store import CUSTOMERS, RecordStore
from ..schemas.deliveries import CustomerCreate
from .ledger import Clock, utc_now

logger = logging.getLogger(__name__)


def _clean(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    return value.strip() or None


class CustomerDirectory:
    def __init__(self, store: RecordStore, clock: Clock = utc_now) -> None:
        self.store = store
        self.clock = clock

    def create_customer(self, payload: CustomerCreate) -> Customer:
        name = _clean(payload.name)
        if not name:
            raise ValidationError("Customer name is required.", {"name": "required"})

        customer = Customer(
            id=str(uuid.uuid4()),
            name=name,
            phone=_clean(payload.phone),
            email=_clean(payload.email),
            address=_clean(payload.address),
            created_at=self.clock(),
        )
        stored = self.store.insert(CUSTOMERS, customer.to_record())
        logger.info(f"Created customer {customer.id}")
        return Customer.from_record(stored)

    def get_customer(self, customer_id: str) -> Customer:
        record = self.store.get(CUSTOMERS, customer_id)
        if record is None:
            raise CustomerNotFound(customer_id)
        return Customer.from_record(record)

    def find_customer(self, customer_id: str) -> Optional[Customer]:
        record = self.store.get(CUSTOMERS, customer_id)
        return Customer.from_record(record) if record else None

    def list_customers(self) -> list[Customer]:
        return [Customer.from_record(row) for row in self.store.query(CUSTOMERS, order_by="name")]
