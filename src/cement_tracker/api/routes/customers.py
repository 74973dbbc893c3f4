"""Customer endpoints."""

from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends, status

from ...schemas.deliveries import CustomerCreate, CustomerModel
from ...services.lifecycle import DeliveryLifecycle
from ..deps import get_lifecycle

router = APIRouter(prefix="/customers", tags=["customers"])


@router.post("", response_model=CustomerModel, status_code=status.HTTP_201_CREATED)
def create_customer(payload: CustomerCreate, lifecycle: DeliveryLifecycle = Depends(get_lifecycle)) -> CustomerModel:
    return CustomerModel.from_domain(lifecycle.customers.create_customer(payload))


@router.get("", response_model=List[CustomerModel], status_code=status.HTTP_200_OK)
def list_customers(lifecycle: DeliveryLifecycle = Depends(get_lifecycle)) -> List[CustomerModel]:
    return [CustomerModel.from_domain(customer) for customer in lifecycle.customers.list_customers()]
