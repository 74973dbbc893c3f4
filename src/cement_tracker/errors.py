"""Failure kinds raised by the delivery tracking core.

Every operation either completes fully or raises one of these; the HTTP layer
maps them to status codes in ``main.create_app``.
"""

from __future__ import annotations


class TrackingError(Exception):
    """Base class for all delivery tracking failures."""

    kind = "tracking_error"


class ValidationError(TrackingError):
    """A required field is missing or malformed."""

    kind = "validation_error"

    def __init__(self, message: str, fields: dict[str, str] | None = None) -> None:
        super().__init__(message)
        self.fields = fields or {}


class Unauthenticated(TrackingError):
    """The identity provider reported no acting user."""

    kind = "unauthenticated"


class NotFound(TrackingError):
    kind = "not_found"


class DeliveryNotFound(NotFound):
    def __init__(self, reference: str) -> None:
        super().__init__(f"Delivery '{reference}' not found.")
        self.reference = reference


class CustomerNotFound(NotFound):
    def __init__(self, customer_id: str) -> None:
        super().__init__(f"Customer '{customer_id}' not found.")
        self.customer_id = customer_id


class InvalidTransition(TrackingError):
    """The requested status change is not in the transition table."""

    kind = "invalid_transition"

    def __init__(self, current: str, requested: str) -> None:
        super().__init__(f"Cannot change delivery status from '{current}' to '{requested}'.")
        self.current = current
        self.requested = requested


class MissingDestination(TrackingError):
    """Progress was requested for a delivery without destination coordinates."""

    kind = "missing_destination"


class GeocodingError(TrackingError):
    """Base class for geocoding provider failures."""

    kind = "geocoding_error"


class AddressNotFound(GeocodingError, NotFound):
    """The provider returned no candidate for the query."""

    kind = "address_not_found"

    def __init__(self, query: str) -> None:
        super().__init__(f"No geocoding result for '{query}'.")
        self.query = query


class ProviderError(GeocodingError):
    """Transport, authentication, timeout or malformed-response failure."""

    kind = "provider_error"


class DuplicateRecord(TrackingError):
    """A record store rejected an insert on a unique column."""

    kind = "duplicate_record"

    def __init__(self, kind: str, column: str | None = None) -> None:
        super().__init__(f"Duplicate {kind} record" + (f" on '{column}'." if column else "."))
        self.record_kind = kind
        self.column = column
