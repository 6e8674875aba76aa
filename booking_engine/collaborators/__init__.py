from booking_engine.collaborators.base import (
    AvailabilitySource,
    CheckoutCollaborators,
    DocumentStager,
    PaymentGateway,
    ReservationStore,
)
from booking_engine.collaborators.memory import (
    InMemoryAvailabilitySource,
    InMemoryDocumentStager,
    InMemoryPaymentGateway,
    InMemoryReservationStore,
)

__all__ = [
    "AvailabilitySource",
    "CheckoutCollaborators",
    "DocumentStager",
    "InMemoryAvailabilitySource",
    "InMemoryDocumentStager",
    "InMemoryPaymentGateway",
    "InMemoryReservationStore",
    "PaymentGateway",
    "ReservationStore",
]
