from booking_engine.checkout.guards import CheckoutGuardPipeline, GuardResult
from booking_engine.checkout.requirements import (
    DOCUMENT_TYPE_LABELS,
    is_business_info_complete,
    missing_business_fields,
    missing_documents,
)
from booking_engine.checkout.step_gate import (
    BookingStepGate,
    BookingStepState,
    CheckoutStep,
    StepEntry,
    StepState,
)

__all__ = [
    "BookingStepGate",
    "BookingStepState",
    "CheckoutGuardPipeline",
    "CheckoutStep",
    "DOCUMENT_TYPE_LABELS",
    "GuardResult",
    "StepEntry",
    "StepState",
    "is_business_info_complete",
    "missing_business_fields",
    "missing_documents",
]
