"""
Business-profile and document requirements for the checkout.

Business fields follow a collect -> check -> confirm pattern: the renter
fills the form, ``missing_business_fields`` reports what is still empty, and
the step gate only marks the step complete after an explicit confirm.
"""

import logging
from dataclasses import dataclass
from typing import Any, Callable, Mapping, Optional, Sequence

from booking_engine.schemas.checkout_schema import BusinessInfo, LicenseType, StagedDocument
from booking_engine.schemas.listing_schema import RequiredDocument

logger = logging.getLogger(__name__)

DOCUMENT_TYPE_LABELS: dict[str, str] = {
    "drivers_license": "Driver's License / Government ID",
    "business_license": "Business License",
    "food_handler_certificate": "Food Handler's Certificate",
    "safeserve_certification": "SafeServe / Food Safety Certification",
    "health_department_permit": "Health Department Permit",
    "commercial_liability_insurance": "Commercial Liability Insurance",
    "vehicle_insurance": "Vehicle Insurance",
    "certificate_of_insurance": "Certificate of Insurance (COI)",
    "work_history_proof": "Relevant Work History Proof",
    "prior_experience_proof": "Prior Event/Kitchen Experience",
}


def _always(info: BusinessInfo) -> bool:
    return True


def _has_text(value: Any) -> bool:
    if value is None:
        return False
    if isinstance(value, str):
        return bool(value.strip())
    return True


@dataclass(frozen=True)
class FieldRequirement:
    """One business field the renter must fill before the step can complete."""

    name: str
    display_name: str
    applies: Callable[[BusinessInfo], bool] = _always


BUSINESS_FIELDS: list[FieldRequirement] = [
    FieldRequirement(name="license_type", display_name="license type"),
    FieldRequirement(
        name="license_type_other",
        display_name="license type description",
        applies=lambda info: info.license_type == LicenseType.OTHER,
    ),
    FieldRequirement(name="employee_count", display_name="number of employees"),
    FieldRequirement(name="intended_use", display_name="intended use"),
    FieldRequirement(name="cuisine_type", display_name="cuisine type"),
]


def missing_business_fields(info: Optional[BusinessInfo]) -> list[FieldRequirement]:
    """Required business fields that are still empty."""
    if info is None:
        return [f for f in BUSINESS_FIELDS if f.applies is _always]
    return [
        f for f in BUSINESS_FIELDS
        if f.applies(info) and not _has_text(getattr(info, f.name))
    ]


def is_business_info_complete(info: Optional[BusinessInfo]) -> bool:
    return info is not None and not missing_business_fields(info)


def business_info_payload(info: Optional[BusinessInfo]) -> Optional[dict[str, Any]]:
    """Flat dict stored on the reservation, or None when nothing was collected."""
    if info is None:
        return None
    return info.model_dump(mode="json")


def document_label(document: RequiredDocument) -> str:
    if document.label:
        return document.label
    return DOCUMENT_TYPE_LABELS.get(
        document.document_type,
        document.document_type.replace("_", " ").title(),
    )


def missing_documents(
    required: Sequence[RequiredDocument],
    staged: Mapping[str, StagedDocument],
) -> list[RequiredDocument]:
    """Required documents with no staged file yet."""
    return [doc for doc in required if doc.document_type not in staged]


def all_documents_staged(
    required: Sequence[RequiredDocument],
    staged: Mapping[str, StagedDocument],
) -> bool:
    missing = missing_documents(required, staged)
    if missing:
        logger.debug("Documents still missing: %s", [document_label(d) for d in missing])
    return not missing
