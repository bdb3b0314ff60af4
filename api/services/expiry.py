"""
Expiry Calculator.

Turns a document's expiry date into a signed day offset from a reference
date and classifies it as expired, expiring soon, or valid.
"""

from datetime import date
from typing import Dict, List, Optional, Type

from config import settings
from models.eligibility import DocumentStatus, ExpiryStatus
from models.resource import FleetResource
from services.document_requirements import get_requirement_table
from utils.dates import DateLike, parse_date


def days_until(expiry: DateLike, reference: DateLike) -> Optional[int]:
    """
    Whole days from the reference date to the expiry date.

    Both values are reduced to calendar dates first, so an expiry on the
    reference day is exactly 0 regardless of time of day.

    Args:
        expiry: Document expiry; None means no expiry is tracked
        reference: Date the check is made against

    Returns:
        Signed day count (negative once expired), or None without an expiry
    """
    expiry_date = parse_date(expiry)
    if expiry_date is None:
        return None
    reference_date = parse_date(reference)
    if reference_date is None:
        raise ValueError("A reference date is required")
    return (expiry_date - reference_date).days


def classify(days: Optional[int], threshold: Optional[int] = None) -> Optional[ExpiryStatus]:
    """Bucket a day offset: expired below 0, expiring soon up to the threshold, valid after"""
    if days is None:
        return None
    if threshold is None:
        threshold = settings.expiring_soon_days
    if days < 0:
        return ExpiryStatus.EXPIRED
    if days <= threshold:
        return ExpiryStatus.EXPIRING_SOON
    return ExpiryStatus.VALID


def document_statuses(
    resource: FleetResource,
    reference: Optional[date] = None,
    threshold: Optional[int] = None
) -> List[DocumentStatus]:
    """Annotate each required document of a resource for listing views"""
    table = get_requirement_table()
    reference = reference or date.today()
    documents = resource.documents
    statuses = []
    for kind in table.documents_for(resource.kind, resource.service_type):
        expiry = documents.get(kind)
        days = days_until(expiry, reference)
        statuses.append(DocumentStatus(
            kind=kind,
            label=table.label(kind),
            expiry=expiry,
            days=days,
            status=classify(days, threshold),
            badge=badge_text(days, threshold)
        ))
    return statuses


def badge_text(days: Optional[int], threshold: Optional[int] = None) -> str:
    """Short Spanish badge text shown next to an expiry date"""
    if threshold is None:
        threshold = settings.expiring_soon_days
    if days is None:
        return "Sin fecha"
    if days < 0:
        return "Vencido"
    if days == 0:
        return "Vence hoy"
    if days == 1:
        return "Vence mañana"
    if days <= threshold:
        return f"{days} días"
    return "Vigente"


def annotate_documents(record: Dict, model_cls: Type[FleetResource], reference: Optional[date] = None) -> Dict:
    """Return a stored resource with its required-document statuses attached"""
    resource = model_cls(**record)
    statuses = document_statuses(resource, reference)
    return {**record, "documentos": [s.model_dump(mode="json") for s in statuses]}
