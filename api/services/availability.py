"""
Resource Availability Filter.

Splits already-loaded drivers, tractors or trailers into usable and blocked
lists for populating trip selectors. Pure: no I/O, input order preserved.
"""

from datetime import date
from typing import Iterable, Optional

from models.eligibility import BlockedResource, ExpiryStatus, PartitionResult
from models.resource import FleetResource, PhysicalState
from models.service import Service
from services.document_requirements import get_requirement_table
from services.expiry import classify, days_until


def matches_service(resource: FleetResource, service: Service) -> bool:
    """Case-insensitive service match; resources without a service type never match"""
    if not resource.service_type:
        return False
    return resource.service_type.strip().lower() == service.nombre.strip().lower()


def blocking_reason(resource: FleetResource, reference_date: date) -> Optional[str]:
    """
    Reason a resource cannot be assigned on the reference date.

    The physical state is checked first and short-circuits; otherwise the
    first expired required document (table order) gives the reason.

    Args:
        resource: Driver, tractor or trailer
        reference_date: Date expiries are evaluated against

    Returns:
        The blocking reason, or None when the resource is usable
    """
    if resource.physical_state != PhysicalState.AVAILABLE:
        return resource.physical_state.reason

    table = get_requirement_table()
    documents = resource.documents
    for kind in table.documents_for(resource.kind, resource.service_type):
        days = days_until(documents.get(kind), reference_date)
        if classify(days) == ExpiryStatus.EXPIRED:
            return f"{table.label(kind)} expired"
    return None


def partition(
    resources: Iterable[FleetResource],
    service: Optional[Service] = None,
    reference_date: Optional[date] = None
) -> PartitionResult:
    """
    Partition resources into usable and blocked.

    Args:
        resources: Resources of a single kind, as loaded by the caller
        service: When given, only resources of this service type are kept
        reference_date: Date expiries are evaluated against (default today)

    Returns:
        PartitionResult with usable resources and blocked (resource, reason) pairs
    """
    reference_date = reference_date or date.today()
    result = PartitionResult()

    for resource in resources:
        if service is not None and not matches_service(resource, service):
            continue

        reason = blocking_reason(resource, reference_date)
        if reason is None:
            result.usable.append(resource)
        else:
            result.blocked.append(BlockedResource(resource=resource, reason=reason))

    return result
