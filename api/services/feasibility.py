"""
Trip Feasibility Checker.

Listing views ask "is this resource usable today"; trip creation asks "will
it still be valid on the day the trip departs". This module answers the
second question by re-running the expiry calculator with the departure date
as reference and a tighter warning window.
"""

import logging
from typing import Optional

from config import settings
from models.driver import Driver
from models.eligibility import EligibilityReport
from models.resource import FleetResource
from models.service import Service
from models.tractor import Tractor
from models.trailer import Trailer
from models.trip import TripCandidate
from services.document_requirements import get_requirement_table
from services.expiry import days_until

logger = logging.getLogger(__name__)


def _check_resource(
    report: EligibilityReport,
    resource: FleetResource,
    service_type: Optional[str],
    departure,
    window: int
) -> None:
    table = get_requirement_table()
    prefix = resource.kind.display
    documents = resource.documents

    for kind in table.documents_for(resource.kind, service_type):
        days = days_until(documents.get(kind), departure)
        if days is None or days > window:
            continue

        label = table.label(kind)
        if days < 0:
            report.errors.append(f"{prefix}: {label} will be EXPIRED on the departure date.")
        elif days == 0:
            report.warnings.append(f"{prefix}: {label} expires the same day as departure.")
        else:
            report.warnings.append(f"{prefix}: {label} expires {days} day(s) after departure.")


def evaluate(
    candidate: TripCandidate,
    driver: Optional[Driver],
    tractor: Optional[Tractor],
    trailer: Optional[Trailer],
    service: Optional[Service] = None,
    warning_days: Optional[int] = None
) -> EligibilityReport:
    """
    Check every required document of the selected resources against the
    trip's departure date.

    Messages are produced in the order driver, tractor, trailer and, within
    a resource, in requirement-table order. The trailer's documents follow
    the trip's service; the trailer's own service type is only used when no
    service is given.

    Args:
        candidate: Trip being created or edited
        driver: Selected driver, or None if not selected yet
        tractor: Selected tractor, or None
        trailer: Selected trailer, or None
        service: The trip's service
        warning_days: Warning window after departure (default from settings)

    Returns:
        EligibilityReport with blocking errors and informational warnings
    """
    report = EligibilityReport()
    if candidate.departure_date is None:
        return report

    window = settings.departure_warning_days if warning_days is None else warning_days
    departure = candidate.departure_date

    if driver is not None:
        _check_resource(report, driver, None, departure, window)
    if tractor is not None:
        _check_resource(report, tractor, tractor.service_type, departure, window)
    if trailer is not None:
        service_type = service.nombre if service is not None else trailer.service_type
        _check_resource(report, trailer, service_type, departure, window)

    if report.errors:
        logger.info(
            f"Trip departing {departure.date().isoformat()} has {len(report.errors)} "
            f"documentation error(s)"
        )
    return report
