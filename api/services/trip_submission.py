"""
Trip Submission Guard.

Single entry point between a trip candidate and the trip store. Checks run
in a fixed order and stop at the first failure:

1. a finalized trip is immutable
2. structural fields, fail-fast, including destination ids the trip does not own
3. documentation errors from the eligibility report
4. persistence, with destinations renumbered 1..N

Refusals are returned as ``SubmissionResult.error``; errors raised by the
store propagate unchanged.
"""

import logging
from typing import Dict, Iterable, List, Optional, Protocol

from models.eligibility import EligibilityReport, SubmissionError, SubmissionResult
from models.trip import Destination, TripCandidate, TripState

logger = logging.getLogger(__name__)


class TripPersistence(Protocol):
    """Store the guard delegates to once a candidate is accepted"""

    def create_trip(self, payload: Dict) -> Dict:
        ...

    def update_trip(self, trip_id: int, payload: Dict) -> Optional[Dict]:
        ...


REQUIRED_SELECTIONS = ("driver_id", "tractor_id", "trailer_id", "service_id")


def check_mutable(existing_state: Optional[TripState]) -> Optional[SubmissionError]:
    if existing_state is not None and TripState.parse(existing_state) == TripState.FINALIZED:
        return SubmissionError.immutable()
    return None


def validate_structure(candidate: TripCandidate) -> Optional[SubmissionError]:
    """Return the first structural violation as InvalidField, or None"""
    if not candidate.origin or not candidate.origin.strip():
        return SubmissionError.invalid_field("origin")
    if candidate.departure_date is None:
        return SubmissionError.invalid_field("departure_date")
    for name in REQUIRED_SELECTIONS:
        if not getattr(candidate, name):
            return SubmissionError.invalid_field(name)
    if not candidate.destinations:
        return SubmissionError.invalid_field("destinations")
    for index, destination in enumerate(candidate.destinations):
        if not destination.ubicacion or not destination.ubicacion.strip():
            return SubmissionError.invalid_field(f"destinations[{index}].ubicacion")
    return None


def validate_destination_ids(
    candidate: TripCandidate, known_ids: Iterable[int] = ()
) -> Optional[SubmissionError]:
    """Destinations sent with an id must be ones the stored trip already has"""
    known = set(known_ids)
    for index, destination in enumerate(candidate.destinations):
        if destination.id is not None and destination.id not in known:
            return SubmissionError.unknown_destination(index, destination.id)
    return None


def normalize_destinations(destinations: List[Destination]) -> List[Destination]:
    """Renumber ``orden`` 1..N in list order, closing gaps left by removed entries"""
    return [
        d.model_copy(update={"orden": position, "ubicacion": d.ubicacion.strip()})
        for position, d in enumerate(destinations, start=1)
    ]


def build_trip_payload(candidate: TripCandidate) -> Dict:
    """Map a validated candidate onto the stored trip columns"""
    destinations = normalize_destinations(candidate.destinations)
    return {
        "chofer_id": candidate.driver_id,
        "tractor_id": candidate.tractor_id,
        "semirremolque_id": candidate.trailer_id,
        "servicio_id": candidate.service_id,
        "alcance": candidate.alcance.value,
        "origen": candidate.origin.strip(),
        "fecha_salida": candidate.departure_date.isoformat(),
        "cantidad_destinos": len(destinations),
        "destinos": [d.model_dump() for d in destinations],
    }


def submit(
    candidate: TripCandidate,
    report: EligibilityReport,
    persistence: TripPersistence,
    existing_state: Optional[TripState] = None,
    trip_id: Optional[int] = None,
    known_destination_ids: Iterable[int] = ()
) -> SubmissionResult:
    """
    Validate a trip candidate and create or update the trip.

    Args:
        candidate: The trip being submitted
        report: Eligibility report computed for this candidate
        persistence: Store that creates/updates trip records
        existing_state: State of the stored trip when editing
        trip_id: Id of the stored trip when editing
        known_destination_ids: Destination ids the stored trip already has

    Returns:
        SubmissionResult with the stored trip, or with the refusal reason
    """
    error = check_mutable(existing_state)
    if error is None:
        error = validate_structure(candidate)
    if error is None:
        error = validate_destination_ids(candidate, known_destination_ids)
    if error is None and report.errors:
        error = SubmissionError.documentation_expired(report.errors)

    if error is not None:
        logger.info(f"Trip submission refused: {error.kind.value} {error.field or ''}".rstrip())
        return SubmissionResult(error=error, warnings=report.warnings)

    payload = build_trip_payload(candidate)
    if trip_id is None:
        trip = persistence.create_trip(payload)
        logger.info(f"Created trip {trip.get('id') if trip else None} with {payload['cantidad_destinos']} destinations")
    else:
        trip = persistence.update_trip(trip_id, payload)
        logger.info(f"Updated trip {trip_id}")

    return SubmissionResult(trip=trip, warnings=report.warnings)
