import logging
from datetime import date
from typing import Dict, List, Optional, Tuple
from fastapi import APIRouter, Depends, HTTPException, Query, status

from models.driver import Driver
from models.eligibility import SubmissionError, SubmissionErrorKind
from models.service import Service
from models.tractor import Tractor
from models.trailer import Trailer
from models.trip import Trip, TripCandidate, TripState
from repositories.driver_repository import DriverRepository
from repositories.service_repository import ServiceRepository
from repositories.tractor_repository import TractorRepository
from repositories.trailer_repository import TrailerRepository
from repositories.trip_repository import TripRepository
from services.availability import partition
from services.feasibility import evaluate
from services.trip_submission import check_mutable, submit, validate_destination_ids, validate_structure
from utils.permissions import Permission, require_permission

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/trips",
    tags=["trips"],
    responses={404: {"description": "Trip not found"}}
)
repo = TripRepository()
driver_repo = DriverRepository()
tractor_repo = TractorRepository()
trailer_repo = TrailerRepository()
service_repo = ServiceRepository()

# Upper bound on resources loaded for trip selectors
SELECTOR_LIMIT = 1000


def _load(repository, model_cls, entity_id: Optional[int], name: str):
    if not entity_id:
        return None
    record = repository.get_by_id(entity_id)
    if not record:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"{name} {entity_id} not found"
        )
    return model_cls(**record)


def resolve_resources(candidate: TripCandidate) -> Tuple[
    Optional[Driver], Optional[Tractor], Optional[Trailer], Optional[Service]
]:
    """Load the resources selected on a candidate; unselected ones are None"""
    return (
        _load(driver_repo, Driver, candidate.driver_id, "Driver"),
        _load(tractor_repo, Tractor, candidate.tractor_id, "Tractor"),
        _load(trailer_repo, Trailer, candidate.trailer_id, "Trailer"),
        _load(service_repo, Service, candidate.service_id, "Service"),
    )


def submission_http_error(error: SubmissionError, warnings: List[str] = None) -> HTTPException:
    """Map a refused submission onto an HTTP error"""
    if error.kind == SubmissionErrorKind.IMMUTABLE:
        status_code = status.HTTP_409_CONFLICT
    else:
        status_code = status.HTTP_422_UNPROCESSABLE_ENTITY
    detail = error.model_dump(mode="json")
    detail["warnings"] = list(warnings or [])
    return HTTPException(status_code=status_code, detail=detail)


def _get_or_404(trip_id: int) -> Dict:
    trip = repo.get_by_id(trip_id)
    if not trip:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Trip {trip_id} not found"
        )
    return trip


def _save(candidate: TripCandidate, trip_id: Optional[int] = None) -> Dict:
    existing_state = None
    known_destination_ids = set()
    if trip_id is not None:
        stored = _get_or_404(trip_id)
        existing_state = TripState.parse(stored.get("estado") or TripState.PROGRAMMED)
        known_destination_ids = {d["id"] for d in stored.get("destinos") or [] if d.get("id") is not None}

    # Refuse before touching the resources; submit() repeats these checks
    error = (
        check_mutable(existing_state)
        or validate_structure(candidate)
        or validate_destination_ids(candidate, known_destination_ids)
    )
    if error is not None:
        raise submission_http_error(error)

    driver, tractor, trailer, service = resolve_resources(candidate)
    report = evaluate(candidate, driver, tractor, trailer, service)

    result = submit(candidate, report, repo, existing_state=existing_state, trip_id=trip_id,
                    known_destination_ids=known_destination_ids)
    if not result.ok:
        raise submission_http_error(result.error, result.warnings)
    if not result.trip:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to save trip"
        )
    return {"trip": result.trip, "warnings": result.warnings}


@router.get("/availability", response_model=Dict,
            dependencies=[Depends(require_permission(Permission.CREATE_VIAJES))])
async def get_availability(
    service_id: Optional[int] = Query(None, description="Restrict tractors and trailers to this service"),
    reference_date: Optional[date] = Query(None, description="Date expiries are evaluated against")
):
    """
    Usable and blocked resources for the trip selectors.

    Drivers carry no service type and are never filtered by service.
    """
    service = _load(service_repo, Service, service_id, "Service")

    drivers = [Driver(**d) for d in driver_repo.get_active()]
    tractors = [Tractor(**t) for t in tractor_repo.get_all(limit=SELECTOR_LIMIT)]
    trailers = [Trailer(**t) for t in trailer_repo.get_all(limit=SELECTOR_LIMIT)]

    return {
        "reference_date": (reference_date or date.today()).isoformat(),
        "drivers": partition(drivers, reference_date=reference_date).model_dump(mode="json"),
        "tractors": partition(tractors, service, reference_date).model_dump(mode="json"),
        "trailers": partition(trailers, service, reference_date).model_dump(mode="json"),
    }


@router.post("/evaluate", response_model=Dict,
             dependencies=[Depends(require_permission(Permission.CREATE_VIAJES))])
async def evaluate_trip(candidate: TripCandidate):
    """Check the selected resources' documents against the departure date"""
    driver, tractor, trailer, service = resolve_resources(candidate)
    report = evaluate(candidate, driver, tractor, trailer, service)
    return {
        "errors": report.errors,
        "warnings": report.warnings,
        "blocks_submission": report.blocks_submission
    }


@router.post("/", response_model=Dict, status_code=status.HTTP_201_CREATED,
             dependencies=[Depends(require_permission(Permission.CREATE_VIAJES))])
async def create_trip(candidate: TripCandidate):
    """Create a programmed trip through the submission guard"""
    return _save(candidate)


@router.get("/", response_model=List[Dict],
            dependencies=[Depends(require_permission(Permission.VIEW_VIAJES))])
async def get_trips(
    skip: int = Query(0, ge=0, description="Number of items to skip"),
    limit: int = Query(100, ge=1, le=1000, description="Number of items to return"),
    estado: Optional[TripState] = Query(None, description="Filter by trip state"),
    chofer_id: Optional[int] = Query(None, description="Filter by driver")
):
    """Get trips with their destinations, newest departure first"""
    return repo.get_all(skip=skip, limit=limit, filters={"estado": estado, "chofer_id": chofer_id})


@router.get("/{trip_id}", response_model=Dict,
            dependencies=[Depends(require_permission(Permission.VIEW_VIAJES))])
async def get_trip(trip_id: int):
    """Get a trip by id"""
    return _get_or_404(trip_id)


@router.get("/{trip_id}/candidate", response_model=TripCandidate,
            dependencies=[Depends(require_permission(Permission.EDIT_VIAJES))])
async def get_trip_candidate(trip_id: int):
    """Load a stored trip as an editable candidate"""
    return TripCandidate.from_trip(Trip(**_get_or_404(trip_id)))


@router.put("/{trip_id}", response_model=Dict,
            dependencies=[Depends(require_permission(Permission.EDIT_VIAJES))])
async def update_trip(trip_id: int, candidate: TripCandidate):
    """Replace a trip's fields and destinations through the submission guard"""
    return _save(candidate, trip_id)


@router.delete("/{trip_id}", status_code=status.HTTP_204_NO_CONTENT,
               dependencies=[Depends(require_permission(Permission.DELETE_VIAJES))])
async def delete_trip(trip_id: int):
    """Delete a trip that has not been finalized"""
    trip = _get_or_404(trip_id)
    if check_mutable(trip.get("estado")) is not None:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Finalized trips cannot be deleted"
        )

    repo.delete(trip_id)
    logger.info(f"Deleted trip {trip_id}")
    return None
