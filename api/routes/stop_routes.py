from typing import Dict
from fastapi import APIRouter, Depends, HTTPException, status

from models.stop import StartTripRequest, StopRequest
from services.stop_tracking import StopTracker, StopTrackingError, TripNotFoundError, arrival_progress
from utils.permissions import Permission, require_permission


router = APIRouter(
    prefix="/trips",
    tags=["stops"],
    responses={404: {"description": "Trip not found"}}
)
tracker = StopTracker()


def _http_error(exc: Exception) -> HTTPException:
    if isinstance(exc, TripNotFoundError):
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc))
    return HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc))


@router.get("/{trip_id}/stops", response_model=Dict,
            dependencies=[Depends(require_permission(Permission.VIEW_VIAJES))])
async def get_trip_stops(trip_id: int):
    """Stops of a trip in recording order, with arrival progress"""
    try:
        trip = tracker.load_trip(trip_id)
    except TripNotFoundError as e:
        raise _http_error(e)

    stops = tracker.stop_repo.get_by_trip(trip_id)
    return {
        "trip_id": trip_id,
        "estado": trip.estado.value,
        "stops": stops,
        "progress": arrival_progress(trip, stops)
    }


@router.post("/{trip_id}/start", response_model=Dict, status_code=status.HTTP_201_CREATED,
             dependencies=[Depends(require_permission(Permission.VIEW_VIAJES))])
async def start_trip(trip_id: int, request: StartTripRequest):
    """Start a programmed trip from its origin"""
    try:
        return tracker.start_trip(trip_id, request.odometro)
    except (TripNotFoundError, StopTrackingError) as e:
        raise _http_error(e)


@router.post("/{trip_id}/stops", response_model=Dict, status_code=status.HTTP_201_CREATED,
             dependencies=[Depends(require_permission(Permission.VIEW_VIAJES))])
async def record_stop(trip_id: int, request: StopRequest):
    """Record a rest, load, other or arrival stop on a trip in progress"""
    try:
        return tracker.record_stop(
            trip_id,
            request.tipo,
            request.odometro,
            ubicacion=request.ubicacion,
            destino_id=request.destino_id
        )
    except (TripNotFoundError, StopTrackingError) as e:
        raise _http_error(e)


@router.post("/{trip_id}/finalize", response_model=Dict,
             dependencies=[Depends(require_permission(Permission.VIEW_VIAJES))])
async def finalize_trip(trip_id: int):
    """Finalize a trip once every destination has an arrival"""
    try:
        return tracker.finalize_trip(trip_id)
    except (TripNotFoundError, StopTrackingError) as e:
        raise _http_error(e)
