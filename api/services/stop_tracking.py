"""
Stop tracking for trips on the road.

A programmed trip is started with an ``inicio`` stop at its origin, collects
rest/load/other stops and one ``llegada`` stop per destination, and is
finalized once every destination has been reached. Starting puts the
assigned driver, tractor and trailer in trip; finalizing frees them.
"""

import logging
from typing import Dict, List, Optional

from models.resource import PhysicalState
from models.stop import Stop, StopType
from models.trip import Trip, TripState
from repositories.driver_repository import DriverRepository
from repositories.stop_repository import StopRepository
from repositories.tractor_repository import TractorRepository
from repositories.trailer_repository import TrailerRepository
from repositories.trip_repository import TripRepository

logger = logging.getLogger(__name__)


class StopTrackingError(ValueError):
    """A stop or state change that the trip's current state does not allow"""


class TripNotFoundError(LookupError):
    pass


def arrival_progress(trip: Trip, stops: List[Dict]) -> Dict:
    """Count arrivals against the trip's declared destinations"""
    arrivals = sum(1 for s in stops if s.get('tipo') == StopType.ARRIVAL.value)
    return {
        "arrivals": arrivals,
        "destinations": trip.cantidad_destinos,
        "can_finalize": arrivals > 0 and arrivals == trip.cantidad_destinos,
    }


class StopTracker:
    """Applies the trip stop workflow on top of the repositories."""

    def __init__(
        self,
        trip_repo: Optional[TripRepository] = None,
        stop_repo: Optional[StopRepository] = None,
        driver_repo: Optional[DriverRepository] = None,
        tractor_repo: Optional[TractorRepository] = None,
        trailer_repo: Optional[TrailerRepository] = None
    ):
        self.trip_repo = trip_repo or TripRepository()
        self.stop_repo = stop_repo or StopRepository()
        self.driver_repo = driver_repo or DriverRepository()
        self.tractor_repo = tractor_repo or TractorRepository()
        self.trailer_repo = trailer_repo or TrailerRepository()

    def load_trip(self, trip_id: int) -> Trip:
        data = self.trip_repo.get_by_id(trip_id)
        if not data:
            raise TripNotFoundError(f"Trip {trip_id} not found")
        return Trip(**data)

    def _set_resource_states(self, trip: Trip, estado: PhysicalState) -> None:
        self.driver_repo.set_state([trip.chofer_id], estado.value)
        self.tractor_repo.set_state([trip.tractor_id], estado.value)
        self.trailer_repo.set_state([trip.semirremolque_id], estado.value)

    def _check_odometer(self, stops: List[Dict], odometro: float) -> None:
        if stops:
            last = max(s.get('odometro') or 0 for s in stops)
            if odometro < last:
                raise StopTrackingError(
                    f"Odometer {odometro} is below the last recorded reading {last}"
                )

    def start_trip(self, trip_id: int, odometro: float) -> Dict:
        """
        Record the ``inicio`` stop and move the trip to ``en curso``.

        Args:
            trip_id: Trip to start
            odometro: Odometer reading at departure

        Returns:
            dict: The recorded stop

        Raises:
            TripNotFoundError: If the trip does not exist
            StopTrackingError: If the trip is not programmed
        """
        trip = self.load_trip(trip_id)
        if trip.estado != TripState.PROGRAMMED:
            raise StopTrackingError(f"Trip {trip_id} is {trip.estado.value} and cannot be started")

        stop = self.stop_repo.create(Stop(
            viaje_id=trip_id,
            odometro=odometro,
            ubicacion=trip.origen,
            tipo=StopType.START
        ))
        self.trip_repo.set_trip_state(trip_id, TripState.IN_PROGRESS.value)
        self._set_resource_states(trip, PhysicalState.IN_TRIP)
        logger.info(f"Trip {trip_id} started at {trip.origen} (odometer {odometro})")
        return stop

    def record_stop(
        self,
        trip_id: int,
        tipo: StopType,
        odometro: float,
        ubicacion: Optional[str] = None,
        destino_id: Optional[int] = None
    ) -> Dict:
        """
        Record a stop on a trip in progress.

        Arrival stops take their location from the destination reached; when
        the last destination is reached the trip is finalized.

        Returns:
            dict: The recorded stop and the trip's arrival progress

        Raises:
            TripNotFoundError: If the trip does not exist
            StopTrackingError: If the stop is not valid for the trip
        """
        trip = self.load_trip(trip_id)
        if trip.estado != TripState.IN_PROGRESS:
            raise StopTrackingError(f"Trip {trip_id} is {trip.estado.value}; stops need a trip in progress")
        if tipo == StopType.START:
            raise StopTrackingError("Trip already started")

        stops = self.stop_repo.get_by_trip(trip_id)
        self._check_odometer(stops, odometro)

        if tipo == StopType.ARRIVAL:
            destination = next((d for d in trip.destinos if d.id == destino_id), None)
            if destino_id is None or destination is None:
                raise StopTrackingError("Arrival stops need a destination of this trip")
            reached = {s.get('destino_id') for s in stops if s.get('tipo') == StopType.ARRIVAL.value}
            if destino_id in reached:
                raise StopTrackingError(f"Destination {destination.ubicacion} already reached")
            ubicacion = destination.ubicacion
        else:
            destino_id = None
            if not ubicacion or not ubicacion.strip():
                raise StopTrackingError("Location is required")
            ubicacion = ubicacion.strip()

        stop = self.stop_repo.create(Stop(
            viaje_id=trip_id,
            odometro=odometro,
            ubicacion=ubicacion,
            tipo=tipo,
            destino_id=destino_id
        ))

        progress = arrival_progress(trip, stops + [stop])
        if tipo == StopType.ARRIVAL and progress["can_finalize"]:
            self._finalize(trip)
            progress["finalized"] = True

        return {"stop": stop, "progress": progress}

    def finalize_trip(self, trip_id: int) -> Dict:
        """Finalize a trip whose destinations have all been reached"""
        trip = self.load_trip(trip_id)
        if trip.estado == TripState.FINALIZED:
            raise StopTrackingError(f"Trip {trip_id} is already finalized")

        progress = arrival_progress(trip, self.stop_repo.get_by_trip(trip_id))
        if not progress["can_finalize"]:
            raise StopTrackingError(
                f"Trip {trip_id} has {progress['arrivals']} of {progress['destinations']} arrivals recorded"
            )
        return self._finalize(trip)

    def _finalize(self, trip: Trip) -> Dict:
        result = self.trip_repo.set_trip_state(trip.id, TripState.FINALIZED.value)
        self._set_resource_states(trip, PhysicalState.AVAILABLE)
        logger.info(f"Trip {trip.id} finalized")
        return result
