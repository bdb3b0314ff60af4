from datetime import date, datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator

from models.resource import ServiceScope


class TripState(str, Enum):
    """Trip lifecycle: programado -> en curso -> finalizado (terminal)"""
    PROGRAMMED = "programado"
    IN_PROGRESS = "en curso"
    FINALIZED = "finalizado"

    @classmethod
    def parse(cls, value) -> "TripState":
        if isinstance(value, cls):
            return value
        return cls(" ".join(str(value).strip().lower().split()))


class Destination(BaseModel):
    """One stop-off point of a trip, visited in ``orden`` sequence"""
    id: Optional[int] = None
    ubicacion: str = Field("", description="Destination location", example="Bahía Blanca")
    orden: Optional[int] = Field(None, ge=1, description="1-based visiting order")


class TripCandidate(BaseModel):
    """Unsaved state of a trip being created or edited.

    Ids of 0 mean "not selected yet"; the submission guard rejects them.
    """

    driver_id: Optional[int] = Field(None, description="Selected driver id")
    tractor_id: Optional[int] = Field(None, description="Selected tractor id")
    trailer_id: Optional[int] = Field(None, description="Selected trailer id")
    service_id: Optional[int] = Field(None, description="Selected service id")
    departure_date: Optional[datetime] = Field(None, description="Departure date and time")
    origin: str = Field("", description="Origin location")
    destinations: List[Destination] = Field(default_factory=list)
    alcance: ServiceScope = ServiceScope.NATIONAL

    @field_validator("departure_date", mode="before")
    @classmethod
    def empty_date_is_none(cls, v):
        if isinstance(v, str) and not v.strip():
            return None
        if isinstance(v, date) and not isinstance(v, datetime):
            return datetime(v.year, v.month, v.day)
        return v

    @classmethod
    def from_trip(cls, trip: "Trip") -> "TripCandidate":
        """Hydrate a candidate from a persisted trip for editing"""
        return cls(
            driver_id=trip.chofer_id,
            tractor_id=trip.tractor_id,
            trailer_id=trip.semirremolque_id,
            service_id=trip.servicio_id,
            departure_date=trip.fecha_salida,
            origin=trip.origen,
            destinations=[d.model_copy() for d in trip.destinos],
            alcance=trip.alcance,
        )

    class Config:
        json_schema_extra = {
            "example": {
                "driver_id": 1,
                "tractor_id": 2,
                "trailer_id": 3,
                "service_id": 1,
                "departure_date": "2024-01-10T06:00:00",
                "origin": "Neuquén",
                "destinations": [
                    {"ubicacion": "Bahía Blanca"},
                    {"ubicacion": "Mar del Plata"}
                ],
                "alcance": "nacional"
            }
        }


class Trip(BaseModel):
    """Persisted trip (viaje) with its ordered destinations"""

    id: Optional[int] = None
    chofer_id: int
    tractor_id: int
    semirremolque_id: int
    servicio_id: int
    alcance: ServiceScope = ServiceScope.NATIONAL
    origen: str
    cantidad_destinos: int = Field(0, ge=0)
    fecha_salida: datetime
    estado: TripState = TripState.PROGRAMMED
    destinos: List[Destination] = Field(default_factory=list)

    @field_validator("estado", mode="before")
    @classmethod
    def parse_estado(cls, v):
        if v is None:
            return TripState.PROGRAMMED
        return TripState.parse(v)