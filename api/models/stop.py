from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


class StopType(str, Enum):
    START = "inicio"
    REST = "descanso"
    LOAD = "carga"
    OTHER = "otro"
    ARRIVAL = "llegada"


class Stop(BaseModel):
    """Stop (parada) recorded along a trip with the odometer reading"""

    id: Optional[int] = None
    viaje_id: int
    odometro: float = Field(..., ge=0, description="Odometer reading in km")
    ubicacion: str = Field(..., description="Where the stop happened")
    tipo: StopType
    destino_id: Optional[int] = Field(None, description="Destination reached, for arrival stops")
    fecha_hora: Optional[datetime] = None


class StopRequest(BaseModel):
    """Body for recording a stop on a trip in progress"""
    tipo: StopType
    odometro: float = Field(..., ge=0)
    ubicacion: Optional[str] = None
    destino_id: Optional[int] = None


class StartTripRequest(BaseModel):
    """Body for starting a programmed trip"""
    odometro: float = Field(..., ge=0)
