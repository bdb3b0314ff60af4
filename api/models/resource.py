from datetime import date
from enum import Enum
from typing import ClassVar, Dict, Optional

from pydantic import BaseModel, Field, field_validator


class ResourceKind(str, Enum):
    """Kinds of assignable trip resources"""
    DRIVER = "driver"
    TRACTOR = "tractor"
    TRAILER = "trailer"

    @property
    def display(self) -> str:
        """Upper-case name used as prefix in eligibility messages"""
        return self.name


class PhysicalState(str, Enum):
    """Operational status of a resource, independent of its documentation.

    Values are the labels stored in the fleet database.
    """
    AVAILABLE = "disponible"
    IN_TRIP = "en viaje"
    IN_REPAIR = "en reparacion"
    OUT_OF_SERVICE = "fuera de servicio"

    @property
    def reason(self) -> str:
        """Blocking reason reported by the availability filter"""
        return self.name.lower().replace("_", "-")

    @classmethod
    def parse(cls, value) -> "PhysicalState":
        """Parse a stored state label, accepting legacy labels and any casing"""
        if isinstance(value, cls):
            return value
        label = " ".join(str(value).strip().lower().split())
        label = LEGACY_STATE_LABELS.get(label, label)
        for state in cls:
            if state.value == label or state.reason == label:
                return state
        raise ValueError(f"Unknown physical state: {value!r}")


LEGACY_STATE_LABELS = {
    "en uso": PhysicalState.IN_TRIP.value,
    "inactivo": PhysicalState.OUT_OF_SERVICE.value,
    "en reparación": PhysicalState.IN_REPAIR.value,
}


class ServiceScope(str, Enum):
    NATIONAL = "nacional"
    INTERNATIONAL = "internacional"


class FleetResource(BaseModel):
    """Shared shape of drivers, tractors and trailers as assignable units.

    Subclasses map their stored expiry columns onto document kinds through
    ``document_fields``; which kinds are *required* comes from the document
    requirement table, never from the resource itself.
    """

    kind: ClassVar[ResourceKind]
    id: Optional[int] = Field(None, description="Unique identifier")
    estado: PhysicalState = Field(
        PhysicalState.AVAILABLE,
        description="Physical state (disponible, en viaje, en reparacion, fuera de servicio)"
    )

    # document kind -> attribute holding its expiry date
    document_fields: ClassVar[Dict[str, str]] = {}

    @field_validator("estado", mode="before")
    @classmethod
    def parse_estado(cls, v):
        if v is None:
            return PhysicalState.AVAILABLE
        return PhysicalState.parse(v)

    @property
    def physical_state(self) -> PhysicalState:
        return self.estado

    @property
    def service_type(self) -> Optional[str]:
        return None

    @property
    def documents(self) -> Dict[str, Optional[date]]:
        """Document kind -> expiry date for every document this resource tracks"""
        return {kind: getattr(self, field) for kind, field in self.document_fields.items()}
