from datetime import date
from typing import ClassVar, Optional

from pydantic import Field, field_validator

from models.resource import FleetResource, ResourceKind, ServiceScope
from utils.dates import parse_date
from utils.normalizers import normalize_plate


class Tractor(FleetResource):
    """Tractor unit. Tracks a single document, the RTO (technical inspection)."""

    kind: ClassVar[ResourceKind] = ResourceKind.TRACTOR
    document_fields: ClassVar[dict] = {"rto": "vencimiento_rto"}

    # Vehicle Information
    marca: str = Field(..., min_length=1, description="Make", example="Scania")
    modelo: str = Field(..., min_length=1, description="Model", example="R450")
    dominio: str = Field(..., min_length=1, description="License plate", example="AB539RO")
    anio: Optional[int] = Field(None, ge=1950, le=2100, description="Model year", example=2019)

    # Documentation
    vencimiento_rto: Optional[date] = Field(None, description="RTO expiry date", example="2025-03-01")

    # Service assignment
    tipo_servicio: Optional[str] = Field(None, description="Service type name", example="Gas Licuado")
    alcance_servicio: Optional[ServiceScope] = Field(None, description="nacional or internacional")

    @field_validator("dominio")
    @classmethod
    def normalize_dominio(cls, v: str) -> str:
        return normalize_plate(v)

    @field_validator("vencimiento_rto", mode="before")
    @classmethod
    def parse_expiry(cls, v):
        return parse_date(v)

    @field_validator("alcance_servicio", mode="before")
    @classmethod
    def lower_scope(cls, v):
        return v.lower() if isinstance(v, str) else v

    @property
    def service_type(self) -> Optional[str]:
        return self.tipo_servicio

    class Config:
        json_schema_extra = {
            "example": {
                "marca": "Scania",
                "modelo": "R450",
                "dominio": "AB539RO",
                "anio": 2019,
                "vencimiento_rto": "2025-03-01",
                "estado": "disponible",
                "tipo_servicio": "Gas Licuado",
                "alcance_servicio": "nacional"
            }
        }
