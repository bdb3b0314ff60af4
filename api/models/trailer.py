from datetime import date
from typing import ClassVar, Optional

from pydantic import Field, field_validator

from models.resource import FleetResource, ResourceKind, ServiceScope
from utils.dates import parse_date
from utils.normalizers import normalize_plate


TRAILER_DOCUMENT_KINDS = (
    "rto",
    "visual_externa",
    "visual_interna",
    "espesores",
    "mangueras",
    "prueba_hidraulica",
    "valvula_flujo",
)


class Trailer(FleetResource):
    """Trailer (semirremolque) entity.

    Stores one expiry column per document kind, named ``vencimiento_<kind>``.
    Which of them apply depends on the trailer's service type.
    """

    kind: ClassVar[ResourceKind] = ResourceKind.TRAILER
    document_fields: ClassVar[dict] = {kind: f"vencimiento_{kind}" for kind in TRAILER_DOCUMENT_KINDS}

    # Vehicle Information
    nombre: str = Field(..., min_length=1, description="Display name", example="Cisterna 1")
    dominio: str = Field(..., min_length=1, description="License plate", example="AC123BD")
    anio: Optional[int] = Field(None, ge=1950, le=2100, description="Model year", example=2018)

    # Service assignment
    tipo_servicio: Optional[str] = Field(None, description="Service type name", example="Gas Licuado")
    alcance_servicio: Optional[ServiceScope] = Field(None, description="nacional or internacional")

    # Documentation
    vencimiento_rto: Optional[date] = None
    vencimiento_visual_externa: Optional[date] = None
    vencimiento_visual_interna: Optional[date] = None
    vencimiento_espesores: Optional[date] = None
    vencimiento_mangueras: Optional[date] = None
    vencimiento_prueba_hidraulica: Optional[date] = None
    vencimiento_valvula_flujo: Optional[date] = None

    @field_validator("dominio")
    @classmethod
    def normalize_dominio(cls, v: str) -> str:
        return normalize_plate(v)

    @field_validator(
        "vencimiento_rto",
        "vencimiento_visual_externa",
        "vencimiento_visual_interna",
        "vencimiento_espesores",
        "vencimiento_mangueras",
        "vencimiento_prueba_hidraulica",
        "vencimiento_valvula_flujo",
        mode="before"
    )
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
                "nombre": "Cisterna 1",
                "dominio": "AC123BD",
                "anio": 2018,
                "estado": "disponible",
                "tipo_servicio": "Gas Licuado",
                "alcance_servicio": "nacional",
                "vencimiento_mangueras": "2025-06-30",
                "vencimiento_prueba_hidraulica": "2026-01-15",
                "vencimiento_valvula_flujo": "2025-11-01"
            }
        }
