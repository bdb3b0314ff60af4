from datetime import date
from typing import ClassVar, Optional

from pydantic import Field, field_validator

from models.resource import FleetResource, ResourceKind
from utils.dates import parse_date
from utils.normalizers import normalize_dni, normalize_email, normalize_phone


class Driver(FleetResource):
    """Driver (chofer) of the fleet.

    The license is the only tracked document; drivers are not tied to a
    service type.
    """

    kind: ClassVar[ResourceKind] = ResourceKind.DRIVER
    document_fields: ClassVar[dict] = {"license": "fecha_vencimiento_licencia"}

    # Identity
    nombre: str = Field(..., min_length=1, description="First name", example="Juan")
    apellido: str = Field(..., min_length=1, description="Last name", example="Pérez")
    dni: str = Field(..., min_length=1, description="National identity number", example="25678901")

    # Contact
    telefono: Optional[str] = Field(None, description="Phone number", example="1123456789")
    email: Optional[str] = Field(None, description="Email address", example="juan.perez@example.com")

    # License Info
    licencia: Optional[str] = Field(None, description="License number", example="A12345")
    fecha_vencimiento_licencia: Optional[date] = Field(
        None,
        description="License expiry date",
        example="2026-05-15"
    )

    # Status
    activo: bool = Field(True, description="Whether the driver is active")

    # Linked user account
    usuario_id: Optional[int] = Field(None, description="User account id")

    @field_validator("fecha_vencimiento_licencia", mode="before")
    @classmethod
    def parse_expiry(cls, v):
        return parse_date(v)

    @field_validator("dni")
    @classmethod
    def clean_dni(cls, v: str) -> str:
        return normalize_dni(v)

    @field_validator("email")
    @classmethod
    def clean_email(cls, v: Optional[str]) -> Optional[str]:
        return normalize_email(v) or None

    @field_validator("telefono")
    @classmethod
    def clean_phone(cls, v: Optional[str]) -> Optional[str]:
        return normalize_phone(v) or None

    class Config:
        json_schema_extra = {
            "example": {
                "nombre": "Juan",
                "apellido": "Pérez",
                "dni": "25678901",
                "telefono": "1123456789",
                "email": "juan.perez@example.com",
                "licencia": "A12345",
                "fecha_vencimiento_licencia": "2026-05-15",
                "activo": True,
                "estado": "disponible"
            }
        }
