from typing import Optional

from pydantic import BaseModel, Field


class Service(BaseModel):
    """Transport service offered by the company (e.g. Gas Licuado).

    The name is the key matched against resource service types and the
    document requirement table.
    """

    id: Optional[int] = Field(None, description="Unique identifier")
    nombre: str = Field(..., min_length=1, description="Service name", example="Gas Licuado")
    descripcion: Optional[str] = Field(None, description="Free text description")

    # Flags kept from the fleet database; document rules live in the requirement table
    requiere_prueba_hidraulica: bool = False
    requiere_visuales: bool = False
    requiere_valvula_y_mangueras: bool = False
