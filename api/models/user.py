from typing import Optional

from pydantic import BaseModel, Field, field_validator

from utils.normalizers import normalize_email


class User(BaseModel):
    """Application user. ``rol_id`` selects the permission set."""

    id: Optional[int] = None
    usuario: str = Field(..., min_length=3, description="Login email", example="admin@rutacontrol.com")
    rol_id: int = Field(..., ge=1, le=4, description="1 admin, 2 chofer, 3 analista, 4 logistico")
    activo: bool = True

    @field_validator("usuario")
    @classmethod
    def lower_usuario(cls, v: str) -> str:
        return normalize_email(v)
