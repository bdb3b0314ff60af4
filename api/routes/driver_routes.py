from datetime import date
from typing import Dict, List, Optional
from fastapi import APIRouter, Depends, HTTPException, Query, status
from pydantic import BaseModel, field_validator

from models.driver import Driver
from models.resource import PhysicalState
from repositories.driver_repository import DriverRepository
from services.expiry import annotate_documents
from utils.dates import parse_date
from utils.normalizers import normalize_dni, normalize_email, normalize_phone
from utils.permissions import Permission, require_permission


router = APIRouter(
    prefix="/drivers",
    tags=["drivers"],
    responses={404: {"description": "Driver not found"}}
)
repo = DriverRepository()


class DriverUpdate(BaseModel):
    """Model for partial driver updates"""
    nombre: Optional[str] = None
    apellido: Optional[str] = None
    dni: Optional[str] = None
    telefono: Optional[str] = None
    email: Optional[str] = None
    licencia: Optional[str] = None
    fecha_vencimiento_licencia: Optional[date] = None
    activo: Optional[bool] = None
    estado: Optional[PhysicalState] = None
    usuario_id: Optional[int] = None

    @field_validator("dni")
    @classmethod
    def clean_dni(cls, v: Optional[str]) -> Optional[str]:
        return normalize_dni(v) if v else v

    @field_validator("email")
    @classmethod
    def clean_email(cls, v: Optional[str]) -> Optional[str]:
        return normalize_email(v) if v else v

    @field_validator("telefono")
    @classmethod
    def clean_phone(cls, v: Optional[str]) -> Optional[str]:
        return normalize_phone(v) if v else v

    @field_validator("estado", mode="before")
    @classmethod
    def parse_estado(cls, v):
        return PhysicalState.parse(v) if v is not None else None


class LicenseUpdate(BaseModel):
    """Model for updating only the license expiry"""
    fecha_vencimiento_licencia: Optional[date] = None

    @field_validator("fecha_vencimiento_licencia", mode="before")
    @classmethod
    def parse_expiry(cls, v):
        return parse_date(v)


def _check_unique(dni: Optional[str], email: Optional[str], exclude_id: Optional[int] = None):
    if dni and repo.find_by_dni(dni, exclude_id):
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="A driver with that DNI already exists"
        )
    if email and repo.find_by_email(email, exclude_id):
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="A driver with that email already exists"
        )


def _get_or_404(driver_id: int) -> Dict:
    driver = repo.get_by_id(driver_id)
    if not driver:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Driver {driver_id} not found"
        )
    return driver


@router.post("/", response_model=Dict, status_code=status.HTTP_201_CREATED,
             dependencies=[Depends(require_permission(Permission.CREATE_CHOFERES))])
async def create_driver(driver: Driver):
    """Create a new driver"""
    _check_unique(driver.dni, driver.email)

    result = repo.create(driver)
    if not result:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to create driver"
        )
    return result


@router.get("/", response_model=List[Dict],
            dependencies=[Depends(require_permission(Permission.VIEW_CHOFERES))])
async def get_drivers(
    skip: int = Query(0, ge=0, description="Number of items to skip"),
    limit: int = Query(100, ge=1, le=1000, description="Number of items to return"),
    estado: Optional[PhysicalState] = Query(None, description="Filter by physical state"),
    activo: Optional[bool] = Query(None, description="Filter by active flag"),
    reference_date: Optional[date] = Query(None, description="Date license expiry is evaluated against")
):
    """Get drivers with their license status"""
    filters = {"estado": estado, "activo": activo}
    drivers = repo.get_all(skip=skip, limit=limit, filters=filters)
    return [annotate_documents(d, Driver, reference_date) for d in drivers]


@router.get("/{driver_id}", response_model=Dict,
            dependencies=[Depends(require_permission(Permission.VIEW_CHOFERES))])
async def get_driver(driver_id: int, reference_date: Optional[date] = Query(None)):
    """Get a driver by id"""
    return annotate_documents(_get_or_404(driver_id), Driver, reference_date)


@router.patch("/{driver_id}", response_model=Dict,
              dependencies=[Depends(require_permission(Permission.EDIT_CHOFERES))])
async def update_driver(driver_id: int, updates: DriverUpdate):
    """Update a driver's properties"""
    _get_or_404(driver_id)

    update_data = updates.model_dump(exclude_unset=True)
    if not update_data:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="No valid updates provided"
        )
    _check_unique(update_data.get("dni"), update_data.get("email"), exclude_id=driver_id)

    result = repo.update(driver_id, update_data)
    if not result:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to update driver"
        )
    return result


@router.patch("/{driver_id}/expiries", response_model=Dict,
              dependencies=[Depends(require_permission(Permission.EDIT_VENCIMIENTOS))])
async def update_driver_license(driver_id: int, updates: LicenseUpdate):
    """Update the license expiry date"""
    _get_or_404(driver_id)
    return repo.update(driver_id, updates.model_dump())


@router.delete("/{driver_id}", status_code=status.HTTP_204_NO_CONTENT,
               dependencies=[Depends(require_permission(Permission.DELETE_CHOFERES))])
async def delete_driver(driver_id: int):
    """Delete a driver"""
    success = repo.delete(driver_id)
    if not success:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Driver {driver_id} not found"
        )
    return None
