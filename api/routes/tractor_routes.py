from datetime import date
from typing import Dict, List, Optional
from fastapi import APIRouter, Depends, HTTPException, Query, status
from pydantic import BaseModel, field_validator

from models.resource import PhysicalState, ServiceScope
from models.tractor import Tractor
from repositories.tractor_repository import TractorRepository
from services.expiry import annotate_documents
from utils.dates import parse_date
from utils.normalizers import normalize_plate
from utils.permissions import Permission, require_permission


router = APIRouter(
    prefix="/tractors",
    tags=["tractors"],
    responses={404: {"description": "Tractor not found"}}
)
repo = TractorRepository()


class TractorUpdate(BaseModel):
    """Model for partial tractor updates"""
    marca: Optional[str] = None
    modelo: Optional[str] = None
    dominio: Optional[str] = None
    anio: Optional[int] = None
    vencimiento_rto: Optional[date] = None
    estado: Optional[PhysicalState] = None
    tipo_servicio: Optional[str] = None
    alcance_servicio: Optional[ServiceScope] = None

    @field_validator("dominio")
    @classmethod
    def normalize_dominio(cls, v: Optional[str]) -> Optional[str]:
        return normalize_plate(v) if v else v

    @field_validator("estado", mode="before")
    @classmethod
    def parse_estado(cls, v):
        return PhysicalState.parse(v) if v is not None else None

    @field_validator("vencimiento_rto", mode="before")
    @classmethod
    def parse_expiry(cls, v):
        return parse_date(v)


class RtoUpdate(BaseModel):
    """Model for updating only the RTO expiry"""
    vencimiento_rto: Optional[date] = None

    @field_validator("vencimiento_rto", mode="before")
    @classmethod
    def parse_expiry(cls, v):
        return parse_date(v)


def describe(tractor: Dict) -> str:
    return f"{tractor.get('marca', '')} {tractor.get('modelo', '')} (id {tractor.get('id')})".strip()


def _get_or_404(tractor_id: int) -> Dict:
    tractor = repo.get_by_id(tractor_id)
    if not tractor:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Tractor {tractor_id} not found"
        )
    return tractor


def _check_plate(dominio: str, exclude_id: Optional[int] = None):
    existing = repo.find_by_plate(dominio, exclude_id)
    if existing:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"Plate {dominio} is already registered to tractor {describe(existing)}"
        )


@router.get("/plate-check", response_model=Dict)
async def check_plate_exists(
    dominio: str = Query(..., min_length=1, description="Plate to check"),
    exclude_id: Optional[int] = Query(None, description="Tractor being edited")
):
    """Check whether a plate is already registered"""
    plate = normalize_plate(dominio)
    existing = repo.find_by_plate(plate, exclude_id)
    if not existing:
        return {"exists": False, "dominio": plate}
    return {
        "exists": True,
        "dominio": plate,
        "info": f"Registered to tractor {describe(existing)}"
    }


@router.post("/", response_model=Dict, status_code=status.HTTP_201_CREATED,
             dependencies=[Depends(require_permission(Permission.CREATE_TRACTORES))])
async def create_tractor(tractor: Tractor):
    """Create a new tractor"""
    _check_plate(tractor.dominio)

    result = repo.create(tractor)
    if not result:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to create tractor"
        )
    return result


@router.get("/", response_model=List[Dict],
            dependencies=[Depends(require_permission(Permission.VIEW_TRACTORES))])
async def get_tractors(
    skip: int = Query(0, ge=0, description="Number of items to skip"),
    limit: int = Query(100, ge=1, le=1000, description="Number of items to return"),
    estado: Optional[PhysicalState] = Query(None, description="Filter by physical state"),
    tipo_servicio: Optional[str] = Query(None, description="Filter by service type"),
    reference_date: Optional[date] = Query(None, description="Date RTO expiry is evaluated against")
):
    """Get tractors with their RTO status"""
    filters = {"estado": estado, "tipo_servicio": tipo_servicio}
    tractors = repo.get_all(skip=skip, limit=limit, filters=filters)
    return [annotate_documents(t, Tractor, reference_date) for t in tractors]


@router.get("/{tractor_id}", response_model=Dict,
            dependencies=[Depends(require_permission(Permission.VIEW_TRACTORES))])
async def get_tractor(tractor_id: int, reference_date: Optional[date] = Query(None)):
    """Get a tractor by id"""
    return annotate_documents(_get_or_404(tractor_id), Tractor, reference_date)


@router.patch("/{tractor_id}", response_model=Dict,
              dependencies=[Depends(require_permission(Permission.EDIT_TRACTORES))])
async def update_tractor(tractor_id: int, updates: TractorUpdate):
    """Update a tractor's properties"""
    _get_or_404(tractor_id)

    update_data = updates.model_dump(exclude_unset=True)
    if not update_data:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="No valid updates provided"
        )
    if update_data.get("dominio"):
        _check_plate(update_data["dominio"], exclude_id=tractor_id)

    result = repo.update(tractor_id, update_data)
    if not result:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to update tractor"
        )
    return result


@router.patch("/{tractor_id}/expiries", response_model=Dict,
              dependencies=[Depends(require_permission(Permission.EDIT_VENCIMIENTOS))])
async def update_tractor_rto(tractor_id: int, updates: RtoUpdate):
    """Update the RTO expiry date"""
    _get_or_404(tractor_id)
    return repo.update(tractor_id, updates.model_dump())


@router.delete("/{tractor_id}", status_code=status.HTTP_204_NO_CONTENT,
               dependencies=[Depends(require_permission(Permission.DELETE_TRACTORES))])
async def delete_tractor(tractor_id: int):
    """Delete a tractor"""
    success = repo.delete(tractor_id)
    if not success:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Tractor {tractor_id} not found"
        )
    return None
