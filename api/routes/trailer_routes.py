import logging
from datetime import date
from typing import Dict, List, Optional
from fastapi import APIRouter, Depends, HTTPException, Query, status
from pydantic import BaseModel, field_validator

from models.resource import PhysicalState, ServiceScope
from models.trailer import Trailer
from repositories.trailer_repository import TrailerRepository
from services.document_requirements import retain_documents_for_service
from services.expiry import annotate_documents
from utils.dates import parse_date
from utils.normalizers import normalize_plate
from utils.permissions import Permission, require_permission

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/trailers",
    tags=["trailers"],
    responses={404: {"description": "Trailer not found"}}
)
repo = TrailerRepository()


class TrailerExpiries(BaseModel):
    """Expiry columns of a trailer, all optional"""
    vencimiento_rto: Optional[date] = None
    vencimiento_visual_externa: Optional[date] = None
    vencimiento_visual_interna: Optional[date] = None
    vencimiento_espesores: Optional[date] = None
    vencimiento_mangueras: Optional[date] = None
    vencimiento_prueba_hidraulica: Optional[date] = None
    vencimiento_valvula_flujo: Optional[date] = None

    @field_validator(*Trailer.document_fields.values(), mode="before")
    @classmethod
    def parse_expiry(cls, v):
        return parse_date(v)


class TrailerUpdate(TrailerExpiries):
    """Model for partial trailer updates"""
    nombre: Optional[str] = None
    dominio: Optional[str] = None
    anio: Optional[int] = None
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

    @field_validator("alcance_servicio", mode="before")
    @classmethod
    def lower_scope(cls, v):
        return v.lower() if isinstance(v, str) else v


def describe(trailer: Dict) -> str:
    return f"{trailer.get('nombre', '')} (id {trailer.get('id')})"


def _get_or_404(trailer_id: int) -> Dict:
    trailer = repo.get_by_id(trailer_id)
    if not trailer:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Trailer {trailer_id} not found"
        )
    return trailer


def _check_plate(dominio: str, exclude_id: Optional[int] = None):
    existing = repo.find_by_plate(dominio, exclude_id)
    if existing:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"Plate {dominio} is already registered to trailer {describe(existing)}"
        )


def clear_documents_outside_service(current: Dict, update_data: Dict) -> Dict:
    """
    Add cleared expiry columns to an update that changes the service type.

    Expiries of documents the new service does not require are set to None,
    including ones sent in the same update.

    Args:
        current: Stored trailer properties
        update_data: Partial update carrying ``tipo_servicio``

    Returns:
        dict: A new update with the extra cleared columns
    """
    merged = Trailer(**{**current, **update_data})
    retained = retain_documents_for_service(merged.documents, update_data["tipo_servicio"])

    cleared = {}
    for kind, value in merged.documents.items():
        if value is not None and retained[kind] is None:
            cleared[Trailer.document_fields[kind]] = None

    if cleared:
        logger.info(
            f"Service change to {update_data['tipo_servicio']} clears "
            f"{', '.join(sorted(cleared))} on trailer {current.get('id')}"
        )
    return {**update_data, **cleared}


@router.get("/plate-check", response_model=Dict)
async def check_plate_exists(
    dominio: str = Query(..., min_length=1, description="Plate to check"),
    exclude_id: Optional[int] = Query(None, description="Trailer being edited")
):
    """Check whether a plate is already registered"""
    plate = normalize_plate(dominio)
    existing = repo.find_by_plate(plate, exclude_id)
    if not existing:
        return {"exists": False, "dominio": plate}
    return {
        "exists": True,
        "dominio": plate,
        "info": f"Registered to trailer {describe(existing)}"
    }


@router.post("/", response_model=Dict, status_code=status.HTTP_201_CREATED,
             dependencies=[Depends(require_permission(Permission.CREATE_SEMIRREMOLQUES))])
async def create_trailer(trailer: Trailer):
    """Create a new trailer"""
    _check_plate(trailer.dominio)

    result = repo.create(trailer)
    if not result:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to create trailer"
        )
    return result


@router.get("/", response_model=List[Dict],
            dependencies=[Depends(require_permission(Permission.VIEW_SEMIRREMOLQUES))])
async def get_trailers(
    skip: int = Query(0, ge=0, description="Number of items to skip"),
    limit: int = Query(100, ge=1, le=1000, description="Number of items to return"),
    estado: Optional[PhysicalState] = Query(None, description="Filter by physical state"),
    tipo_servicio: Optional[str] = Query(None, description="Filter by service type"),
    reference_date: Optional[date] = Query(None, description="Date expiries are evaluated against")
):
    """Get trailers with the status of their required documents"""
    filters = {"estado": estado, "tipo_servicio": tipo_servicio}
    trailers = repo.get_all(skip=skip, limit=limit, filters=filters)
    return [annotate_documents(t, Trailer, reference_date) for t in trailers]


@router.get("/{trailer_id}", response_model=Dict,
            dependencies=[Depends(require_permission(Permission.VIEW_SEMIRREMOLQUES))])
async def get_trailer(trailer_id: int, reference_date: Optional[date] = Query(None)):
    """Get a trailer by id"""
    return annotate_documents(_get_or_404(trailer_id), Trailer, reference_date)


@router.patch("/{trailer_id}", response_model=Dict,
              dependencies=[Depends(require_permission(Permission.EDIT_SEMIRREMOLQUES))])
async def update_trailer(trailer_id: int, updates: TrailerUpdate):
    """Update a trailer's properties"""
    current = _get_or_404(trailer_id)

    update_data = updates.model_dump(exclude_unset=True)
    if not update_data:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="No valid updates provided"
        )
    if update_data.get("dominio"):
        _check_plate(update_data["dominio"], exclude_id=trailer_id)
    if "tipo_servicio" in update_data:
        update_data = clear_documents_outside_service(current, update_data)

    result = repo.update(trailer_id, update_data)
    if not result:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to update trailer"
        )
    return result


@router.patch("/{trailer_id}/expiries", response_model=Dict,
              dependencies=[Depends(require_permission(Permission.EDIT_VENCIMIENTOS))])
async def update_trailer_expiries(trailer_id: int, updates: TrailerExpiries):
    """Update expiry dates; columns not sent are left unchanged"""
    _get_or_404(trailer_id)

    update_data = updates.model_dump(exclude_unset=True)
    if not update_data:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="No valid updates provided"
        )
    return repo.update(trailer_id, update_data)


@router.delete("/{trailer_id}", status_code=status.HTTP_204_NO_CONTENT,
               dependencies=[Depends(require_permission(Permission.DELETE_SEMIRREMOLQUES))])
async def delete_trailer(trailer_id: int):
    """Delete a trailer"""
    success = repo.delete(trailer_id)
    if not success:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Trailer {trailer_id} not found"
        )
    return None
