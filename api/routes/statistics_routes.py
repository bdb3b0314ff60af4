from datetime import date
from typing import Dict, Optional
from fastapi import APIRouter, Depends, HTTPException, Query, status

from models.resource import ServiceScope
from repositories.statistics_repository import StatisticsRepository
from utils.permissions import Permission, require_permission


router = APIRouter(
    prefix="/statistics",
    tags=["statistics"],
    dependencies=[Depends(require_permission(Permission.VIEW_ESTADISTICAS))]
)
repo = StatisticsRepository()


@router.get("/", response_model=Dict)
async def get_statistics(
    fecha_inicio: Optional[date] = Query(None, description="First departure date included"),
    fecha_fin: Optional[date] = Query(None, description="Last departure date included"),
    chofer_id: Optional[int] = Query(None),
    tractor_id: Optional[int] = Query(None),
    semirremolque_id: Optional[int] = Query(None),
    servicio_id: Optional[int] = Query(None),
    alcance: Optional[ServiceScope] = Query(None)
):
    """Dashboard statistics over the trips matching the filters"""
    if fecha_inicio and fecha_fin and fecha_inicio > fecha_fin:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="fecha_inicio must not be after fecha_fin"
        )

    filters = {
        "fecha_inicio": fecha_inicio,
        "fecha_fin": fecha_fin,
        "chofer_id": chofer_id,
        "tractor_id": tractor_id,
        "semirremolque_id": semirremolque_id,
        "servicio_id": servicio_id,
        "alcance": alcance.value if alcance else None,
    }
    return {
        "general": repo.get_general(filters),
        "km_por_tractor": repo.get_km_per_tractor(filters),
        "viajes_por_chofer": repo.get_trips_per_driver(filters),
        "viajes_por_servicio": repo.get_trips_per_service(filters),
    }
