from typing import Dict, List, Optional
from fastapi import APIRouter, HTTPException, Query, status
from pydantic import BaseModel

from models.service import Service
from repositories.service_repository import ServiceRepository
from services.document_requirements import get_requirement_table


router = APIRouter(
    prefix="/services",
    tags=["services"],
    responses={404: {"description": "Service not found"}}
)
repo = ServiceRepository()


class ServiceUpdate(BaseModel):
    """Model for partial service updates"""
    nombre: Optional[str] = None
    descripcion: Optional[str] = None
    requiere_prueba_hidraulica: Optional[bool] = None
    requiere_visuales: Optional[bool] = None
    requiere_valvula_y_mangueras: Optional[bool] = None


def _check_name(nombre: str, exclude_id: Optional[int] = None):
    if repo.find_by_name(nombre, exclude_id):
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"A service named {nombre.strip()} already exists"
        )


def _with_documents(service: Dict) -> Dict:
    """Attach the trailer documents the service requires"""
    table = get_requirement_table()
    return {
        **service,
        "documentos_requeridos": [
            {"kind": kind, "label": table.label(kind)}
            for kind in table.required_documents(service.get("nombre"))
        ]
    }


@router.post("/", response_model=Dict, status_code=status.HTTP_201_CREATED)
async def create_service(service: Service):
    """Create a new service"""
    _check_name(service.nombre)

    result = repo.create(service)
    if not result:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to create service"
        )
    return _with_documents(result)


@router.get("/", response_model=List[Dict])
async def get_services(
    skip: int = Query(0, ge=0, description="Number of items to skip"),
    limit: int = Query(100, ge=1, le=1000, description="Number of items to return")
):
    """Get all services with their required trailer documents"""
    return [_with_documents(s) for s in repo.get_all(skip=skip, limit=limit)]


@router.get("/{service_id}", response_model=Dict)
async def get_service(service_id: int):
    """Get a service by id"""
    service = repo.get_by_id(service_id)
    if not service:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Service {service_id} not found"
        )
    return _with_documents(service)


@router.patch("/{service_id}", response_model=Dict)
async def update_service(service_id: int, updates: ServiceUpdate):
    """Update a service's properties"""
    if not repo.exists(service_id):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Service {service_id} not found"
        )

    update_data = updates.model_dump(exclude_unset=True)
    if not update_data:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="No valid updates provided"
        )
    if update_data.get("nombre"):
        _check_name(update_data["nombre"], exclude_id=service_id)

    return _with_documents(repo.update(service_id, update_data))


@router.delete("/{service_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_service(service_id: int):
    """Delete a service"""
    success = repo.delete(service_id)
    if not success:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Service {service_id} not found"
        )
    return None
