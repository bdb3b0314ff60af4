import logging
from typing import Dict, Optional
from fastapi import APIRouter, HTTPException, status
from pydantic import BaseModel, Field, ValidationError

from services.document_requirements import get_requirement_table, reload_requirement_table

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/document-requirements",
    tags=["document-requirements"]
)


class ReloadRequest(BaseModel):
    path: Optional[str] = Field(None, description="Table file to load instead of the configured one")


def _describe(table) -> Dict:
    return {
        "labels": table.labels,
        "base": {kind.value: kinds for kind, kinds in table.base.items()},
        "services": table.services,
    }


@router.get("/", response_model=Dict)
async def get_document_requirements():
    """The document requirement table currently in use"""
    return _describe(get_requirement_table())


@router.post("/reload", response_model=Dict)
async def reload_document_requirements(request: Optional[ReloadRequest] = None):
    """Re-read the requirement table; the current one stays if the file is invalid"""
    path = request.path if request else None
    try:
        table = reload_requirement_table(path)
    except (OSError, ValueError, ValidationError) as e:
        logger.error(f"Failed to reload document requirements: {e}")
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=f"Invalid document requirement table: {e}"
        )
    return _describe(table)
