from typing import Dict, List, Optional
from fastapi import APIRouter, Depends, HTTPException, Query, status
from pydantic import BaseModel, Field

from models.user import User
from repositories.user_repository import UserRepository
from utils.normalizers import normalize_email
from utils.permissions import ROLE_NAMES, Permission, get_role_permissions, require_permission


router = APIRouter(
    prefix="/users",
    tags=["users"],
    responses={404: {"description": "User not found"}}
)
repo = UserRepository()


class UserUpdate(BaseModel):
    """Model for partial user updates"""
    usuario: Optional[str] = Field(None, min_length=3)
    rol_id: Optional[int] = Field(None, ge=1, le=4)
    activo: Optional[bool] = None


def _with_role(user: Dict) -> Dict:
    rol_id = user.get("rol_id")
    return {
        **user,
        "rol": ROLE_NAMES.get(rol_id),
        "permisos": sorted(p.value for p in get_role_permissions(rol_id))
    }


@router.post("/", response_model=Dict, status_code=status.HTTP_201_CREATED,
             dependencies=[Depends(require_permission(Permission.CREATE_USUARIOS))])
async def create_user(user: User):
    """Create a new user"""
    if repo.find_by_username(user.usuario):
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"User {user.usuario} already exists"
        )

    result = repo.create(user)
    if not result:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to create user"
        )
    return _with_role(result)


@router.get("/", response_model=List[Dict],
            dependencies=[Depends(require_permission(Permission.VIEW_USUARIOS))])
async def get_users(
    skip: int = Query(0, ge=0, description="Number of items to skip"),
    limit: int = Query(100, ge=1, le=1000, description="Number of items to return"),
    rol_id: Optional[int] = Query(None, ge=1, le=4, description="Filter by role"),
    activo: Optional[bool] = Query(None, description="Filter by active flag")
):
    """Get users with their role and permissions"""
    users = repo.get_all(skip=skip, limit=limit, filters={"rol_id": rol_id, "activo": activo})
    return [_with_role(u) for u in users]


@router.get("/{user_id}", response_model=Dict,
            dependencies=[Depends(require_permission(Permission.VIEW_USUARIOS))])
async def get_user(user_id: int):
    """Get a user by id"""
    user = repo.get_by_id(user_id)
    if not user:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"User {user_id} not found"
        )
    return _with_role(user)


@router.patch("/{user_id}", response_model=Dict,
              dependencies=[Depends(require_permission(Permission.EDIT_USUARIOS))])
async def update_user(user_id: int, updates: UserUpdate):
    """Update a user's properties"""
    if not repo.exists(user_id):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"User {user_id} not found"
        )

    update_data = updates.model_dump(exclude_unset=True)
    if not update_data:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="No valid updates provided"
        )
    if update_data.get("usuario"):
        update_data["usuario"] = normalize_email(update_data["usuario"])
        if repo.find_by_username(update_data["usuario"], exclude_id=user_id):
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail=f"User {update_data['usuario']} already exists"
            )

    return _with_role(repo.update(user_id, update_data))


@router.delete("/{user_id}", status_code=status.HTTP_204_NO_CONTENT,
               dependencies=[Depends(require_permission(Permission.DELETE_USUARIOS))])
async def delete_user(user_id: int):
    """Delete a user"""
    success = repo.delete(user_id)
    if not success:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"User {user_id} not found"
        )
    return None
