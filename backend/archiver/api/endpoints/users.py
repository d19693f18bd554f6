from typing import Any, List

from fastapi import APIRouter, Depends, HTTPException, Path
from sqlalchemy.orm import Session

from archiver.api.deps import get_db, get_current_active_user, get_current_admin
from archiver.crud.user import get_user, get_users, update_user, deactivate_user
from archiver.models.user import User
from archiver.schemas.user import User as UserSchema, UserUpdate, UserAdminUpdate

router = APIRouter()


@router.get("/", response_model=List[UserSchema])
def read_users(
    db: Session = Depends(get_db),
    skip: int = 0,
    limit: int = 100,
    active_only: bool = True,
    _: Any = Depends(get_current_admin),
) -> Any:
    """
    Retrieve users.
    """
    return get_users(db, skip=skip, limit=limit, active_only=active_only)


@router.get("/me", response_model=UserSchema)
def read_user_me(
    current_user: User = Depends(get_current_active_user),
) -> Any:
    """
    Get current user.
    """
    return current_user


@router.put("/me", response_model=UserSchema)
def update_user_me(
    *,
    db: Session = Depends(get_db),
    user_in: UserUpdate,
    current_user: User = Depends(get_current_active_user),
) -> Any:
    """
    Update own user. Role and activation flags are not accepted here.
    """
    return update_user(db, user_id=current_user.id, user=user_in)


@router.get("/{user_id}", response_model=UserSchema)
def read_user(
    *,
    db: Session = Depends(get_db),
    user_id: int = Path(..., description="The ID of the user to get"),
    _: Any = Depends(get_current_admin),
) -> Any:
    """
    Get user by ID.
    """
    user = get_user(db, user_id=user_id)
    if not user:
        raise HTTPException(
            status_code=404,
            detail="User not found",
        )
    return user


@router.put("/{user_id}", response_model=UserSchema)
def update_user_api(
    *,
    db: Session = Depends(get_db),
    user_id: int = Path(..., description="The ID of the user to update"),
    user_in: UserAdminUpdate,
    _: Any = Depends(get_current_admin),
) -> Any:
    """
    Update a user.
    """
    user = update_user(db, user_id=user_id, user=user_in)
    if not user:
        raise HTTPException(
            status_code=404,
            detail="User not found",
        )
    return user


@router.delete("/{user_id}", response_model=bool)
def delete_user_api(
    *,
    db: Session = Depends(get_db),
    user_id: int = Path(..., description="The ID of the user to deactivate"),
    _: Any = Depends(get_current_admin),
) -> Any:
    """
    Deactivate a user. Accounts are never hard-deleted.
    """
    result = deactivate_user(db, user_id=user_id)
    if not result:
        raise HTTPException(
            status_code=404,
            detail="User not found",
        )
    return result
