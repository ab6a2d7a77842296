# Admin-only account management and dashboard figures.
from typing import List

from fastapi import APIRouter, Depends, HTTPException, status

from ..db import get_storage
from ..errors import DuplicateEntryError
from ..models import ROLE_ADMIN, without_password
from ..rate_limit import rate_limit
from ..storage import Storage
from .. import schemas
from .auth import require_admin

router = APIRouter()


def _get_user_or_404(storage: Storage, user_id: int) -> dict:
    user = storage.get_user(user_id)
    if user is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    return user


# At least one administrator must remain; the next startup would only recreate the seeded one
def _ensure_not_last_admin(storage: Storage, user: dict) -> None:
    if user.get("role") == ROLE_ADMIN and storage.count_admins() <= 1:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Cannot remove the last administrator")


@router.get("/users", response_model=List[schemas.UserRead])
def list_users(
    storage: Storage = Depends(get_storage),
    _: schemas.CurrentUser = Depends(require_admin),
):
    return [without_password(u) for u in storage.get_all_users()]


@router.put(
    "/users/{user_id}",
    response_model=schemas.UserRead,
    dependencies=[Depends(rate_limit("write"))],
)
def update_user(
    user_id: int,
    payload: schemas.UserUpdate,
    storage: Storage = Depends(get_storage),
    _: schemas.CurrentUser = Depends(require_admin),
):
    changes = payload.model_dump(exclude_unset=True, exclude_none=True)
    if changes.get("role", ROLE_ADMIN) != ROLE_ADMIN:
        _ensure_not_last_admin(storage, _get_user_or_404(storage, user_id))
    try:
        user = storage.update_user(user_id, changes)
    except DuplicateEntryError:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Email already in use")
    if user is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    return without_password(user)


@router.delete("/users/{user_id}", response_model=schemas.MessageResponse)
def delete_user(
    user_id: int,
    storage: Storage = Depends(get_storage),
    _: schemas.CurrentUser = Depends(require_admin),
):
    _ensure_not_last_admin(storage, _get_user_or_404(storage, user_id))
    if not storage.delete_user(user_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    return {"message": "User deleted successfully"}


@router.get("/dashboard/stats", response_model=schemas.DashboardStats)
def dashboard_stats(
    storage: Storage = Depends(get_storage),
    _: schemas.CurrentUser = Depends(require_admin),
):
    """
    Headline numbers for the admin dashboard.

    monthlyRevenue is the 3% agent commission summed over listings marked sold.
    """
    stats = storage.dashboard_stats()
    stats["monthly_revenue"] = float(stats["monthly_revenue"])
    return stats
