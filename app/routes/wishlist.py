# Wishlist endpoints for authenticated users. Every call is scoped to the caller's own entries.
from typing import List

from fastapi import APIRouter, Depends, HTTPException, status

from ..db import get_storage
from ..errors import DuplicateEntryError
from ..storage import Storage
from .. import schemas
from .auth import get_current_user

router = APIRouter()


@router.get("/wishlist", response_model=List[schemas.WishlistItemRead])
def get_wishlist(
    storage: Storage = Depends(get_storage),
    user: schemas.CurrentUser = Depends(get_current_user),
):
    return storage.get_user_wishlist(user.user_id)


@router.post("/wishlist", response_model=schemas.WishlistRead, status_code=status.HTTP_201_CREATED)
def add_to_wishlist(
    payload: schemas.WishlistCreate,
    storage: Storage = Depends(get_storage),
    user: schemas.CurrentUser = Depends(get_current_user),
):
    """
    Save a property to the caller's wishlist.

    Duplicates are rejected by the store's unique (user, property) index rather
    than a separate lookup, so two simultaneous adds yield one entry and one 400.
    """
    if storage.get_property(payload.property_id) is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Property not found")
    try:
        return storage.add_to_wishlist(user.user_id, payload.property_id)
    except DuplicateEntryError:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Property already in wishlist")


@router.delete("/wishlist/{property_id}", response_model=schemas.MessageResponse)
def remove_from_wishlist(
    property_id: int,
    storage: Storage = Depends(get_storage),
    user: schemas.CurrentUser = Depends(get_current_user),
):
    if not storage.remove_from_wishlist(user.user_id, property_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Wishlist item not found")
    return {"message": "Removed from wishlist"}
