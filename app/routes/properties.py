# Property listing endpoints.
# Anyone can browse and search; only admins create, edit or remove listings.
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from fastapi.exceptions import RequestValidationError
from pydantic import ValidationError

from ..db import get_storage
from ..rate_limit import rate_limit
from ..storage import Storage
from .. import schemas
from .auth import require_admin

router = APIRouter()


def _get_or_404(storage: Storage, property_id: int) -> dict:
    prop = storage.get_property(property_id)
    if prop is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Property not found")
    return prop


@router.get("/properties", response_model=List[schemas.PropertyRead])
def list_properties(
    location: Optional[str] = Query(None),
    min_price: Optional[str] = Query(None, alias="minPrice"),
    max_price: Optional[str] = Query(None, alias="maxPrice"),
    property_type: Optional[str] = Query(None, alias="propertyType"),
    bedrooms: Optional[str] = Query(None),
    status_filter: Optional[str] = Query(None, alias="status"),
    storage: Storage = Depends(get_storage),
):
    """
    List properties, optionally filtered.

    Filters combine with AND; any filter not given, or given empty, is left out of
    the query. Without filters this is the whole catalog in store order.
    """
    try:
        search = schemas.PropertySearch(
            location=location,
            min_price=min_price,
            max_price=max_price,
            property_type=property_type,
            bedrooms=bedrooms,
            status=status_filter,
        )
    except ValidationError as exc:
        raise RequestValidationError(exc.errors()) from exc

    filters = search.model_dump()
    if all(v is None for v in filters.values()):
        return storage.get_all_properties()
    return storage.search_properties(**filters)


@router.get("/properties/{property_id}", response_model=schemas.PropertyRead)
def get_property(property_id: int, storage: Storage = Depends(get_storage)):
    return _get_or_404(storage, property_id)


@router.post(
    "/properties",
    response_model=schemas.PropertyRead,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(rate_limit("write"))],
)
def create_property(
    payload: schemas.PropertyCreate,
    storage: Storage = Depends(get_storage),
    admin: schemas.CurrentUser = Depends(require_admin),
):
    """Create a listing; the creating admin becomes the agent unless one is named."""
    fields = payload.model_dump()
    if fields.get("agent_id") is None:
        fields["agent_id"] = admin.user_id
    return storage.create_property(fields)


@router.put(
    "/properties/{property_id}",
    response_model=schemas.PropertyRead,
    dependencies=[Depends(rate_limit("write"))],
)
def update_property(
    property_id: int,
    payload: schemas.PropertyUpdate,
    storage: Storage = Depends(get_storage),
    _: schemas.CurrentUser = Depends(require_admin),
):
    # Only fields present (and non-null) in the request body are merged
    changes = payload.model_dump(exclude_unset=True, exclude_none=True)
    prop = storage.update_property(property_id, changes)
    if prop is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Property not found")
    return prop


@router.delete("/properties/{property_id}", response_model=schemas.MessageResponse)
def delete_property(
    property_id: int,
    storage: Storage = Depends(get_storage),
    _: schemas.CurrentUser = Depends(require_admin),
):
    if not storage.delete_property(property_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Property not found")
    return {"message": "Property deleted successfully"}
