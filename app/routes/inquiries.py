# Contact-form inquiries: anyone may submit, admins triage.
from typing import List

from fastapi import APIRouter, Depends, HTTPException, status

from ..db import get_storage
from ..rate_limit import rate_limit
from ..storage import Storage
from .. import schemas
from .auth import require_admin

router = APIRouter()


@router.post(
    "/inquiries",
    response_model=schemas.InquiryRead,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(rate_limit("write"))],
)
def create_inquiry(payload: schemas.InquiryCreate, storage: Storage = Depends(get_storage)):
    # Status is assigned by storage (always "pending"), never taken from the client
    return storage.create_inquiry(payload.model_dump())


@router.get("/inquiries", response_model=List[schemas.InquiryRead])
def list_inquiries(
    storage: Storage = Depends(get_storage),
    _: schemas.CurrentUser = Depends(require_admin),
):
    return storage.get_all_inquiries()


@router.get("/inquiries/{inquiry_id}", response_model=schemas.InquiryRead)
def get_inquiry(
    inquiry_id: int,
    storage: Storage = Depends(get_storage),
    _: schemas.CurrentUser = Depends(require_admin),
):
    inquiry = storage.get_inquiry(inquiry_id)
    if inquiry is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Inquiry not found")
    return inquiry


@router.put("/inquiries/{inquiry_id}/status", response_model=schemas.InquiryRead)
def update_inquiry_status(
    inquiry_id: int,
    payload: schemas.InquiryStatusUpdate,
    storage: Storage = Depends(get_storage),
    _: schemas.CurrentUser = Depends(require_admin),
):
    inquiry = storage.update_inquiry_status(inquiry_id, payload.status)
    if inquiry is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Inquiry not found")
    return inquiry


@router.delete("/inquiries/{inquiry_id}", response_model=schemas.MessageResponse)
def delete_inquiry(
    inquiry_id: int,
    storage: Storage = Depends(get_storage),
    _: schemas.CurrentUser = Depends(require_admin),
):
    if not storage.delete_inquiry(inquiry_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Inquiry not found")
    return {"message": "Inquiry deleted successfully"}
