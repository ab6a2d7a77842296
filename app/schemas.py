# Pydantic models (request/response DTOs) used by the API layer.
# Stored documents are snake_case; the JSON API speaks camelCase through aliases.
# Request models forbid unknown fields so nothing unexpected reaches storage.
from datetime import datetime
from decimal import Decimal, InvalidOperation
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator
from pydantic.alias_generators import to_camel

from .models import InquiryStatus, PropertyStatus, PropertyType, Role


class APIModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class RequestModel(APIModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="forbid")


# Normalize email input to lowercase without surrounding whitespace
def _normalize_email(v):
    if isinstance(v, str):
        v = v.strip().lower()
    return v


# Prices travel as decimal strings; numbers are accepted and converted
def _normalize_price(v):
    if v is None:
        return v
    if isinstance(v, bool):
        raise ValueError("price must be a number")
    if isinstance(v, (int, float, Decimal)):
        v = str(v)
    if isinstance(v, str):
        v = v.strip()
        try:
            amount = Decimal(v)
        except InvalidOperation:
            raise ValueError("price must be a decimal number")
        if not amount.is_finite() or amount < 0:
            raise ValueError("price must be a non-negative amount")
    return v


def _check_half_steps(v):
    if v is not None and (v * 2) % 1 != 0:
        raise ValueError("bathrooms must be a whole or half number")
    return v


# ----------------
# Users and auth
# ----------------
# Request payload for registration; role is never client-controlled here
class UserCreate(RequestModel):
    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)
    email: EmailStr
    password: str = Field(..., min_length=6)

    @field_validator("email", mode="before")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        return _normalize_email(v)


class LoginRequest(RequestModel):
    email: EmailStr
    password: str = Field(..., min_length=1)

    @field_validator("email", mode="before")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        return _normalize_email(v)


# Admin-side partial update of an account (no password changes through this path)
class UserUpdate(RequestModel):
    first_name: Optional[str] = Field(None, min_length=1, max_length=100)
    last_name: Optional[str] = Field(None, min_length=1, max_length=100)
    email: Optional[EmailStr] = None
    role: Optional[Role] = None

    @field_validator("email", mode="before")
    @classmethod
    def normalize_email(cls, v: Optional[str]) -> Optional[str]:
        return _normalize_email(v)


# API response for a user record; the password hash is never part of it
class UserRead(APIModel):
    id: int
    first_name: str
    last_name: str
    email: str
    role: Role
    created_at: Optional[datetime] = None


class AuthResponse(APIModel):
    user: UserRead
    token: str


# Identity decoded from a bearer token
class CurrentUser(BaseModel):
    user_id: int
    email: str
    role: Role


# ----------------
# Properties
# ----------------
class PropertyCreate(RequestModel):
    title: str = Field(..., min_length=1, max_length=255)
    description: str = Field(..., min_length=1)
    price: str
    location: str = Field(..., min_length=1, max_length=255)
    property_type: PropertyType
    bedrooms: int = Field(..., ge=0)
    bathrooms: float = Field(..., ge=0)
    area: int = Field(..., ge=0)
    status: PropertyStatus = "available"
    images: List[str] = Field(default_factory=list)
    features: List[str] = Field(default_factory=list)
    agent_id: Optional[int] = None

    @field_validator("title", "location", mode="before")
    @classmethod
    def strip_text(cls, v: str) -> str:
        # Trim surrounding whitespace before validation
        if isinstance(v, str):
            v = v.strip()
        return v

    @field_validator("price", mode="before")
    @classmethod
    def normalize_price(cls, v) -> str:
        return _normalize_price(v)

    @field_validator("bathrooms")
    @classmethod
    def half_baths(cls, v: float) -> float:
        return _check_half_steps(v)


# Partial update: only the fields present in the body are written
class PropertyUpdate(RequestModel):
    title: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = Field(None, min_length=1)
    price: Optional[str] = None
    location: Optional[str] = Field(None, min_length=1, max_length=255)
    property_type: Optional[PropertyType] = None
    bedrooms: Optional[int] = Field(None, ge=0)
    bathrooms: Optional[float] = Field(None, ge=0)
    area: Optional[int] = Field(None, ge=0)
    status: Optional[PropertyStatus] = None
    images: Optional[List[str]] = None
    features: Optional[List[str]] = None
    agent_id: Optional[int] = None

    @field_validator("price", mode="before")
    @classmethod
    def normalize_price(cls, v) -> Optional[str]:
        return _normalize_price(v)

    @field_validator("bathrooms")
    @classmethod
    def half_baths(cls, v: Optional[float]) -> Optional[float]:
        return _check_half_steps(v)


# Catalog search filters from the query string; a blank value means "no filter"
class PropertySearch(RequestModel):
    location: Optional[str] = None
    min_price: Optional[float] = Field(None, ge=0)
    max_price: Optional[float] = Field(None, ge=0)
    property_type: Optional[PropertyType] = None
    bedrooms: Optional[int] = Field(None, ge=0)
    status: Optional[PropertyStatus] = None

    @field_validator("*", mode="before")
    @classmethod
    def blank_is_absent(cls, v):
        if isinstance(v, str) and not v.strip():
            return None
        return v


class PropertyRead(APIModel):
    id: int
    title: str
    description: str
    price: str
    location: str
    property_type: str
    bedrooms: int
    bathrooms: float
    area: int
    status: str
    images: List[str] = []
    features: List[str] = []
    agent_id: Optional[int] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


# ----------------
# Wishlist
# ----------------
class WishlistCreate(RequestModel):
    property_id: int = Field(..., ge=1)


class WishlistRead(APIModel):
    id: int
    user_id: int
    property_id: int
    created_at: Optional[datetime] = None


# Wishlist entry joined with the listing it points at
class WishlistItemRead(WishlistRead):
    property: PropertyRead


# ----------------
# Inquiries
# ----------------
class InquiryCreate(RequestModel):
    name: str = Field(..., min_length=1, max_length=200)
    email: EmailStr
    phone: Optional[str] = Field(None, max_length=50)
    message: str = Field(..., min_length=1, max_length=5000)
    property_id: Optional[int] = Field(None, ge=1)

    @field_validator("name", "message", mode="before")
    @classmethod
    def strip_text(cls, v: str) -> str:
        if isinstance(v, str):
            v = v.strip()
        return v


class InquiryStatusUpdate(RequestModel):
    status: InquiryStatus


class InquiryRead(APIModel):
    id: int
    name: str
    email: str
    phone: Optional[str] = None
    message: str
    property_id: Optional[int] = None
    status: InquiryStatus
    created_at: Optional[datetime] = None


# ----------------
# Misc
# ----------------
class DashboardStats(APIModel):
    total_properties: int
    active_users: int
    pending_inquiries: int
    monthly_revenue: float


# Confirmation body for deletes and other message-only responses
class MessageResponse(BaseModel):
    message: str
