# Document-store layout: collection names, enumerated field values and document helpers.
# Stored documents use snake_case keys and an integer `id` assigned by the sequence generator;
# Mongo's own `_id` never leaves the storage layer.
from datetime import datetime, timezone
from typing import Any, Dict, Literal

# Collections; each entity collection also names its id sequence in `counters`
USERS = "users"
PROPERTIES = "properties"
WISHLISTS = "wishlists"
INQUIRIES = "inquiries"

ENTITY_COLLECTIONS = (USERS, PROPERTIES, WISHLISTS, INQUIRIES)

Role = Literal["user", "admin"]
PropertyType = Literal["house", "apartment", "condo", "villa", "townhouse"]
PropertyStatus = Literal["available", "pending", "sold", "rented"]
InquiryStatus = Literal["pending", "read", "replied"]

ROLE_USER = "user"
ROLE_ADMIN = "admin"
INQUIRY_PENDING = "pending"

# Agent commission applied to sold listings in the dashboard revenue figure
COMMISSION_RATE = "0.03"

# Projection that strips Mongo's ObjectId from every read
NO_OBJECT_ID = {"_id": 0}


def utcnow() -> datetime:
    # BSON dates hold milliseconds; truncate so a returned document equals its stored copy
    now = datetime.now(timezone.utc)
    return now.replace(microsecond=now.microsecond // 1000 * 1000)


def without_password(user: Dict[str, Any]) -> Dict[str, Any]:
    out = dict(user)
    out.pop("password", None)
    return out
