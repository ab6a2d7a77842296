# Entity repository: the only code that reads or writes the document store.
# One Storage instance per process, built around an injected pymongo Database.
import logging
import re
from contextlib import contextmanager
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, Iterator, List, Optional

from pymongo import ReturnDocument
from pymongo.database import Database
from pymongo.errors import DuplicateKeyError, PyMongoError

from . import models
from .errors import DuplicateEntryError, StorageError
from .sequences import COUNTERS, SequenceGenerator

logger = logging.getLogger("luxehomes.storage")

Document = Dict[str, Any]

# Fields the caller may never overwrite through a partial update
_IMMUTABLE = ("id", "_id", "created_at")


def _to_decimal(value: Any) -> Optional[Decimal]:
    try:
        return Decimal(str(value))
    except (InvalidOperation, ValueError):
        return None


class Storage:
    """
    CRUD and query operations for users, properties, wishlist entries and inquiries.

    Contract:
    - Lookups return the document (without Mongo's `_id`) or None; lists may be empty.
    - Deletes return True only when a document was actually removed.
    - Any driver failure is logged and re-raised as StorageError, so "no data" and
      "store unreachable" are never confused.
    - Unique-index violations surface as DuplicateEntryError.
    """

    def __init__(self, db: Database) -> None:
        self.db = db
        self._users = db[models.USERS]
        self._properties = db[models.PROPERTIES]
        self._wishlists = db[models.WISHLISTS]
        self._inquiries = db[models.INQUIRIES]
        self.sequences = SequenceGenerator(db[COUNTERS])

    @contextmanager
    def _guard(self, operation: str) -> Iterator[None]:
        try:
            yield
        except DuplicateKeyError as exc:
            logger.warning("Duplicate key in %s: %s", operation, exc)
            raise DuplicateEntryError(operation) from exc
        except PyMongoError as exc:
            logger.error("Error in %s: %s", operation, exc)
            raise StorageError(operation) from exc

    def _insert(self, collection, key: str, fields: Document, operation: str) -> Document:
        doc = dict(fields)
        doc["id"] = self.sequences.next_id(key)
        with self._guard(operation):
            # insert_one adds _id to the dict it is given; keep ours clean
            collection.insert_one(dict(doc))
        return doc

    def _update(self, collection, entity_id: int, changes: Document, operation: str) -> Optional[Document]:
        with self._guard(operation):
            return collection.find_one_and_update(
                {"id": entity_id},
                {"$set": changes},
                projection=models.NO_OBJECT_ID,
                return_document=ReturnDocument.AFTER,
            )

    def _delete(self, collection, query: Document, operation: str) -> bool:
        with self._guard(operation):
            result = collection.delete_one(query)
        return result.deleted_count > 0

    # ----------------
    # Users
    # ----------------
    def get_user(self, user_id: int) -> Optional[Document]:
        with self._guard("get_user"):
            return self._users.find_one({"id": user_id}, models.NO_OBJECT_ID)

    def get_user_by_email(self, email: str) -> Optional[Document]:
        with self._guard("get_user_by_email"):
            return self._users.find_one({"email": email}, models.NO_OBJECT_ID)

    def create_user(self, fields: Document) -> Document:
        """Insert a user. `fields["password"]` must already be hashed."""
        doc = dict(fields)
        doc.setdefault("role", models.ROLE_USER)
        doc["created_at"] = models.utcnow()
        return self._insert(self._users, models.USERS, doc, "create_user")

    def update_user(self, user_id: int, changes: Document) -> Optional[Document]:
        changes = {k: v for k, v in changes.items() if k not in _IMMUTABLE}
        if not changes:
            return self.get_user(user_id)
        return self._update(self._users, user_id, changes, "update_user")

    def delete_user(self, user_id: int) -> bool:
        return self._delete(self._users, {"id": user_id}, "delete_user")

    def get_all_users(self) -> List[Document]:
        with self._guard("get_all_users"):
            return list(self._users.find({}, models.NO_OBJECT_ID))

    def count_admins(self) -> int:
        with self._guard("count_admins"):
            return self._users.count_documents({"role": models.ROLE_ADMIN})

    # ----------------
    # Properties
    # ----------------
    def get_property(self, property_id: int) -> Optional[Document]:
        with self._guard("get_property"):
            return self._properties.find_one({"id": property_id}, models.NO_OBJECT_ID)

    def get_all_properties(self) -> List[Document]:
        with self._guard("get_all_properties"):
            return list(self._properties.find({}, models.NO_OBJECT_ID))

    def create_property(self, fields: Document) -> Document:
        doc = dict(fields)
        now = models.utcnow()
        doc["created_at"] = now
        doc["updated_at"] = now
        return self._insert(self._properties, models.PROPERTIES, doc, "create_property")

    def update_property(self, property_id: int, changes: Document) -> Optional[Document]:
        """Merge `changes` into the property and refresh updated_at, even when nothing else changed."""
        changes = {k: v for k, v in changes.items() if k not in _IMMUTABLE}
        changes["updated_at"] = models.utcnow()
        return self._update(self._properties, property_id, changes, "update_property")

    def delete_property(self, property_id: int) -> bool:
        return self._delete(self._properties, {"id": property_id}, "delete_property")

    def search_properties(
        self,
        location: Optional[str] = None,
        min_price: Optional[float] = None,
        max_price: Optional[float] = None,
        property_type: Optional[str] = None,
        bedrooms: Optional[int] = None,
        status: Optional[str] = None,
    ) -> List[Document]:
        """
        Return properties matching every supplied filter.

        - location: case-insensitive substring
        - min_price / max_price: inclusive bounds, compared as decimals
        - property_type, status: exact match
        - bedrooms: at least this many
        Filters left as None are not part of the query.
        """
        query: Document = {}
        if location:
            query["location"] = {"$regex": re.escape(location), "$options": "i"}
        if property_type:
            query["property_type"] = property_type
        if bedrooms is not None:
            query["bedrooms"] = {"$gte": bedrooms}
        if status:
            query["status"] = status

        with self._guard("search_properties"):
            items = list(self._properties.find(query, models.NO_OBJECT_ID))

        # Prices are stored as strings; a string range in Mongo would compare lexically
        if min_price is None and max_price is None:
            return items
        low = _to_decimal(min_price) if min_price is not None else None
        high = _to_decimal(max_price) if max_price is not None else None
        matched = []
        for item in items:
            price = _to_decimal(item.get("price"))
            if price is None:
                continue
            if low is not None and price < low:
                continue
            if high is not None and price > high:
                continue
            matched.append(item)
        return matched

    # ----------------
    # Wishlists
    # ----------------
    def get_user_wishlist(self, user_id: int) -> List[Document]:
        """
        Wishlist entries for a user, each with its property under "property".

        One property lookup per entry; entries whose property was deleted are skipped.
        """
        with self._guard("get_user_wishlist"):
            entries = list(self._wishlists.find({"user_id": user_id}, models.NO_OBJECT_ID))
        result = []
        for entry in entries:
            prop = self.get_property(entry["property_id"])
            if prop is not None:
                result.append({**entry, "property": prop})
        return result

    def add_to_wishlist(self, user_id: int, property_id: int) -> Document:
        """
        Insert a wishlist entry.

        The unique (user_id, property_id) index makes this an insert-if-absent:
        a second add for the same pair, concurrent or not, raises DuplicateEntryError.
        """
        doc = {"user_id": user_id, "property_id": property_id, "created_at": models.utcnow()}
        return self._insert(self._wishlists, models.WISHLISTS, doc, "add_to_wishlist")

    def remove_from_wishlist(self, user_id: int, property_id: int) -> bool:
        return self._delete(
            self._wishlists, {"user_id": user_id, "property_id": property_id}, "remove_from_wishlist"
        )

    def is_in_wishlist(self, user_id: int, property_id: int) -> bool:
        with self._guard("is_in_wishlist"):
            found = self._wishlists.find_one({"user_id": user_id, "property_id": property_id})
        return found is not None

    # ----------------
    # Inquiries
    # ----------------
    def get_all_inquiries(self) -> List[Document]:
        with self._guard("get_all_inquiries"):
            return list(self._inquiries.find({}, models.NO_OBJECT_ID))

    def get_inquiry(self, inquiry_id: int) -> Optional[Document]:
        with self._guard("get_inquiry"):
            return self._inquiries.find_one({"id": inquiry_id}, models.NO_OBJECT_ID)

    def create_inquiry(self, fields: Document) -> Document:
        doc = dict(fields)
        # Status always starts pending; only update_inquiry_status moves it
        doc["status"] = models.INQUIRY_PENDING
        doc["created_at"] = models.utcnow()
        return self._insert(self._inquiries, models.INQUIRIES, doc, "create_inquiry")

    def update_inquiry_status(self, inquiry_id: int, status: str) -> Optional[Document]:
        return self._update(self._inquiries, inquiry_id, {"status": status}, "update_inquiry_status")

    def delete_inquiry(self, inquiry_id: int) -> bool:
        return self._delete(self._inquiries, {"id": inquiry_id}, "delete_inquiry")

    # ----------------
    # Dashboard
    # ----------------
    def dashboard_stats(self) -> Document:
        with self._guard("dashboard_stats"):
            total_properties = self._properties.count_documents({})
            active_users = self._users.count_documents({"role": models.ROLE_USER})
            pending_inquiries = self._inquiries.count_documents({"status": models.INQUIRY_PENDING})
            sold = list(self._properties.find({"status": "sold"}, {"_id": 0, "price": 1}))

        rate = Decimal(models.COMMISSION_RATE)
        revenue = Decimal("0")
        for item in sold:
            price = _to_decimal(item.get("price"))
            if price is not None:
                revenue += price * rate
        return {
            "total_properties": total_properties,
            "active_users": active_users,
            "pending_inquiries": pending_inquiries,
            "monthly_revenue": revenue,
        }
