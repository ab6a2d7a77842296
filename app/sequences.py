# Integer id sequences on top of MongoDB, which has no native auto-increment.
# One counter document per entity key in the `counters` collection: {_id: key, seq: <last issued>}.
import logging

from pymongo import ReturnDocument
from pymongo.collection import Collection
from pymongo.errors import PyMongoError

from .errors import StorageError

logger = logging.getLogger("luxehomes.storage")

COUNTERS = "counters"

# The counter holds the last issued value, so the first id handed out is INITIAL_SEQUENCE + 1
INITIAL_SEQUENCE = 0


class SequenceGenerator:
    """
    Issue monotonically increasing integers per key.

    Each call is a single atomic $inc with upsert on the counter document, so
    concurrent callers never receive the same value. A missing counter is created
    on first use. There is no read-then-write fallback: if the atomic update fails
    the caller gets a StorageError and no id.
    """

    def __init__(self, collection: Collection) -> None:
        self._counters = collection

    def ensure(self, key: str) -> None:
        """Create the counter for `key` at INITIAL_SEQUENCE unless it already exists."""
        try:
            self._counters.update_one(
                {"_id": key},
                {"$setOnInsert": {"seq": INITIAL_SEQUENCE}},
                upsert=True,
            )
        except PyMongoError as exc:
            logger.error("Error initializing sequence %s: %s", key, exc)
            raise StorageError(f"Could not initialize sequence {key}") from exc

    def next_id(self, key: str) -> int:
        try:
            doc = self._counters.find_one_and_update(
                {"_id": key},
                {"$inc": {"seq": 1}},
                upsert=True,
                return_document=ReturnDocument.AFTER,
            )
        except PyMongoError as exc:
            logger.error("Error advancing sequence %s: %s", key, exc)
            raise StorageError(f"Could not allocate id for {key}") from exc
        if doc is None or "seq" not in doc:
            raise StorageError(f"Sequence {key} returned no value")
        return int(doc["seq"])
