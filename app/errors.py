# Exceptions raised across the storage boundary.
# Absence is never an error: lookups return None / False / [] for "no data".


class StorageError(Exception):
    """The document store could not complete an operation (unreachable, driver error, ...)."""


class DuplicateEntryError(StorageError):
    """A unique index rejected the write (duplicate email, duplicate wishlist entry)."""
