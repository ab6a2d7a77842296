# Startup bootstrap: collections, indexes, id counters, the default admin and the sample catalog.
# Safe to run on every process start; each step is gated by an existence check or an upsert.
from __future__ import annotations

import logging
from typing import Callable, List

from pymongo import ASCENDING
from pymongo.errors import CollectionInvalid, PyMongoError

from . import models
from .config import Settings
from .errors import DuplicateEntryError, StorageError
from .sequences import COUNTERS
from .storage import Storage

logger = logging.getLogger("luxehomes.seed")

SAMPLE_PROPERTIES: List[dict] = [
    {
        "title": "Luxury Modern Villa",
        "description": "A stunning modern villa with panoramic views and luxury amenities including a swimming pool, modern kitchen, and spacious living areas.",
        "price": "1250000",
        "location": "Beverly Hills, CA",
        "property_type": "villa",
        "bedrooms": 4,
        "bathrooms": 3.5,
        "area": 2500,
        "status": "available",
        "images": ["https://images.unsplash.com/photo-1600596542815-ffad4c1539a9?auto=format&fit=crop&w=800&h=600"],
        "features": ["Swimming Pool", "Garden", "Garage", "Modern Kitchen", "Fireplace", "Wine Cellar"],
    },
    {
        "title": "Downtown Luxury Apartment",
        "description": "Contemporary apartment in the heart of the city with stunning city views and modern amenities.",
        "price": "850000",
        "location": "Manhattan, NY",
        "property_type": "apartment",
        "bedrooms": 2,
        "bathrooms": 2.0,
        "area": 1200,
        "status": "available",
        "images": ["https://images.unsplash.com/photo-1522708323590-d24dbb6b0267?auto=format&fit=crop&w=800&h=600"],
        "features": ["City Views", "Modern Appliances", "Gym Access", "Concierge", "Rooftop Terrace"],
    },
    {
        "title": "Family Suburban Home",
        "description": "Perfect family home in a quiet neighborhood with great schools and family-friendly amenities.",
        "price": "475000",
        "location": "Austin, TX",
        "property_type": "house",
        "bedrooms": 3,
        "bathrooms": 2.0,
        "area": 1800,
        "status": "available",
        "images": ["https://images.unsplash.com/photo-1564013799919-ab600027ffc6?auto=format&fit=crop&w=800&h=600"],
        "features": ["Large Yard", "Fireplace", "Updated Kitchen", "Two-Car Garage", "Playground Access"],
    },
    {
        "title": "Modern Townhouse",
        "description": "Stylish townhouse with contemporary design and urban convenience.",
        "price": "725000",
        "location": "Seattle, WA",
        "property_type": "townhouse",
        "bedrooms": 3,
        "bathrooms": 2.5,
        "area": 1600,
        "status": "sold",
        "images": ["https://images.unsplash.com/photo-1449824913935-59a10b8d2000?auto=format&fit=crop&w=800&h=600"],
        "features": ["Modern Design", "Rooftop Deck", "Walk-in Closet", "Energy Efficient"],
    },
    {
        "title": "Oceanview Condo",
        "description": "Beautiful condo with breathtaking ocean views and resort-style amenities.",
        "price": "650000",
        "location": "Miami, FL",
        "property_type": "condo",
        "bedrooms": 2,
        "bathrooms": 2.0,
        "area": 1100,
        "status": "available",
        "images": ["https://images.unsplash.com/photo-1512917774080-9991f1c4c750?auto=format&fit=crop&w=800&h=600"],
        "features": ["Ocean View", "Pool Access", "Beach Access", "Balcony", "Resort Amenities"],
    },
    {
        "title": "Country Estate",
        "description": "Spacious country estate with multiple acres and traditional charm.",
        "price": "890000",
        "location": "Nashville, TN",
        "property_type": "house",
        "bedrooms": 5,
        "bathrooms": 4.0,
        "area": 3200,
        "status": "available",
        "images": ["https://images.unsplash.com/photo-1570129477492-45c003edd2be?auto=format&fit=crop&w=800&h=600"],
        "features": ["Large Acreage", "Barn", "Horse Stables", "Traditional Design", "Multiple Fireplaces"],
    },
]


def ensure_schema(storage: Storage) -> None:
    """
    Create missing collections, unique indexes and id counters.

    Indexes:
    - users.email unique (duplicate registrations fail at the store)
    - wishlists (user_id, property_id) unique (at most one entry per pair)
    - id unique on every entity collection
    """
    db = storage.db
    try:
        existing = set(db.list_collection_names())
        for name in models.ENTITY_COLLECTIONS + (COUNTERS,):
            if name not in existing:
                try:
                    db.create_collection(name)
                except CollectionInvalid:
                    # Another process starting up created it first
                    logger.info("Collection %s already exists", name)

        db[models.USERS].create_index([("email", ASCENDING)], unique=True, name="uq_users_email")
        db[models.WISHLISTS].create_index(
            [("user_id", ASCENDING), ("property_id", ASCENDING)],
            unique=True,
            name="uq_wishlists_user_property",
        )
        for name in models.ENTITY_COLLECTIONS:
            db[name].create_index([("id", ASCENDING)], unique=True, name=f"uq_{name}_id")
    except PyMongoError as exc:
        logger.error("Error preparing collections: %s", exc)
        raise StorageError("ensure_schema") from exc

    for name in models.ENTITY_COLLECTIONS:
        storage.sequences.ensure(name)


def seed_admin_and_catalog(storage: Storage, settings: Settings, hash_password: Callable[[str], str]) -> bool:
    """
    Create the default administrator and the sample catalog on a fresh database.

    Gated on the admin email: if that account exists nothing is written. Returns
    True when seeding happened.
    """
    if storage.get_user_by_email(settings.ADMIN_EMAIL) is not None:
        return False

    try:
        admin = storage.create_user(
            {
                "first_name": "Admin",
                "last_name": "User",
                "email": settings.ADMIN_EMAIL,
                "password": hash_password(settings.ADMIN_PASSWORD),
                "role": models.ROLE_ADMIN,
            }
        )
    except DuplicateEntryError:
        # Another process created the admin between the check and the insert
        logger.info("Admin account created concurrently; skipping seed")
        return False

    logger.info("Created admin account %s", settings.ADMIN_EMAIL)
    if settings.SEED_SAMPLE_PROPERTIES:
        for sample in SAMPLE_PROPERTIES:
            storage.create_property({**sample, "agent_id": admin["id"]})
        logger.info("Seeded %d sample properties", len(SAMPLE_PROPERTIES))
    return True


def bootstrap(storage: Storage, settings: Settings, hash_password: Callable[[str], str]) -> None:
    ensure_schema(storage)
    seed_admin_and_catalog(storage, settings, hash_password)
    logger.info("Database initialized")
