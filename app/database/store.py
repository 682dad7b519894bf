"""
Active data store for the process.

The backend is chosen once, during application startup, by probing MongoDB.
Every request afterwards goes through the same ``DataStore``; a transient
outage never switches a running process to a different backend.
"""
from dataclasses import dataclass
from typing import Optional

from app.database.backends.base import Repository
from app.database.backends.memory_backend import MemoryRepository
from app.database.backends.mongo_backend import MongoRepository
from app.database.conn import mongo_client
from app.database.schema import ensure_collections_and_indexes
from app.database.seed import seed_demo_data
from app.models.project.project import ProjectDocument
from app.models.user.user import UserDocument
from app.utils.logger_utils import logger
from config import SEED_CONFIG, database_config

MONGO_BACKEND = "mongodb"
MEMORY_BACKEND = "memory"


@dataclass
class DataStore:
    users: Repository
    projects: Repository
    backend: str


_active_store: Optional[DataStore] = None


def memory_store() -> DataStore:
    return DataStore(
        users=MemoryRepository(database_config["USER_COLLECTION"], UserDocument),
        projects=MemoryRepository(database_config["PROJECT_COLLECTION"], ProjectDocument),
        backend=MEMORY_BACKEND,
    )


def mongo_store() -> DataStore:
    db = mongo_client.database
    return DataStore(
        users=MongoRepository(db, database_config["USER_COLLECTION"], UserDocument),
        projects=MongoRepository(db, database_config["PROJECT_COLLECTION"], ProjectDocument),
        backend=MONGO_BACKEND,
    )


async def init_store() -> DataStore:
    """Probe MongoDB and install the backend this process will use."""
    if mongo_client.configured:
        await mongo_client.connect()
        if await mongo_client.ping():
            try:
                await ensure_collections_and_indexes()
                logger.info("✅ Ensured DB schema (collections, validators, indexes)")
            except Exception as e:
                logger.warning(f"⚠️ Failed to ensure DB schema: {e}")
            return use_store(mongo_store())
        await mongo_client.close()
        logger.warning("⚠️ MongoDB unreachable, using in-memory store; data will not persist")
    else:
        logger.warning("⚠️ MONGO_URI not set, using in-memory store; data will not persist")

    store = use_store(memory_store())
    if SEED_CONFIG["SEED_DEMO_DATA"]:
        await seed_demo_data(store, SEED_CONFIG["SEED_DEMO_PASSWORD"])
    return store


def use_store(store: DataStore) -> DataStore:
    global _active_store
    _active_store = store
    logger.info(f"Data store backend: {store.backend}")
    return store


def get_store() -> DataStore:
    if _active_store is None:
        raise RuntimeError("Data store is not initialized. Call `init_store()` first.")
    return _active_store


async def close_store() -> None:
    global _active_store
    _active_store = None
    if mongo_client.client is not None:
        await mongo_client.close()
