import logging
from collections.abc import Mapping
from typing import Any

from bson.errors import BSONError
from fastapi import Request
from pymongo import AsyncMongoClient
from pymongo.errors import PyMongoError

from app.core.config import Settings
from app.core.exceptions import PersistenceError
from app.models import get_utc_now

logger = logging.getLogger(__name__)

TASKS_COLLECTION = "tasks"


class TaskStore:
    """
    Owns the single MongoDB client for the process and the ``tasks`` collection.

    The client connects lazily; ``connect()`` only verifies reachability so a
    missing database leaves the API up with failing task endpoints.
    """

    def __init__(self, client: AsyncMongoClient, database_name: str):
        self.client = client
        self.database = client.get_default_database(default=database_name)
        self.collection = self.database[TASKS_COLLECTION]

    @classmethod
    def from_settings(cls, settings: Settings) -> "TaskStore":
        client = AsyncMongoClient(
            settings.mongo_uri,
            serverSelectionTimeoutMS=settings.mongo_timeout_ms,
            tz_aware=True,
        )
        return cls(client, settings.mongo_database)

    async def ping(self) -> bool:
        try:
            await self.client.admin.command("ping")
            return True
        except PyMongoError as e:
            logger.error(f"MongoDB connection error: {e}")
            return False

    async def connect(self) -> bool:
        connected = await self.ping()
        if connected:
            logger.info(f"Connected to MongoDB database '{self.database.name}'")
        return connected

    async def create(self, fields: Mapping[str, Any]) -> dict[str, Any]:
        document = dict(fields)
        document.setdefault("createdAt", get_utc_now())
        try:
            result = await self.collection.insert_one(document)
        except (PyMongoError, BSONError) as e:
            raise PersistenceError(f"Failed to insert task: {e}") from e

        # insert_one sets _id on the dict it was given
        document["_id"] = result.inserted_id
        return document

    async def find_all(self) -> list[dict[str, Any]]:
        try:
            cursor = self.collection.find()
            return await cursor.to_list()
        except (PyMongoError, BSONError) as e:
            raise PersistenceError(f"Failed to read tasks: {e}") from e

    async def close(self):
        await self.client.close()
        logger.info("MongoDB connection closed")


# Dependency for getting the process-wide task store
def get_task_store(request: Request) -> TaskStore:
    return request.app.state.task_store
