"""
Index management for MONGOAT.

Applies a model's declared indexes to its collection.

This module is part of MONGOAT.
"""

import logging
from typing import Any, Iterable

from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo.errors import OperationFailure

from ..types import IndexKeys, IndexSpecification

logger = logging.getLogger(__name__)


def normalize_keys(keys: IndexKeys) -> list[tuple[str, Any]]:
    """
    Normalize index keys to a list of (field_name, direction) tuples.

    Args:
        keys: Index keys as dict or list of tuples/lists
    """
    if isinstance(keys, dict):
        return [(k, v) for k, v in keys.items()]
    return [(k, v) for k, v in keys]


class IndexManager:
    """
    Replaces the indexes of a collection with the declared ones.

    When a model declares indexes, every existing non-`_id` index is
    dropped and the declared ones are created in order. A model that
    declares no indexes leaves its collection untouched.
    """

    def __init__(self, mongo_db: AsyncIOMotorDatabase) -> None:
        """
        Initialize the index manager.

        Args:
            mongo_db: MongoDB database instance
        """
        self._mongo_db = mongo_db

    async def sync_indexes(
        self, collection_name: str, indexes: Iterable[IndexSpecification]
    ) -> list[str]:
        """
        Drop and recreate the indexes of a collection.

        Args:
            collection_name: Collection to update
            indexes: Index specifications, each with a ``key`` and any
                create_index options

        Returns:
            Names of the created indexes

        Raises:
            ValueError: If an index specification has no ``key``
            OperationFailure: If MongoDB rejects an index
        """
        indexes = list(indexes)
        if not indexes:
            logger.debug(f"[{collection_name}] No indexes declared. Skipping index setup.")
            return []

        for index in indexes:
            if not index.get("key"):
                raise ValueError(f"[{collection_name}] Index specification without 'key': {index}")

        collection = self._mongo_db[collection_name]
        await collection.drop_indexes()
        logger.info(f"[{collection_name}] Dropped existing indexes")

        created = []
        for index in indexes:
            options = {k: v for k, v in index.items() if k != "key"}
            try:
                name = await collection.create_index(normalize_keys(index["key"]), **options)
            except OperationFailure as e:
                logger.error(
                    f"[{collection_name}] Error creating index {index}: {e}",
                    exc_info=True,
                )
                raise
            created.append(name)
            logger.info(f"[{collection_name}] Created index '{name}'")

        return created
