"""
Pikecape Backend - Duck Repository (Data-Access Layer)
=======================================================

What:  CRUD operations for duck documents stored in MongoDB.
How:   Wraps one async collection handle. Every operation is a single
       round-trip (create is insert + read-back) and every failure is
       normalized into DataAccessError(status=500).
Who:   Called by the duck route handlers through get_duck_repository.
When:  Once per request; the repository holds no state between calls.

Operation Map:
    find_all()            → find({})                   → list of documents
    find_by_uid(uid)      → find_one({_id})            → document or None
    create(data)          → insert_one + find_one       → created document
    update(uid, data)     → update_one({_id}, {$set})  → UpdateOutcome
    delete_by_uid(uid)    → delete_one({_id})          → DeleteOutcome

Identifiers:
    `_id` is a UUID4 string generated here, not an ObjectId assigned by the
    store. Lookups use the string as-is. Once assigned the id never changes:
    create overwrites any caller-supplied `_id`, update strips it.
"""

import logging
import uuid
from typing import Any, Callable, Dict, List, Optional

from pymongo.asynchronous.collection import AsyncCollection

from pikecape.exceptions import DataAccessError
from pikecape.schemas.duck import DeleteOutcome, UpdateOutcome

logger = logging.getLogger(__name__)

Document = Dict[str, Any]


def new_uid() -> str:
    return str(uuid.uuid4())


def _require_uid(uid: Any) -> str:
    if not isinstance(uid, str) or not uid.strip():
        raise ValueError(f"Malformed identifier: {uid!r}")
    return uid


class DuckRepository:
    """
    Data-access layer for the `duck` collection.

    Args:
        collection: Async collection handle (injected; see database.py)
        id_factory: Produces identifiers for new documents (UUID4 strings)

    Error Handling Strategy:
        Any exception from the driver, or a malformed identifier, is logged
        and re-raised as DataAccessError with the cause chained. A
        DataAccessError raised inside an operation propagates unchanged.
        Missing documents are NOT errors: find_by_uid returns None and
        update/delete report zero counts.
    """

    def __init__(
        self,
        collection: AsyncCollection,
        id_factory: Callable[[], str] = new_uid,
    ):
        self.collection = collection
        self.id_factory = id_factory

    async def find_all(self) -> List[Document]:
        """
        Return every duck in the store's natural order.

        No sort is applied; an empty collection yields [].
        """
        try:
            return await self.collection.find({}).to_list(length=None)
        except Exception as e:
            logger.error("Database error listing ducks: %s", e)
            raise DataAccessError(
                message=f"Failed to fetch entities; {e}",
                context={"error_type": type(e).__name__},
            ) from e

    async def find_by_uid(self, uid: str) -> Optional[Document]:
        try:
            return await self.collection.find_one({"_id": _require_uid(uid)})
        except Exception as e:
            logger.error("Database error fetching duck %s: %s", uid, e)
            raise DataAccessError(
                message=f"Failed to fetch entity; {e}",
                context={"uid": uid, "error_type": type(e).__name__},
            ) from e

    async def create(self, data: Document) -> Document:
        """
        Insert a new duck and return it as stored.

        Workflow:
            1. Generate a new id and merge it over the caller's fields
            2. insert_one the document
            3. Read it back by id so the response reflects what was persisted

        Raises:
            DataAccessError: write not acknowledged, document missing on
                read-back, or any driver failure
        """
        try:
            document = {**data, "_id": self.id_factory()}
            result = await self.collection.insert_one(document)
            if not result.acknowledged:
                raise DataAccessError(
                    message="Failed to create entity; operation not acknowledged",
                    context={"uid": document["_id"]},
                )
            logger.info("Duck created: %s", document["_id"])
            created = await self.collection.find_one({"_id": document["_id"]})
            if created is None:
                raise DataAccessError(
                    message="Failed to create entity; read-back returned no document",
                    context={"uid": document["_id"]},
                )
            return created
        except DataAccessError:
            raise
        except Exception as e:
            logger.error("Database error creating duck: %s", e)
            raise DataAccessError(
                message=f"Failed to create entity; {e}",
                context={"error_type": type(e).__name__},
            ) from e

    async def update(self, uid: str, data: Document) -> UpdateOutcome:
        """
        Apply `data` to the duck with `$set` semantics.

        Fields present in `data` overwrite the stored ones; absent fields are
        left alone. `_id` is never rewritten. Zero matches is reported, not
        raised.
        """
        try:
            fields = {key: value for key, value in data.items() if key != "_id"}
            result = await self.collection.update_one(
                {"_id": _require_uid(uid)},
                {"$set": fields},
            )
            outcome = UpdateOutcome(
                acknowledged=result.acknowledged,
                matched_count=result.matched_count,
                modified_count=result.modified_count,
            )
        except Exception as e:
            logger.error("Database error updating duck %s: %s", uid, e)
            raise DataAccessError(
                message=f"Failed to update entity; {e}",
                context={"uid": uid, "error_type": type(e).__name__},
            ) from e

        logger.info(
            "Duck %s updated: matched=%d modified=%d",
            uid,
            outcome.matched_count,
            outcome.modified_count,
        )
        return outcome

    async def delete_by_uid(self, uid: str) -> DeleteOutcome:
        try:
            result = await self.collection.delete_one({"_id": _require_uid(uid)})
            outcome = DeleteOutcome(
                acknowledged=result.acknowledged,
                deleted_count=result.deleted_count,
            )
        except Exception as e:
            logger.error("Database error deleting duck %s: %s", uid, e)
            raise DataAccessError(
                message=f"Failed to delete entity; {e}",
                context={"uid": uid, "error_type": type(e).__name__},
            ) from e

        logger.info("Duck %s deleted: count=%d", uid, outcome.deleted_count)
        return outcome
