"""Document store collaborator: day-bucketed queries, get/create/update by id, list all.

Records cross this boundary as plain dicts with the store's opaque ``id``.
``update_document`` accepts dotted field paths (``attendance.Ana``) so one
child's entry can be written inside the per-day aggregate.
"""
from __future__ import annotations

import copy
import logging
import uuid
from datetime import datetime
from typing import Any, Optional, Protocol

from beanie import Document, PydanticObjectId
from pymongo.errors import PyMongoError

from daycare.models.attendance import AttendanceDay
from daycare.models.child import Child
from daycare.models.daily_report import DailyReport
from daycare.models.theme_config import ThemeConfig

logger = logging.getLogger(__name__)

CHILDREN = "kids_info"
ATTENDANCE = "attendance"
DAILY_REPORTS = "daily_reports"
APP_CONFIG = "app_config"

Record = dict[str, Any]


class StoreError(Exception):
    """A read or write against the document store failed."""


class DocumentStore(Protocol):
    async def query_by_date_range(
        self, collection: str, field: str, start: datetime, end: datetime
    ) -> list[Record]: ...

    async def get_document(self, collection: str, doc_id: str) -> Optional[Record]: ...

    async def create_document(
        self, collection: str, fields: Record, doc_id: Optional[str] = None
    ) -> str: ...

    async def update_document(self, collection: str, doc_id: str, fields: Record) -> bool: ...

    async def list_all(self, collection: str) -> list[Record]: ...


def safe_object_id(value: str | None) -> PydanticObjectId | None:
    if not value:
        return None
    try:
        return PydanticObjectId(value)
    except Exception:
        return None


class BeanieDocumentStore:
    """MongoDB through the Beanie documents registered in ``daycare.db``."""

    models: dict[str, type[Document]] = {
        CHILDREN: Child,
        ATTENDANCE: AttendanceDay,
        DAILY_REPORTS: DailyReport,
        APP_CONFIG: ThemeConfig,
    }

    def _model(self, collection: str) -> type[Document]:
        try:
            return self.models[collection]
        except KeyError:
            raise StoreError(f"Unknown collection: {collection}") from None

    @staticmethod
    def _key(doc_id: str):
        return safe_object_id(doc_id) or doc_id

    @staticmethod
    def _to_record(doc: Document) -> Record:
        record = doc.model_dump(exclude={"id", "revision_id"})
        record["id"] = str(doc.id)
        return record

    async def query_by_date_range(self, collection, field, start, end):
        model = self._model(collection)
        try:
            docs = await model.find({field: {"$gte": start, "$lt": end}}).to_list()
        except PyMongoError as e:
            raise StoreError(f"Query on {collection} failed: {e}") from e
        return [self._to_record(d) for d in docs]

    async def get_document(self, collection, doc_id):
        model = self._model(collection)
        try:
            doc = await model.find_one({"_id": self._key(doc_id)})
        except PyMongoError as e:
            raise StoreError(f"Get {collection}/{doc_id} failed: {e}") from e
        return self._to_record(doc) if doc else None

    async def create_document(self, collection, fields, doc_id=None):
        model = self._model(collection)
        data = dict(fields)
        if doc_id is not None:
            data["id"] = doc_id
        try:
            doc = model(**data)
            await doc.insert()
        except PyMongoError as e:
            raise StoreError(f"Create in {collection} failed: {e}") from e
        return str(doc.id)

    async def update_document(self, collection, doc_id, fields):
        model = self._model(collection)
        try:
            result = await model.find_one({"_id": self._key(doc_id)}).update({"$set": fields})
        except PyMongoError as e:
            raise StoreError(f"Update {collection}/{doc_id} failed: {e}") from e
        return bool(result and result.matched_count)

    async def list_all(self, collection):
        model = self._model(collection)
        try:
            docs = await model.find_all().to_list()
        except PyMongoError as e:
            raise StoreError(f"Listing {collection} failed: {e}") from e
        return [self._to_record(d) for d in docs]


def _set_path(target: Record, path: str, value: Any) -> None:
    keys = path.split(".")
    for key in keys[:-1]:
        nested = target.get(key)
        if not isinstance(nested, dict):
            nested = {}
            target[key] = nested
        target = nested
    target[keys[-1]] = value


class MemoryDocumentStore:
    """In-process store with the same contract, for local development and tests."""

    def __init__(self, collections: dict[str, list[Record]] | None = None):
        self._data: dict[str, dict[str, Record]] = {}
        for collection, records in (collections or {}).items():
            for record in records:
                record = copy.deepcopy(record)
                doc_id = str(record.pop("id", None) or uuid.uuid4().hex)
                self._data.setdefault(collection, {})[doc_id] = record

    def _collection(self, collection: str) -> dict[str, Record]:
        return self._data.setdefault(collection, {})

    @staticmethod
    def _to_record(doc_id: str, doc: Record) -> Record:
        record = copy.deepcopy(doc)
        record["id"] = doc_id
        return record

    async def query_by_date_range(self, collection, field, start, end):
        results = []
        for doc_id, doc in self._collection(collection).items():
            value = doc.get(field)
            if isinstance(value, datetime) and start <= value < end:
                results.append(self._to_record(doc_id, doc))
        return results

    async def get_document(self, collection, doc_id):
        doc = self._collection(collection).get(doc_id)
        return self._to_record(doc_id, doc) if doc is not None else None

    async def create_document(self, collection, fields, doc_id=None):
        doc_id = doc_id or uuid.uuid4().hex
        self._collection(collection)[doc_id] = copy.deepcopy(dict(fields))
        logger.debug(f"Created {collection}/{doc_id}")
        return doc_id

    async def update_document(self, collection, doc_id, fields):
        doc = self._collection(collection).get(doc_id)
        if doc is None:
            return False
        for path, value in fields.items():
            _set_path(doc, path, copy.deepcopy(value))
        return True

    async def list_all(self, collection):
        return [self._to_record(doc_id, doc) for doc_id, doc in self._collection(collection).items()]
