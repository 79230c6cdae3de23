import json
import os
import re
import uuid
import logging
import aiofiles
import aiofiles.os
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional, Tuple

from prepwise.core.errors import StoreError

class CustomJSONEncoder(json.JSONEncoder):
    """Custom JSON encoder to handle non-serializable objects by converting them to strings"""
    def default(self, obj):
        if isinstance(obj, datetime):
            return obj.isoformat()
        try:
            return super().default(obj)
        except TypeError:
            return str(obj)

logger = logging.getLogger(__name__)

Filter = Tuple[str, str, Any]

_ID_PATTERN = re.compile(r'^[A-Za-z0-9_-]{1,128}$')
_OPERATORS = {
    '==': lambda field_value, value: field_value == value,
    '!=': lambda field_value, value: field_value != value,
}

class DocumentStore:
    """File-backed document database.

    Each collection is a directory under ``data_dir`` and each document is a
    JSON file named after its id. Documents are returned as plain dicts with
    their ``id`` merged in.
    """

    def __init__(self, data_dir: str = "data"):
        self.data_dir = data_dir
        self._ensure_dir(self.data_dir)

    @staticmethod
    def _ensure_dir(path: str):
        if not os.path.exists(path):
            os.makedirs(path, exist_ok=True)

    def _collection_dir(self, collection: str) -> str:
        if not _ID_PATTERN.match(collection):
            raise StoreError(f"Invalid collection name: {collection!r}")
        path = os.path.join(self.data_dir, collection)
        self._ensure_dir(path)
        return path

    def _document_path(self, collection: str, doc_id: str) -> str:
        if not isinstance(doc_id, str) or not _ID_PATTERN.match(doc_id):
            raise StoreError(f"Invalid document id: {doc_id!r}", collection=collection)
        return os.path.join(self._collection_dir(collection), f"{doc_id}.json")

    async def _write(self, path: str, data: Dict[str, Any]):
        tmp_path = f"{path}.{uuid.uuid4().hex}.tmp"
        try:
            async with aiofiles.open(tmp_path, 'w', encoding='utf-8') as f:
                await f.write(json.dumps(data, indent=2, cls=CustomJSONEncoder))
            await aiofiles.os.replace(tmp_path, path)
        except OSError as e:
            if os.path.exists(tmp_path):
                await aiofiles.os.remove(tmp_path)
            raise StoreError(f"Failed to write document {os.path.basename(path)}: {e}")

    async def _read(self, path: str) -> Optional[Dict[str, Any]]:
        try:
            async with aiofiles.open(path, 'r', encoding='utf-8') as f:
                content = await f.read()
            return json.loads(content)
        except FileNotFoundError:
            return None
        except (OSError, json.JSONDecodeError) as e:
            logger.error(f"Error reading document {path}: {e}")
            return None

    @staticmethod
    def _with_id(doc_id: str, data: Dict[str, Any]) -> Dict[str, Any]:
        document = dict(data)
        document['id'] = doc_id
        return document

    async def add(self, collection: str, data: Dict[str, Any]) -> str:
        """Create a document with a generated id."""
        doc_id = str(uuid.uuid4())
        await self.set(collection, doc_id, data)
        logger.info(f"Created {collection}/{doc_id}")
        return doc_id

    async def set(self, collection: str, doc_id: str, data: Dict[str, Any]):
        """Create or overwrite a document."""
        path = self._document_path(collection, doc_id)
        payload = {k: v for k, v in data.items() if k != 'id'}
        await self._write(path, payload)

    async def get(self, collection: str, doc_id: str) -> Optional[Dict[str, Any]]:
        """Get a document by id."""
        path = self._document_path(collection, doc_id)
        data = await self._read(path)
        if data is None:
            return None
        return self._with_id(doc_id, data)

    async def update(self, collection: str, doc_id: str, updates: Dict[str, Any]) -> bool:
        """Merge updates into an existing document."""
        path = self._document_path(collection, doc_id)
        data = await self._read(path)
        if data is None:
            return False

        data.update({k: v for k, v in updates.items() if k != 'id'})
        data['updated_at'] = datetime.now().isoformat()
        try:
            await self._write(path, data)
            return True
        except StoreError as e:
            logger.error(f"Error updating {collection}/{doc_id}: {e}")
            return False

    async def delete(self, collection: str, doc_id: str) -> bool:
        """Delete a document."""
        path = self._document_path(collection, doc_id)
        if not os.path.exists(path):
            return False

        try:
            await aiofiles.os.remove(path)
            logger.info(f"Deleted {collection}/{doc_id}")
            return True
        except OSError as e:
            logger.error(f"Error deleting {collection}/{doc_id}: {e}")
            return False

    async def list(self, collection: str) -> List[Dict[str, Any]]:
        """List every readable document in a collection."""
        directory = self._collection_dir(collection)
        documents = []
        for filename in sorted(await aiofiles.os.listdir(directory)):
            if not filename.endswith('.json'):
                continue
            doc_id = filename[:-5]
            data = await self._read(os.path.join(directory, filename))
            if data is not None:
                documents.append(self._with_id(doc_id, data))
        return documents

    async def query(self, collection: str, filters: Optional[Iterable[Filter]] = None,
                    order_by: Optional[str] = None, descending: bool = False,
                    limit: Optional[int] = None) -> List[Dict[str, Any]]:
        """Query a collection.

        Filters are ``(field, op, value)`` tuples with ``op`` in ``==``/``!=``.
        Documents missing a filtered or ordered field never match.
        """
        filters = list(filters or [])
        for _, op, _ in filters:
            if op not in _OPERATORS:
                raise StoreError(f"Unsupported query operator: {op}", collection=collection)

        results = []
        for document in await self.list(collection):
            if all(field in document and _OPERATORS[op](document[field], value) for field, op, value in filters):
                results.append(document)

        if order_by:
            results = [d for d in results if d.get(order_by) is not None]
            results.sort(key=lambda d: d[order_by], reverse=descending)

        if limit is not None:
            results = results[:limit]

        return results
