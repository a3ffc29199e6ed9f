from __future__ import annotations

from typing import Any, Dict, Optional

from pymongo import AsyncMongoClient

from ..settings import get_settings


class DocumentsClient:
    """Thin wrapper over the MongoDB async driver for the submission collections."""

    def __init__(
        self,
        uri: Optional[str] = None,
        database: Optional[str] = None,
        client: Optional[Any] = None,
    ) -> None:
        settings = get_settings()
        self.uri = uri or settings.documents_uri
        self.database = database or settings.documents_database
        self._client = client

    def _collection(self, name: str):
        if self._client is None:
            if not self.uri:
                raise RuntimeError("documents_uri is not configured")
            self._client = AsyncMongoClient(self.uri, tz_aware=True)
        return self._client[self.database][name]

    async def close(self) -> None:
        if self._client is not None:
            await self._client.close()

    async def find_one(self, collection: str, filter: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        return await self._collection(collection).find_one(filter)

    async def insert_one(self, collection: str, document: Dict[str, Any]) -> Optional[str]:
        result = await self._collection(collection).insert_one(document)
        return str(result.inserted_id)
