"""
Read-only Firestore REST client with rate limiting using aiolimiter.
"""
from aiohttp import ClientSession, ClientTimeout
from aiolimiter import AsyncLimiter
from typing import Any, Dict, List, Optional
from loguru import logger

from catalog.config import (
    CONCURRENCY,
    FIRESTORE_API_KEY,
    FIRESTORE_BASE_URL,
    FIRESTORE_PROJECT_ID,
    REMOTE_PAGE_SIZE,
    REMOTE_TIMEOUT,
)


class RemoteStoreError(Exception):
    """Raised when the remote document store answers with an error or an unreadable body."""


def _typed_number(value: Dict[str, Any], key: str, cast) -> Any:
    try:
        return cast(value[key])
    except (TypeError, ValueError) as e:
        raise RemoteStoreError(f"Invalid {key}: {value[key]!r}") from e


def decode_value(value: Dict[str, Any]) -> Any:
    """
    Convert a Firestore typed value into a plain Python value.

    Args:
        value: Typed value such as {"stringValue": "x"} or {"arrayValue": {"values": [...]}}.

    Returns:
        The decoded value.

    Raises:
        RemoteStoreError: If the value is not a well-formed typed value.
    """
    if not isinstance(value, dict):
        raise RemoteStoreError(f"Expected a typed value, got {type(value).__name__}")
    if "stringValue" in value:
        return value["stringValue"]
    if "integerValue" in value:
        # Firestore sends int64 as a string
        return _typed_number(value, "integerValue", int)
    if "doubleValue" in value:
        return _typed_number(value, "doubleValue", float)
    if "booleanValue" in value:
        return bool(value["booleanValue"])
    if "nullValue" in value:
        return None
    if "timestampValue" in value:
        return value["timestampValue"]
    if "referenceValue" in value:
        return value["referenceValue"]
    if "arrayValue" in value:
        values = value["arrayValue"].get("values", []) if isinstance(value["arrayValue"], dict) else None
        if not isinstance(values, list):
            raise RemoteStoreError("Malformed arrayValue")
        return [decode_value(v) for v in values]
    if "mapValue" in value:
        fields = value["mapValue"].get("fields", {}) if isinstance(value["mapValue"], dict) else None
        return decode_fields(fields)
    raise RemoteStoreError(f"Unsupported Firestore value: {list(value.keys())}")


def decode_fields(fields: Dict[str, Any]) -> Dict[str, Any]:
    if not isinstance(fields, dict):
        raise RemoteStoreError(f"Expected a fields object, got {type(fields).__name__}")
    return {name: decode_value(v) for name, v in fields.items()}


def decode_document(document: Dict[str, Any]) -> Dict[str, Any]:
    """
    Decode a Firestore document into a flat record.
    The document id (last segment of its name) fills in `id` when the fields carry none.
    """
    if not isinstance(document, dict):
        raise RemoteStoreError(f"Expected a document object, got {type(document).__name__}")
    name = document.get("name")
    if not name or not isinstance(name, str):
        raise RemoteStoreError("Document without a name")
    record = decode_fields(document.get("fields", {}))
    record.setdefault("id", name.rsplit("/", 1)[-1])
    return record


class RemoteStoreClient:
    """
    Client for the remote document store (query and point-read only).
    Uses AsyncLimiter for rate limiting and a lazily created aiohttp session.
    """

    def __init__(
        self,
        project_id: str = FIRESTORE_PROJECT_ID,
        api_key: Optional[str] = FIRESTORE_API_KEY,
        base_url: str = FIRESTORE_BASE_URL,
    ):
        self.project_id = project_id
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.rate_limiter = AsyncLimiter(max_rate=CONCURRENCY, time_period=1.0)
        self._session: Optional[ClientSession] = None

    async def _get_session(self) -> ClientSession:
        """Get or create the aiohttp session."""
        if self._session is None or self._session.closed:
            self._session = ClientSession(timeout=ClientTimeout(total=REMOTE_TIMEOUT))
        return self._session

    def _documents_url(self, *path: str) -> str:
        root = f"{self.base_url}/projects/{self.project_id}/databases/(default)/documents"
        return "/".join([root, *path])

    def _params(self, **extra: Any) -> Dict[str, str]:
        params = {k: str(v) for k, v in extra.items()}
        if self.api_key:
            params["key"] = self.api_key
        return params

    async def _get_json(self, url: str, params: Dict[str, str]) -> Optional[Dict[str, Any]]:
        async with self.rate_limiter:
            session = await self._get_session()
            try:
                async with session.get(url, params=params) as resp:
                    if resp.status == 404:
                        return None
                    if resp.status != 200:
                        detail = await resp.text()
                        raise RemoteStoreError(f"Remote store error {resp.status} for {url}: {detail[:200]}")
                    try:
                        data = await resp.json()
                    except ValueError as e:
                        raise RemoteStoreError(f"Unreadable JSON body from {url}") from e
                    if not isinstance(data, dict):
                        raise RemoteStoreError(f"Expected a JSON object from {url}, got {type(data).__name__}")
                    return data
            except Exception as e:
                logger.debug(f"⚠️ Remote GET failed for {url}: {e}")
                raise

    async def list_documents(self, collection: str) -> List[Dict[str, Any]]:
        """
        Fetch every document of a collection in a single request.

        Args:
            collection: Remote collection name.

        Returns:
            List of decoded records.
        """
        data = await self._get_json(
            self._documents_url(collection),
            self._params(pageSize=REMOTE_PAGE_SIZE),
        )
        if data is None:
            # Firestore answers 404 for a collection that does not exist yet
            return []
        documents = data.get("documents", [])
        if not isinstance(documents, list):
            raise RemoteStoreError(f"Unexpected documents payload for '{collection}'")
        return [decode_document(doc) for doc in documents]

    async def get_document(self, collection: str, doc_id: str) -> Optional[Dict[str, Any]]:
        """
        Point-read a single document by id.

        Returns:
            Decoded record, or None if the document does not exist.
        """
        data = await self._get_json(self._documents_url(collection, doc_id), self._params())
        if data is None:
            return None
        return decode_document(data)

    async def close(self):
        """Close the aiohttp session."""
        if self._session and not self._session.closed:
            await self._session.close()
            self._session = None
