"""Firestore REST client implementing the document store boundary."""

import base64
from dataclasses import dataclass
from datetime import datetime, timezone
import logging
import re
from typing import Any, Optional

import httpx

from booklib.db.store import Document, DocumentStoreError
from booklib.utils.cancellation import CancelToken, guarded

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://firestore.googleapis.com/v1"
REQUEST_TIMEOUT = 10

# Firestore returns nanosecond precision; datetime only holds microseconds.
_FRACTION_RE = re.compile(r"\.(\d{6})\d+")


def encode_value(value: Any) -> dict[str, Any]:
    """Encode a Python value as a Firestore typed value."""
    if value is None:
        return {"nullValue": None}
    if isinstance(value, bool):
        return {"booleanValue": value}
    if isinstance(value, int):
        return {"integerValue": str(value)}
    if isinstance(value, float):
        return {"doubleValue": value}
    if isinstance(value, datetime):
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        utc = value.astimezone(timezone.utc)
        return {"timestampValue": utc.isoformat().replace("+00:00", "Z")}
    if isinstance(value, str):
        return {"stringValue": value}
    if isinstance(value, bytes):
        return {"bytesValue": base64.b64encode(value).decode("ascii")}
    if isinstance(value, (list, tuple)):
        return {"arrayValue": {"values": [encode_value(item) for item in value]}}
    if isinstance(value, dict):
        return {"mapValue": {"fields": encode_fields(value)}}
    raise TypeError(f"Cannot encode {type(value).__name__} as a Firestore value")


def decode_value(value: dict[str, Any]) -> Any:
    """Decode a Firestore typed value into a Python value."""
    if "nullValue" in value:
        return None
    if "booleanValue" in value:
        return value["booleanValue"]
    if "integerValue" in value:
        return int(value["integerValue"])
    if "doubleValue" in value:
        return float(value["doubleValue"])
    if "timestampValue" in value:
        return parse_timestamp(value["timestampValue"])
    if "stringValue" in value:
        return value["stringValue"]
    if "bytesValue" in value:
        return base64.b64decode(value["bytesValue"])
    if "referenceValue" in value:
        return value["referenceValue"]
    if "geoPointValue" in value:
        point = value["geoPointValue"]
        return {
            "latitude": point.get("latitude", 0.0),
            "longitude": point.get("longitude", 0.0),
        }
    # Empty arrays and maps come back without their inner key.
    if "arrayValue" in value:
        return [decode_value(item) for item in value["arrayValue"].get("values", [])]
    if "mapValue" in value:
        return {
            name: decode_value(item)
            for name, item in value["mapValue"].get("fields", {}).items()
        }
    raise ValueError(f"Unsupported Firestore value: {value}")


def parse_timestamp(raw: str) -> datetime:
    """Parse an RFC 3339 timestamp as returned by Firestore."""
    raw = _FRACTION_RE.sub(r".\1", raw)
    if raw.endswith("Z"):
        raw = raw[:-1] + "+00:00"
    return datetime.fromisoformat(raw)


def encode_fields(fields: dict[str, Any]) -> dict[str, Any]:
    return {name: encode_value(value) for name, value in fields.items()}


def decode_document(raw: dict[str, Any]) -> Document:
    """Turn a Firestore document resource into a Document."""
    fields = {
        name: decode_value(value) for name, value in raw.get("fields", {}).items()
    }
    create_time = raw.get("createTime")
    return Document(
        id=raw["name"].rsplit("/", 1)[-1],
        fields=fields,
        create_time=parse_timestamp(create_time) if create_time else None,
    )


@dataclass
class FirestoreClient:
    """Client for the Firestore REST API.

    Requests are authenticated with the signed-in user's ID token, so the
    project's security rules see the same identity the app does.
    """

    project_id: str
    base_url: str = DEFAULT_BASE_URL
    database: str = "(default)"

    @property
    def documents_url(self) -> str:
        base = self.base_url.rstrip("/")
        return f"{base}/projects/{self.project_id}/databases/{self.database}/documents"

    def _auth_headers(self, id_token: Optional[str]) -> dict[str, str]:
        if id_token is None:
            return {}
        return {"Authorization": f"Bearer {id_token}"}

    async def _request(
        self,
        method: str,
        url: str,
        id_token: Optional[str],
        cancel: Optional[CancelToken],
        **kwargs,
    ) -> httpx.Response:
        """Make a Firestore request, raising DocumentStoreError on any failure."""
        async with httpx.AsyncClient(timeout=REQUEST_TIMEOUT) as client:
            try:
                response = await guarded(
                    client.request(
                        method, url, headers=self._auth_headers(id_token), **kwargs
                    ),
                    cancel,
                )
            except httpx.HTTPError as e:
                logger.error(
                    f"Firestore {method} {url} failed: "
                    f"exception_type={type(e).__name__}, error={e}"
                )
                raise DocumentStoreError(f"Firestore request failed: {e}") from e

        if response.status_code >= 400:
            logger.error(
                f"Firestore error on {method} {url}: {response.status_code} {response.text}"
            )
            raise DocumentStoreError(
                f"Firestore returned {response.status_code}",
                status_code=response.status_code,
            )
        return response

    async def insert(
        self,
        collection: str,
        fields: dict[str, Any],
        *,
        id_token: Optional[str] = None,
        cancel: Optional[CancelToken] = None,
    ) -> str:
        response = await self._request(
            "POST",
            f"{self.documents_url}/{collection}",
            id_token,
            cancel,
            json={"fields": encode_fields(fields)},
        )
        try:
            document = decode_document(response.json())
        except (KeyError, TypeError, ValueError) as e:
            logger.error(f"Unreadable Firestore create response for {collection}: {e}")
            raise DocumentStoreError(f"Unreadable Firestore response: {e}") from e
        logger.debug(f"Created {collection}/{document.id}")
        return document.id

    async def query_by_field(
        self,
        collection: str,
        field_path: str,
        value: Any,
        *,
        id_token: Optional[str] = None,
        cancel: Optional[CancelToken] = None,
    ) -> list[Document]:
        structured_query = {
            "from": [{"collectionId": collection}],
            "where": {
                "fieldFilter": {
                    "field": {"fieldPath": field_path},
                    "op": "EQUAL",
                    "value": encode_value(value),
                }
            },
        }
        response = await self._request(
            "POST",
            f"{self.documents_url}:runQuery",
            id_token,
            cancel,
            json={"structuredQuery": structured_query},
        )
        # An empty result still yields one entry carrying only a readTime.
        try:
            documents = [
                decode_document(entry["document"])
                for entry in response.json()
                if "document" in entry
            ]
        except (KeyError, TypeError, ValueError) as e:
            logger.error(f"Unreadable Firestore query response for {collection}: {e}")
            raise DocumentStoreError(f"Unreadable Firestore response: {e}") from e
        logger.debug(
            f"Query {collection} where {field_path} == {value!r} "
            f"returned {len(documents)} document(s)"
        )
        return documents

    async def update_fields(
        self,
        collection: str,
        document_id: str,
        fields: dict[str, Any],
        *,
        id_token: Optional[str] = None,
        cancel: Optional[CancelToken] = None,
    ) -> None:
        # Only the masked fields are written; the precondition stops PATCH from
        # creating the document when it no longer exists.
        params: list[tuple[str, str]] = [
            ("updateMask.fieldPaths", name) for name in fields
        ]
        params.append(("currentDocument.exists", "true"))
        await self._request(
            "PATCH",
            f"{self.documents_url}/{collection}/{document_id}",
            id_token,
            cancel,
            params=params,
            json={"fields": encode_fields(fields)},
        )

    async def delete(
        self,
        collection: str,
        document_id: str,
        *,
        id_token: Optional[str] = None,
        cancel: Optional[CancelToken] = None,
    ) -> None:
        await self._request(
            "DELETE",
            f"{self.documents_url}/{collection}/{document_id}",
            id_token,
            cancel,
        )
