"""
Vector Store Module

Qdrant gateway: collection schema management, point upsert and
similarity search over the Qdrant REST API.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Set
import logging
import threading

import requests

from .config import RAGConfig
from .errors import GatewayError, MalformedResponse, RemoteUnavailable


logger = logging.getLogger(__name__)

VECTOR_NAME = "embedding"


@dataclass
class SearchResult:
    """One candidate returned by a similarity query."""
    score: float
    payload: Dict[str, Any] = field(default_factory=dict)
    id: Optional[Any] = None

    @property
    def filename(self) -> str:
        return self.payload.get('filename', 'unknown')

    @property
    def text(self) -> str:
        return self.payload.get('text_content', '')

    @classmethod
    def from_response(cls, item: Any) -> 'SearchResult':
        """Decode one entry of a search response's ``result`` list."""
        if not isinstance(item, dict):
            raise MalformedResponse(f"Search hit is not an object: {item!r}")

        score = item.get('score')
        if isinstance(score, bool) or not isinstance(score, (int, float)):
            raise MalformedResponse(f"Search hit has no numeric score: {item!r}")

        payload = item.get('payload')
        if payload is None:
            payload = {}
        if not isinstance(payload, dict):
            raise MalformedResponse(f"Search hit payload is not an object: {item!r}")
        for key in ('filename', 'text_content'):
            if key in payload and not isinstance(payload[key], str):
                raise MalformedResponse(f"Search hit payload field '{key}' is not a string: {item!r}")

        return cls(score=float(score), payload=payload, id=item.get('id'))


class QdrantGateway:
    """Thin client for the parts of the Qdrant REST API the pipeline uses."""

    def __init__(self, config: RAGConfig, session: Optional[requests.Session] = None):
        self.config = config
        self.base_url = config.qdrant_url.rstrip('/')
        self.session = session or requests.Session()
        if config.qdrant_api_key:
            self.session.headers.update({'api-key': config.qdrant_api_key})
        self._known_collections: Set[str] = set()
        self._schema_lock = threading.Lock()

    def _request(self, method: str, path: str, **kwargs) -> requests.Response:
        url = f"{self.base_url}{path}"
        try:
            return self.session.request(method, url, timeout=self.config.request_timeout, **kwargs)
        except requests.RequestException as e:
            raise RemoteUnavailable(f"Qdrant unreachable at {url}: {e}") from e

    @staticmethod
    def _json(response: requests.Response) -> Dict[str, Any]:
        try:
            data = response.json()
        except ValueError as e:
            raise MalformedResponse(
                f"Qdrant returned non-JSON body: {response.text[:200]}",
                status_code=response.status_code,
                body=response.text,
            ) from e
        if not isinstance(data, dict):
            raise MalformedResponse(
                "Qdrant response is not a JSON object",
                status_code=response.status_code,
                body=response.text,
            )
        return data

    @staticmethod
    def _fail(action: str, response: requests.Response) -> GatewayError:
        return GatewayError(
            f"Qdrant {action} failed: HTTP {response.status_code} - {response.text}",
            status_code=response.status_code,
            body=response.text,
        )

    def collection_exists(self, name: str) -> bool:
        """Check whether a collection exists (404 means it does not)."""
        response = self._request('GET', f"/collections/{name}")
        if response.ok:
            return True
        if response.status_code == 404:
            return False
        raise self._fail("collection check", response)

    def create_collection(self, name: str, vector_size: int, distance_metric: str) -> None:
        """
        Create a collection with a single named vector field.

        Args:
            name: Collection name
            vector_size: Vector dimensionality
            distance_metric: Qdrant distance name (Cosine, Euclid, Dot)

        An "already exists" answer is treated as success, so two writers
        racing to create the same collection both proceed.
        """
        body = {
            'vectors': {
                VECTOR_NAME: {'size': vector_size, 'distance': distance_metric},
            }
        }
        logger.info(f"Creating collection '{name}' (size={vector_size}, distance={distance_metric})")
        response = self._request('PUT', f"/collections/{name}", json=body)

        if response.ok:
            logger.info(f"Collection '{name}' created successfully")
            return
        if response.status_code == 409 or (
            response.status_code == 400 and 'already exists' in response.text
        ):
            logger.info(f"Collection '{name}' already exists, continuing")
            return
        raise self._fail("collection creation", response)

    def upsert(self, collection: str, point_id: int, vector: List[float], payload: Dict[str, Any]) -> None:
        """Write or overwrite one point and wait until Qdrant has applied it."""
        body = {
            'points': [{
                'id': point_id,
                'vector': {VECTOR_NAME: vector},
                'payload': payload,
            }]
        }
        response = self._request(
            'PUT', f"/collections/{collection}/points", params={'wait': 'true'}, json=body
        )
        if not response.ok:
            raise self._fail("insertion", response)
        logger.debug(f"Upserted point {point_id} into '{collection}'")

    def ensure_collection(self, collection: str, vector_size: int, distance_metric: str) -> None:
        """Create the collection unless it is already known to exist."""
        with self._schema_lock:
            if collection in self._known_collections:
                return
            if not self.collection_exists(collection):
                logger.info(f"Collection '{collection}' not found. Attempting to create it...")
                self.create_collection(collection, vector_size, distance_metric)
            self._known_collections.add(collection)

    def ensure_and_upsert(
        self,
        collection: str,
        vector_size: int,
        distance_metric: str,
        point_id: int,
        vector: List[float],
        payload: Dict[str, Any],
    ) -> None:
        """Make sure the collection exists, then upsert the point into it."""
        self.ensure_collection(collection, vector_size, distance_metric)
        self.upsert(collection, point_id, vector, payload)

    def search(
        self,
        collection: str,
        query_vector: List[float],
        limit: int,
        with_payload: bool = True,
    ) -> List[SearchResult]:
        """
        Similarity search against the named vector field.

        Returns:
            At most `limit` results, in the store's descending score order
        """
        body = {
            'vector': {'name': VECTOR_NAME, 'vector': query_vector},
            'limit': limit,
            'with_payload': with_payload,
        }
        response = self._request('POST', f"/collections/{collection}/points/search", json=body)
        if not response.ok:
            raise self._fail("search", response)

        hits = self._json(response).get('result')
        if not isinstance(hits, list):
            raise MalformedResponse(
                "Qdrant search response has no 'result' list",
                status_code=response.status_code,
                body=response.text,
            )

        results = [SearchResult.from_response(hit) for hit in hits]
        logger.info(f"Search in '{collection}' returned {len(results)} results")
        return results

    def get_collection_info(self, name: str) -> Dict[str, Any]:
        """Summarise a collection's size and schema; ``exists`` is False when absent."""
        response = self._request('GET', f"/collections/{name}")
        if response.status_code == 404:
            return {'collection': name, 'exists': False, 'points_count': 0}
        if not response.ok:
            raise self._fail("collection info", response)

        result = self._json(response).get('result')
        if not isinstance(result, dict):
            raise MalformedResponse(
                "Qdrant collection response has no 'result' object",
                status_code=response.status_code,
                body=response.text,
            )
        vectors = result.get('config', {}).get('params', {}).get('vectors', {})
        return {
            'collection': name,
            'exists': True,
            'status': result.get('status'),
            'points_count': result.get('points_count') or 0,
            'vectors': vectors,
        }
