import json
import os
import sys
from typing import Any, Dict, List, Optional
from urllib.parse import urlparse

import pytest
import requests

# Ensure test mode
os.environ.setdefault("DEBUG", "false")

# Guarantee the project root (parent of tests) is on sys.path so `import app` works
BASE_DIR = os.path.abspath(os.path.join(os.path.dirname(__file__), '..'))
if BASE_DIR not in sys.path:
    sys.path.insert(0, BASE_DIR)

from app import app  # noqa: E402
from notes_rag.config import RAGConfig  # noqa: E402

QDRANT_URL = "http://qdrant.test:6333"
VECTOR_SIZE = 4


def make_response(status: int, body: Any) -> requests.Response:
    response = requests.Response()
    response.status_code = status
    response._content = (body if isinstance(body, str) else json.dumps(body)).encode("utf-8")
    response.encoding = "utf-8"
    return response


class FakeQdrant:
    """In-memory stand-in for a requests.Session talking to Qdrant."""

    def __init__(self):
        self.headers: Dict[str, str] = {}
        self.collections: Dict[str, Dict[str, Any]] = {}
        self.points: Dict[str, Dict[Any, Dict[str, Any]]] = {}
        self.calls: List[tuple] = []
        self.search_hits: Optional[List[Dict[str, Any]]] = None
        self.fail_with: Optional[requests.Response] = None

    def calls_to(self, method: str, suffix: str = "") -> List[tuple]:
        return [c for c in self.calls if c[0] == method and c[1].endswith(suffix)]

    def request(self, method, url, timeout=None, params=None, json=None):
        path = urlparse(url).path
        self.calls.append((method, path, params, json))
        if self.fail_with is not None:
            return self.fail_with

        parts = path.strip("/").split("/")
        name = parts[1]

        if parts == ["collections", name]:
            if method == "GET":
                if name not in self.collections:
                    return make_response(404, {"status": {"error": f"Not found: Collection `{name}` doesn't exist!"}})
                return make_response(200, {"result": {
                    "status": "green",
                    "points_count": len(self.points[name]),
                    "config": {"params": {"vectors": self.collections[name]["vectors"]}},
                }, "status": "ok"})
            if method == "PUT":
                if name in self.collections:
                    return make_response(409, {"status": {"error": f"Collection `{name}` already exists!"}})
                self.collections[name] = json
                self.points[name] = {}
                return make_response(200, {"result": True, "status": "ok"})

        if parts[2:] == ["points"] and method == "PUT":
            if name not in self.collections:
                return make_response(404, {"status": {"error": f"Not found: Collection `{name}` doesn't exist!"}})
            for point in json["points"]:
                self.points[name][point["id"]] = point
            return make_response(200, {"result": {"operation_id": 1, "status": "completed"}, "status": "ok"})

        if parts[2:] == ["points", "search"] and method == "POST":
            if self.search_hits is not None:
                return make_response(200, {"result": self.search_hits[:json["limit"]], "status": "ok"})
            query = json["vector"]["vector"]
            hits = [
                {
                    "id": pid,
                    "score": sum(a * b for a, b in zip(point["vector"]["embedding"], query)),
                    "payload": point["payload"],
                }
                for pid, point in self.points.get(name, {}).items()
            ]
            hits.sort(key=lambda h: h["score"], reverse=True)
            return make_response(200, {"result": hits[:json["limit"]], "status": "ok"})

        return make_response(404, {"status": {"error": "unknown route"}})


class FakeEmbedder:
    """Returns a fixed-size vector and remembers every text it saw."""

    def __init__(self, vector: Optional[List[float]] = None, fail_on: Optional[int] = None, error=None):
        self.vector = vector or [0.5] * VECTOR_SIZE
        self.texts: List[str] = []
        self.fail_on = fail_on
        self.error = error

    def embed(self, text: str) -> List[float]:
        self.texts.append(text)
        if self.fail_on is not None and len(self.texts) == self.fail_on:
            raise self.error
        return list(self.vector)


@pytest.fixture
def config():
    return RAGConfig(
        qdrant_url=QDRANT_URL,
        vector_size=VECTOR_SIZE,
        openai_api_key="sk-test",
        collection_name="class_notes",
    )


@pytest.fixture
def qdrant():
    return FakeQdrant()


@pytest.fixture
def embedder():
    return FakeEmbedder()


@pytest.fixture(scope="session")
def client():
    app.config["TESTING"] = True
    with app.test_client() as c:
        yield c
