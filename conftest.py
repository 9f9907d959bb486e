import asyncio
import json
from types import SimpleNamespace

import httpx
import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

from dskp_manager.database import get_db, init_db
from dskp_manager.main import app
from dskp_manager.models import school # Register models with Base
from dskp_manager.schemas.dskp_schema import DSKPEntry


class FakeModels:
    """Stands in for ``genai.Client().aio.models``.

    Each queued response is response text (``None`` allowed) or an exception to raise.
    """

    def __init__(self, responses):
        self.responses = list(responses)
        self.calls = []

    async def generate_content(self, **kwargs):
        self.calls.append(kwargs)
        result = self.responses.pop(0)
        if isinstance(result, Exception):
            raise result
        return SimpleNamespace(text=result)


def fake_genai(*responses):
    models = FakeModels(responses)
    return SimpleNamespace(aio=SimpleNamespace(models=models)), models


class FakeAI:
    """Extraction/suggestion clients with canned results."""

    def __init__(self, extracted=(), suggested=(), error=None):
        self.extracted = [DSKPEntry(sk=sk, sp=sp) for sk, sp in extracted]
        self.suggested = [DSKPEntry(sk=sk, sp=sp) for sk, sp in suggested]
        self.error = error
        self.calls = []

    async def parse_dskp(self, file_data, mime_type):
        self.calls.append(("parse_dskp", file_data, mime_type))
        if self.error:
            raise self.error
        return list(self.extracted)

    async def suggest_dskp(self, subject_name, year_level):
        self.calls.append(("suggest_dskp", subject_name, year_level))
        if self.error:
            raise self.error
        return list(self.suggested)


class RecordingBackend:
    """In-memory subjects/DSKP backend for ``httpx.MockTransport`` that logs every request.

    ``fail_dskp_post_at`` makes the n-th (0-based) DSKP create call return 500.
    ``ack_body`` replaces the JSON acknowledgment of a DSKP create (``b""`` for none).
    ``fail_dskp_list`` makes every DSKP list call return 503.
    """

    def __init__(self, subjects=(), items=(), fail_dskp_post_at=None, ack_body=None, fail_dskp_list=False):
        self.subjects = [dict(s) for s in subjects]
        self.items = [dict(i) for i in items]
        self.fail_dskp_post_at = fail_dskp_post_at
        self.ack_body = ack_body
        self.fail_dskp_list = fail_dskp_list
        self.requests = []
        self._dskp_posts = 0
        self.on_request = None

    def __call__(self, request: httpx.Request) -> httpx.Response:
        body = json.loads(request.content) if request.content else None
        self.requests.append((request.method, request.url.path, body))
        if self.on_request:
            self.on_request(request)
        parts = request.url.path.strip("/").split("/")

        if parts[1] == "classes" and parts[3] == "subjects":
            class_id = int(parts[2])
            if request.method == "GET":
                return httpx.Response(200, json=[s for s in self.subjects if s["class_id"] == class_id])
            new_id = max([s["id"] for s in self.subjects], default=0) + 1
            self.subjects.append({"id": new_id, "class_id": class_id, "name": body["name"]})
            return httpx.Response(200, json={"id": new_id})

        if parts[1] == "subjects" and parts[3] == "dskp":
            subject_id = int(parts[2])
            if request.method == "GET":
                if self.fail_dskp_list:
                    return httpx.Response(503, json={"detail": "Service Unavailable"})
                return httpx.Response(200, json=[i for i in self.items if i["subject_id"] == subject_id])
            if self._dskp_posts == self.fail_dskp_post_at:
                self._dskp_posts += 1
                return httpx.Response(500, json={"detail": "Internal Server Error"})
            self._dskp_posts += 1
            new_id = len(self.items) + 1
            self.items.append({"id": new_id, "subject_id": subject_id, **body})
            if self.ack_body is not None:
                return httpx.Response(201, content=self.ack_body)
            return httpx.Response(200, json={"id": new_id, "message": "DSKP item saved"})

        return httpx.Response(404, json={"detail": "Not Found"})

    def calls(self, method=None):
        return [(m, p) for m, p, _ in self.requests if method is None or m == method]

    def dskp_posts(self):
        return [body for m, p, body in self.requests if m == "POST" and p.endswith("/dskp")]


@pytest.fixture
def db_app(tmp_path):
    """The FastAPI app bound to a throwaway SQLite database."""
    test_engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}", poolclass=NullPool)
    TestSession = async_sessionmaker(autoflush=False, bind=test_engine, class_=AsyncSession, expire_on_commit=False)

    asyncio.run(init_db(test_engine))

    async def override_get_db():
        async with TestSession() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    yield app
    app.dependency_overrides.clear()
    asyncio.run(test_engine.dispose())
