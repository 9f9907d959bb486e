import asyncio

import httpx
import pytest

from conftest import RecordingBackend
from dskp_manager.errors import PersistenceError
from dskp_manager.services.api_client import PersistenceClient


def make_client(handler):
    return PersistenceClient("http://backend.test", transport=httpx.MockTransport(handler))


def test_endpoints_and_bodies():
    backend = RecordingBackend()
    api = make_client(backend)

    async def calls():
        subject_id = await api.create_subject(3, "Bahasa Melayu")
        await api.create_dskp_item(subject_id, "1.1 Mendengar", "1.1.1 Mendengar dan memberi respons")
        subjects = await api.list_subjects(3)
        items = await api.list_dskp(subject_id)
        await api.aclose()
        return subjects, items

    subjects, items = asyncio.run(calls())

    assert backend.requests == [
        ("POST", "/api/classes/3/subjects", {"name": "Bahasa Melayu"}),
        ("POST", "/api/subjects/1/dskp", {"sk": "1.1 Mendengar", "sp": "1.1.1 Mendengar dan memberi respons"}),
        ("GET", "/api/classes/3/subjects", None),
        ("GET", "/api/subjects/1/dskp", None),
    ]
    assert subjects[0].name == "Bahasa Melayu"
    assert items[0].sp == "1.1.1 Mendengar dan memberi respons"


def test_http_error_becomes_persistence_error():
    api = make_client(lambda request: httpx.Response(404, json={"detail": "Subject not found"}))

    with pytest.raises(PersistenceError) as exc_info:
        asyncio.run(api.list_dskp(9))
    assert exc_info.value.status_code == 404
    assert "Subject not found" in exc_info.value.detail


def test_transport_error_becomes_persistence_error():
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(PersistenceError) as exc_info:
        asyncio.run(make_client(handler).list_subjects(1))
    assert exc_info.value.status_code is None


def test_create_dskp_item_tolerates_bodyless_acknowledgment():
    api = make_client(lambda request: httpx.Response(201))

    assert asyncio.run(api.create_dskp_item(1, "1.1 Mendengar", "1.1.1 Mendengar")) == {}


def test_create_dskp_item_tolerates_plain_text_acknowledgment():
    api = make_client(lambda request: httpx.Response(201, text="Created"))

    assert asyncio.run(api.create_dskp_item(1, "1.1 Mendengar", "1.1.1 Mendengar")) == {}


def test_non_json_list_body_becomes_persistence_error():
    api = make_client(lambda request: httpx.Response(200, text="<html>gateway</html>"))

    with pytest.raises(PersistenceError) as exc_info:
        asyncio.run(api.list_dskp(1))
    assert exc_info.value.status_code == 200
