import logging
from typing import List, Optional

import httpx

from dskp_manager.config import Config
from dskp_manager.errors import PersistenceError
from dskp_manager.schemas.dskp_schema import ClassResponse, DSKPItemResponse, SubjectResponse

logger = logging.getLogger(__name__)

class PersistenceClient:
    """Async client for the subjects/DSKP REST backend."""

    def __init__(self, base_url: Optional[str] = None, *, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.base_url = base_url or Config.API_BASE_URL
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=Config.API_TIMEOUT,
            transport=transport,
        )

    async def __aenter__(self) -> "PersistenceClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _request(self, method: str, url: str, *, ack_only: bool = False, **kwargs):
        try:
            r = await self._client.request(method, url, **kwargs)
            r.raise_for_status()
        except httpx.HTTPStatusError as http_err:
            detail = http_err.response.text
            logger.error(f"{method} {url} failed with {http_err.response.status_code}: {detail[:200]}")
            raise PersistenceError(
                f"{method} {url} returned {http_err.response.status_code}",
                status_code=http_err.response.status_code,
                detail=detail,
            ) from http_err
        except httpx.RequestError as net_err:
            logger.error(f"{method} {url} failed: {net_err}")
            raise PersistenceError(f"{method} {url} failed: {net_err}") from net_err
        # Create acknowledgments may carry no body, or a body that is not JSON
        if ack_only and not r.content.strip():
            return {}
        try:
            return r.json()
        except ValueError as decode_err:
            if ack_only:
                return {}
            logger.error(f"{method} {url} returned a non-JSON body: {r.text[:200]}")
            raise PersistenceError(
                f"{method} {url} returned a non-JSON body",
                status_code=r.status_code,
                detail=r.text,
            ) from decode_err

    async def list_subjects(self, class_id: int) -> List[SubjectResponse]:
        data = await self._request("GET", f"/api/classes/{class_id}/subjects")
        return [SubjectResponse.model_validate(s) for s in data]

    async def create_subject(self, class_id: int, name: str) -> int:
        data = await self._request("POST", f"/api/classes/{class_id}/subjects", json={"name": name})
        return data["id"]

    async def list_dskp(self, subject_id: int) -> List[DSKPItemResponse]:
        data = await self._request("GET", f"/api/subjects/{subject_id}/dskp")
        return [DSKPItemResponse.model_validate(item) for item in data]

    async def create_dskp_item(self, subject_id: int, sk: str, sp: str) -> dict:
        return await self._request(
            "POST", f"/api/subjects/{subject_id}/dskp", json={"sk": sk, "sp": sp}, ack_only=True
        )

    async def get_class(self, class_id: int) -> ClassResponse:
        data = await self._request("GET", f"/api/classes/{class_id}")
        return ClassResponse.model_validate(data)
