import asyncio
import base64
import json
import logging
from typing import Any, List, Optional

from google import genai
from google.genai import types
from pydantic import TypeAdapter, ValidationError

from dskp_manager.config import Config
from dskp_manager.errors import GeminiError
from dskp_manager.prompts.dskp_prompt import DSKP_EXTRACTION_PROMPT, STUDENT_LIST_PROMPT, build_suggest_prompt
from dskp_manager.schemas.dskp_schema import DSKPEntry

logger = logging.getLogger(__name__)

# Array of {sk, sp}, both required
DSKP_SCHEMA = types.Schema(
    type=types.Type.ARRAY,
    items=types.Schema(
        type=types.Type.OBJECT,
        properties={
            "sk": types.Schema(type=types.Type.STRING),
            "sp": types.Schema(type=types.Type.STRING),
        },
        required=["sk", "sp"],
    ),
)

STUDENT_LIST_SCHEMA = types.Schema(
    type=types.Type.ARRAY,
    items=types.Schema(type=types.Type.STRING),
)

# Quota (rate limit) or server overload
BUSY_MARKERS = ("429", "RESOURCE_EXHAUSTED", "503", "overloaded", "UNAVAILABLE")

_dskp_entries = TypeAdapter(List[DSKPEntry])
_student_names = TypeAdapter(List[str])


def _is_busy(error_str: str) -> bool:
    return any(marker in error_str for marker in BUSY_MARKERS)


def _load_json_array(text: Optional[str]) -> Any:
    # No text from the model means no results, not a failure
    if not text or not text.strip():
        return []
    try:
        return json.loads(text)
    except json.JSONDecodeError as e:
        raise GeminiError(f"Model returned invalid JSON: {e}") from e


def _document_parts(prompt: str, file_data: str, mime_type: str) -> List[types.Part]:
    return [
        types.Part.from_text(text=prompt),
        types.Part.from_bytes(data=base64.b64decode(file_data), mime_type=mime_type),
    ]


class GeminiClient:
    def __init__(self, api_key: Optional[str] = None, model: Optional[str] = None, client: Any = None):
        self.api_key = api_key or Config.GEMINI_API_KEY
        self.model = model or Config.GEMINI_MODEL
        self.max_retries = max(1, Config.GEMINI_MAX_RETRIES)
        self.retry_delay = Config.GEMINI_RETRY_DELAY

        if client is not None:
            self.client = client
        elif not self.api_key:
            logger.warning("GEMINI_API_KEY not set, AI extraction and suggestions are disabled")
            self.client = None
        else:
            self.client = genai.Client(api_key=self.api_key)

    async def generate_json(self, parts: List[types.Part], response_schema: types.Schema) -> Any:
        """Send one user turn and return the decoded JSON the model produced.

        The request pins ``application/json`` output and ``response_schema`` so the
        endpoint is constrained to schema-shaped text. Busy errors are retried with
        a linear back-off; anything else raises :class:`GeminiError` straight away.
        """
        if not self.client:
            raise GeminiError("GEMINI_API_KEY is not configured")

        config = types.GenerateContentConfig(
            response_mime_type="application/json",
            response_schema=response_schema,
        )
        contents = [types.Content(role="user", parts=parts)]

        for attempt in range(self.max_retries):
            try:
                response = await self.client.aio.models.generate_content(
                    model=self.model,
                    contents=contents,
                    config=config,
                )
            except Exception as e:
                error_str = str(e)
                if _is_busy(error_str) and attempt < self.max_retries - 1:
                    wait_time = self.retry_delay * (attempt + 1)
                    logger.warning(
                        f"Gemini busy (attempt {attempt + 1}/{self.max_retries}), retrying in {wait_time}s: {error_str[:100]}"
                    )
                    await asyncio.sleep(wait_time)
                    continue
                raise GeminiError(f"Gemini request failed: {error_str}") from e
            return _load_json_array(response.text)

        raise GeminiError("Gemini request failed after retries")

    async def parse_dskp(self, file_data: str, mime_type: str) -> List[DSKPEntry]:
        data = await self.generate_json(_document_parts(DSKP_EXTRACTION_PROMPT, file_data, mime_type), DSKP_SCHEMA)
        try:
            return _dskp_entries.validate_python(data)
        except ValidationError as e:
            raise GeminiError(f"Model output is not a list of SK/SP objects: {e}") from e

    async def suggest_dskp(self, subject_name: str, year_level: str) -> List[DSKPEntry]:
        prompt = build_suggest_prompt(subject_name, year_level)
        data = await self.generate_json([types.Part.from_text(text=prompt)], DSKP_SCHEMA)
        try:
            return _dskp_entries.validate_python(data)
        except ValidationError as e:
            raise GeminiError(f"Model output is not a list of SK/SP objects: {e}") from e

    async def parse_student_list(self, file_data: str, mime_type: str) -> List[str]:
        data = await self.generate_json(_document_parts(STUDENT_LIST_PROMPT, file_data, mime_type), STUDENT_LIST_SCHEMA)
        try:
            return _student_names.validate_python(data)
        except ValidationError as e:
            raise GeminiError(f"Model output is not a list of names: {e}") from e


gemini_client = GeminiClient()


async def parse_dskp(file_data: str, mime_type: str) -> List[DSKPEntry]:
    return await gemini_client.parse_dskp(file_data, mime_type)


async def suggest_dskp(subject_name: str, year_level: str) -> List[DSKPEntry]:
    return await gemini_client.suggest_dskp(subject_name, year_level)


async def parse_student_list(file_data: str, mime_type: str) -> List[str]:
    return await gemini_client.parse_student_list(file_data, mime_type)
