import binascii
import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException

from dskp_manager.errors import GeminiError
from dskp_manager.gemini_client import GeminiClient, gemini_client
from dskp_manager.schemas.dskp_schema import DSKPEntry, ParseDocumentRequest, SuggestDSKPRequest

router = APIRouter(prefix="/api/ai", tags=["ai"])
logger = logging.getLogger(__name__)

def get_gemini_client() -> GeminiClient:
    return gemini_client

@router.post("/dskp/parse", response_model=List[DSKPEntry])
async def parse_dskp_document(req: ParseDocumentRequest, ai: GeminiClient = Depends(get_gemini_client)):
    try:
        return await ai.parse_dskp(req.file_data, req.mime_type)
    except binascii.Error:
        raise HTTPException(status_code=400, detail="file_data is not valid base64")
    except GeminiError as e:
        logger.error(f"DSKP Parse Error: {e}")
        raise HTTPException(status_code=502, detail=f"Gagal mengekstrak DSKP: {e}")

@router.post("/dskp/suggest", response_model=List[DSKPEntry])
async def suggest_dskp_items(req: SuggestDSKPRequest, ai: GeminiClient = Depends(get_gemini_client)):
    try:
        return await ai.suggest_dskp(req.subject_name, req.year_level)
    except GeminiError as e:
        logger.error(f"AI Suggestion Error: {e}")
        raise HTTPException(status_code=502, detail=f"Gagal mendapatkan cadangan DSKP: {e}")

@router.post("/students/parse", response_model=List[str])
async def parse_student_document(req: ParseDocumentRequest, ai: GeminiClient = Depends(get_gemini_client)):
    try:
        return await ai.parse_student_list(req.file_data, req.mime_type)
    except binascii.Error:
        raise HTTPException(status_code=400, detail="file_data is not valid base64")
    except GeminiError as e:
        logger.error(f"Student List Parse Error: {e}")
        raise HTTPException(status_code=502, detail=f"Gagal mengekstrak senarai murid: {e}")
