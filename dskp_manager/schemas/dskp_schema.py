from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import Optional

# --- Persistence Boundary ---
class ClassCreate(BaseModel):
    year: str = Field(..., example="4")
    name: Optional[str] = Field(None, example="4 Bestari")

class ClassResponse(BaseModel):
    id: int
    year: str
    name: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)

class SubjectCreate(BaseModel):
    name: str = Field(..., example="Matematik")

    @field_validator("name")
    @classmethod
    def name_not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("Subject name must not be empty")
        return value

class SubjectCreated(BaseModel):
    id: int

class SubjectResponse(BaseModel):
    id: int
    class_id: int
    name: str

    model_config = ConfigDict(from_attributes=True)

class DSKPItemCreate(BaseModel):
    sk: str
    sp: str

class DSKPItemCreated(BaseModel):
    id: int
    message: str = "DSKP item saved"

class DSKPItemResponse(BaseModel):
    id: int
    subject_id: int
    sk: str
    sp: str

    model_config = ConfigDict(from_attributes=True)

# --- AI contract ---
class DSKPEntry(BaseModel):
    """One SK/SP pair as returned by the model."""
    sk: str
    sp: str

class Suggestion(DSKPEntry):
    selected: bool = True

class ParseDocumentRequest(BaseModel):
    file_data: str # base64 payload, without the data URL prefix
    mime_type: str = Field("application/pdf", example="application/pdf")

class SuggestDSKPRequest(BaseModel):
    subject_name: str = Field(..., example="Matematik")
    year_level: str = Field(..., example="4")
