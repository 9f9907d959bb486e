from pydantic import BaseModel
from typing import List, Optional

class SubjectRow(BaseModel):
    id: int
    name: str
    selected: bool

class DSKPItemRow(BaseModel):
    number: int # 1-based display position
    sk: str
    sp: str

class SuggestionRow(BaseModel):
    index: int
    sk: str
    sp: str
    selected: bool

class SuggestionModalView(BaseModel):
    title: str = "AI Suggestions"
    subtitle: str
    suggestions: List[SuggestionRow]
    selected_count: int
    add_selected_label: str

class SubjectManagerView(BaseModel):
    # Sidebar
    subjects: List[SubjectRow]
    subjects_empty_message: Optional[str] = None
    show_add_subject_form: bool = False

    # Placeholder when nothing is selected
    placeholder_title: Optional[str] = None
    placeholder_message: Optional[str] = None

    # DSKP panel
    heading: Optional[str] = None
    item_count_label: Optional[str] = None
    items: List[DSKPItemRow] = []
    items_empty_message: Optional[str] = None
    items_empty_hint: Optional[str] = None
    suggest_button_label: Optional[str] = None
    suggest_button_disabled: bool = False
    import_button_label: Optional[str] = None
    import_button_disabled: bool = False

    modal: Optional[SuggestionModalView] = None
