import logging
from typing import Any, List, Optional, Sequence

from dskp_manager.errors import BatchCommitError, PersistenceError
from dskp_manager.gemini_client import gemini_client
from dskp_manager.schemas.dskp_schema import ClassResponse, DSKPEntry, DSKPItemResponse, Suggestion, SubjectResponse
from dskp_manager.schemas.view_schema import (
    DSKPItemRow,
    SubjectManagerView,
    SubjectRow,
    SuggestionModalView,
    SuggestionRow,
)
from dskp_manager.services.api_client import PersistenceClient
from dskp_manager.utils.data_url import extract_base64_payload, read_file_as_data_url

logger = logging.getLogger(__name__)


class SubjectManager:
    """UI state for managing the subjects of one class and their DSKP items.

    State lives in plain attributes and is only changed by the transition
    methods below. Every network call is awaited in sequence: batch commits post
    one item at a time, in input order, then refresh the item list once.

    ``ai`` is anything with ``parse_dskp`` and ``suggest_dskp`` coroutines; the
    shared :data:`gemini_client` is used when it is omitted.
    """

    def __init__(self, class_data: ClassResponse, api: PersistenceClient, ai: Any = None):
        self.class_data = class_data
        self.api = api
        self.ai = ai or gemini_client

        self.subjects: List[SubjectResponse] = []
        self.selected_subject: Optional[SubjectResponse] = None
        self.dskp_items: List[DSKPItemResponse] = []
        self.ai_suggestions: List[Suggestion] = []

        self.is_adding_subject = False
        self.is_uploading_dskp = False
        self.is_suggesting = False
        self.show_ai_modal = False

    @property
    def is_busy(self) -> bool:
        return self.is_uploading_dskp or self.is_suggesting

    @property
    def selected_count(self) -> int:
        return sum(1 for s in self.ai_suggestions if s.selected)

    # --- Subjects ---

    async def load(self) -> None:
        self.subjects = await self.api.list_subjects(self.class_data.id)

    async def select_subject(self, subject: Optional[SubjectResponse]) -> None:
        self.selected_subject = subject
        if subject is None:
            self.dskp_items = []
            return
        await self._reload_items(subject)

    def open_add_subject(self) -> None:
        self.is_adding_subject = True

    def cancel_add_subject(self) -> None:
        self.is_adding_subject = False

    async def add_subject(self, name: str) -> Optional[SubjectResponse]:
        name = name.strip()
        if not name:
            return None

        try:
            new_id = await self.api.create_subject(self.class_data.id, name)
        except PersistenceError as e:
            logger.error(f"Failed to add subject {name!r} to class {self.class_data.id}: {e}")
            return None

        new_sub = SubjectResponse(id=new_id, class_id=self.class_data.id, name=name)
        self.subjects = [*self.subjects, new_sub]
        self.is_adding_subject = False
        await self.select_subject(new_sub)
        return new_sub

    # --- DSKP import ---

    async def import_dskp_file(self, path) -> Optional[List[DSKPEntry]]:
        if self.selected_subject is None or self.is_busy:
            return None
        try:
            data_url, mime_type = read_file_as_data_url(path)
        except OSError as e:
            logger.error(f"DSKP Read Error: {e}", exc_info=True)
            return None
        return await self.import_dskp(data_url, mime_type)

    async def import_dskp(self, data_url: str, mime_type: str) -> Optional[List[DSKPEntry]]:
        """Extract SK/SP pairs from a document and save each one to the selected subject.

        Returns the extracted entries, or ``None`` when the flow did not run or the
        extraction failed.
        """
        subject = self.selected_subject
        if subject is None or self.is_busy:
            return None

        self.is_uploading_dskp = True
        try:
            try:
                entries = await self.ai.parse_dskp(extract_base64_payload(data_url), mime_type)
            except Exception as e:
                logger.error(f"DSKP Parse Error: {e}", exc_info=True)
                return None
            await self._commit_items(subject, entries)
            return entries
        finally:
            self.is_uploading_dskp = False

    # --- AI suggestions ---

    async def request_suggestions(self) -> None:
        subject = self.selected_subject
        if subject is None or self.is_busy:
            return

        self.is_suggesting = True
        try:
            suggestions = await self.ai.suggest_dskp(subject.name, self.class_data.year)
            self.ai_suggestions = [Suggestion(sk=s.sk, sp=s.sp, selected=True) for s in suggestions]
            self.show_ai_modal = True
        except Exception as e:
            logger.error(f"AI Suggestion Error: {e}", exc_info=True)
        finally:
            self.is_suggesting = False

    def toggle_suggestion(self, index: int) -> None:
        if index < 0:
            raise IndexError(f"Suggestion index out of range: {index}")
        target = self.ai_suggestions[index]
        suggestions = list(self.ai_suggestions)
        suggestions[index] = target.model_copy(update={"selected": not target.selected})
        self.ai_suggestions = suggestions

    def dismiss_suggestions(self) -> None:
        self.show_ai_modal = False
        self.ai_suggestions = []

    async def add_selected_suggestions(self) -> List[Suggestion]:
        subject = self.selected_subject
        if subject is None:
            return []

        to_add = [s for s in self.ai_suggestions if s.selected]
        try:
            await self._commit_items(subject, to_add)
        except BatchCommitError as e:
            # Committed suggestions are deselected so confirming again only posts the rest
            done = {id(s) for s in to_add[:e.committed]}
            self.ai_suggestions = [
                s.model_copy(update={"selected": False}) if id(s) in done else s
                for s in self.ai_suggestions
            ]
            raise

        self.show_ai_modal = False
        self.ai_suggestions = []
        return to_add

    # --- Helpers ---

    async def _reload_items(self, subject: SubjectResponse) -> None:
        items = await self.api.list_dskp(subject.id)
        # Ignore a response for a subject that is no longer selected
        if self.selected_subject is not None and self.selected_subject.id == subject.id:
            self.dskp_items = items

    async def _commit_items(self, subject: SubjectResponse, entries: Sequence[DSKPEntry]) -> None:
        committed = 0
        try:
            for entry in entries:
                await self.api.create_dskp_item(subject.id, entry.sk, entry.sp)
                committed += 1
        except PersistenceError as e:
            logger.error(f"Stopped after {committed}/{len(entries)} DSKP items for subject {subject.id}: {e}")
            try:
                await self._reload_items(subject)
            except PersistenceError as reload_err:
                logger.error(f"Could not reload DSKP items for subject {subject.id}: {reload_err}")
            raise BatchCommitError(committed, len(entries), e) from e

        logger.info(f"Saved {committed} DSKP items for subject {subject.id}")
        await self._reload_items(subject)

    # --- Rendering ---

    def view(self) -> SubjectManagerView:
        selected_id = self.selected_subject.id if self.selected_subject else None
        view = SubjectManagerView(
            subjects=[SubjectRow(id=s.id, name=s.name, selected=s.id == selected_id) for s in self.subjects],
            show_add_subject_form=self.is_adding_subject,
        )
        if not self.subjects and not self.is_adding_subject:
            view.subjects_empty_message = "No subjects added yet."

        if self.selected_subject is None:
            view.placeholder_title = "Select a Subject"
            view.placeholder_message = "Choose a subject from the left panel to manage its DSKP standards."
            return view

        view.heading = f"{self.selected_subject.name} DSKP"
        view.item_count_label = f"{len(self.dskp_items)} Items"
        view.items = [DSKPItemRow(number=i + 1, sk=item.sk, sp=item.sp) for i, item in enumerate(self.dskp_items)]
        if not self.dskp_items and not self.is_uploading_dskp:
            view.items_empty_message = "No DSKP items found for this subject."
            view.items_empty_hint = "Upload a PDF to auto-extract SK/SP items."

        view.suggest_button_label = "Thinking..." if self.is_suggesting else "Suggest with AI"
        view.suggest_button_disabled = self.is_busy
        view.import_button_label = "Parsing DSKP..." if self.is_uploading_dskp else "Import DSKP (PDF)"
        view.import_button_disabled = self.is_busy

        if self.show_ai_modal:
            count = self.selected_count
            view.modal = SuggestionModalView(
                subtitle=f"Based on {self.selected_subject.name} Year {self.class_data.year}",
                suggestions=[
                    SuggestionRow(index=i, sk=s.sk, sp=s.sp, selected=s.selected)
                    for i, s in enumerate(self.ai_suggestions)
                ],
                selected_count=count,
                add_selected_label=f"Add Selected ({count})",
            )
        return view
