"""
Local notebook state: the file collection, its reducer and a minimal store.

The reducer is the only place the file collection changes. Orchestrators
reach it through `dispatch`, after the store call they depend on has settled.
"""
import logging
from typing import Any, Callable, Dict, List, Optional

from file_broker.schemas import FileRecord, FileSource, NotebookInfo

logger = logging.getLogger(__name__)

ADD_FILE_TO_NOTEBOOK = "ADD_FILE_TO_NOTEBOOK"
DELETE_FILE_FROM_NOTEBOOK = "DELETE_FILE_FROM_NOTEBOOK"
ADD_FILE_SOURCE_TO_NOTEBOOK = "ADD_FILE_SOURCE_TO_NOTEBOOK"
DELETE_FILE_SOURCE_FROM_NOTEBOOK = "DELETE_FILE_SOURCE_FROM_NOTEBOOK"

Action = Dict[str, Any]
GetState = Callable[[], NotebookInfo]
Dispatch = Callable[[Action], Any]


def add_file_action(filename: str, last_updated: str, file_id: int) -> Action:
    return {
        "type": ADD_FILE_TO_NOTEBOOK,
        "filename": filename,
        "lastUpdated": last_updated,
        "fileID": file_id,
    }


def delete_file_action(file_id: int) -> Action:
    return {"type": DELETE_FILE_FROM_NOTEBOOK, "fileID": file_id}


def add_or_replace_file(files: List[FileRecord], record: FileRecord) -> List[FileRecord]:
    """Return a new collection holding `record` in place of any file sharing its name or id."""
    kept = [f for f in files if f.filename != record.filename and f.id != record.id]
    return kept + [record]


def remove_file(files: List[FileRecord], file_id: int) -> List[FileRecord]:
    return [f for f in files if f.id != file_id]


def find_file(files: List[FileRecord], filename: str) -> Optional[FileRecord]:
    for record in files:
        if record.filename == filename:
            return record
    return None


def notebook_reducer(state: NotebookInfo, action: Action) -> NotebookInfo:
    """Apply one action to the notebook state, returning the new snapshot."""
    action_type = action["type"]

    if action_type == ADD_FILE_TO_NOTEBOOK:
        record = FileRecord(
            id=action["fileID"],
            filename=action["filename"],
            last_updated=action["lastUpdated"],
        )
        return state.model_copy(update={"files": add_or_replace_file(state.files, record)})

    if action_type == DELETE_FILE_FROM_NOTEBOOK:
        return state.model_copy(update={"files": remove_file(state.files, action["fileID"])})

    if action_type == ADD_FILE_SOURCE_TO_NOTEBOOK:
        source = FileSource(
            id=action["file_source_id"],
            source_url=action["source_url"],
            destination_filename=action["destination_filename"],
            frequency=action.get("frequency"),
        )
        sources = [s for s in state.file_sources if s.id != source.id] + [source]
        return state.model_copy(update={"file_sources": sources})

    if action_type == DELETE_FILE_SOURCE_FROM_NOTEBOOK:
        sources = [s for s in state.file_sources if s.id != action["file_source_id"]]
        return state.model_copy(update={"file_sources": sources})

    return state


class NotebookStore:
    """Reducer-style container for a single notebook's state."""

    def __init__(self, initial_state: Optional[NotebookInfo] = None):
        self._state = initial_state or NotebookInfo()
        self.actions: List[Action] = []

    def get_state(self) -> NotebookInfo:
        return self._state

    def dispatch(self, action: Action) -> Action:
        logger.debug(f"Dispatching {action['type']} on notebook {self._state.notebook_id}")
        self._state = notebook_reducer(self._state, action)
        self.actions.append(action)
        return action
