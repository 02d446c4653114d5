"""
Request orchestrators for file operations coming from the eval frame.

Each operation validates its arguments synchronously, then returns an
awaitable that runs the store call, reconciles notebook state and reports
exactly one outcome. The awaitable always settles to None: callers learn
what happened through the report function, never through the return value.
"""
import logging
from typing import Any, Awaitable, Mapping, Optional, Union

from file_broker.adapters.file_store import BaseFileStore
from file_broker.reporter import ReportFn, report_error, report_success
from file_broker.schemas import FetchType, LoadOptions, SaveOptions, SavedFileMetadata
from file_broker.state import (
    Dispatch,
    GetState,
    add_file_action,
    delete_file_action,
    find_file,
)
from file_broker.validation import validate_request_arguments

logger = logging.getLogger(__name__)


async def _settled() -> None:
    return None


def _parse_fetch_type(value: Any) -> Optional[FetchType]:
    """Map a raw fetchType onto the closed FetchType set, None if unrecognized."""
    if value == FetchType.TEXT.value:
        return FetchType.TEXT
    elif value == FetchType.BINARY.value:
        return FetchType.BINARY
    return None


class FileRequestBroker:
    """Runs load/save/delete requests against a file store for one notebook.

    Args:
        file_store: Store client performing the remote operations
        get_state: Returns the current NotebookInfo snapshot
        dispatch: Applies a state action to the notebook
    """

    def __init__(self, file_store: BaseFileStore, get_state: GetState, dispatch: Dispatch):
        self.file_store = file_store
        self.get_state = get_state
        self.dispatch = dispatch

    def load_file(
        self,
        filename: Optional[str] = None,
        file_request_id: Optional[str] = None,
        options: Union[LoadOptions, Mapping, None] = None,
        report: Optional[ReportFn] = None,
    ) -> Awaitable[None]:
        validate_request_arguments("load_file", filename, file_request_id, options, report)
        options = LoadOptions.model_validate(options)

        fetch_type = _parse_fetch_type(options.fetch_type)
        if fetch_type is None:
            report_error(report, file_request_id, f'invalid fetch type "{options.fetch_type}"')
            return _settled()

        return self._load(filename, file_request_id, fetch_type, report)

    async def _load(self, filename: str, file_request_id: str, fetch_type: FetchType, report: ReportFn) -> None:
        logger.info(f"Loading {filename} ({fetch_type.value}) for request {file_request_id}")
        try:
            content = await self.file_store.load(filename, fetch_type)
        except Exception as e:
            report_error(report, file_request_id, str(e))
        else:
            report_success(report, file_request_id, content)

    def save_file(
        self,
        filename: Optional[str] = None,
        file_request_id: Optional[str] = None,
        options: Union[SaveOptions, Mapping, None] = None,
        report: Optional[ReportFn] = None,
    ) -> Awaitable[None]:
        validate_request_arguments("save_file", filename, file_request_id, options, report)
        options = SaveOptions.model_validate(options)

        existing = find_file(self.get_state().files, filename)
        if existing is not None and not options.overwrite:
            report_error(report, file_request_id, f'save: file "{filename}" already exists')
            return _settled()

        return self._save(filename, file_request_id, options, report)

    async def _save(self, filename: str, file_request_id: str, options: SaveOptions, report: ReportFn) -> None:
        logger.info(f"Saving {filename} (overwrite={options.overwrite}) for request {file_request_id}")
        try:
            response = await self.file_store.save(filename, options.data, options.overwrite)
            saved = SavedFileMetadata.model_validate(response)
        except Exception as e:
            report_error(report, file_request_id, str(e))
        else:
            self.dispatch(add_file_action(saved.filename, saved.last_updated, saved.id))
            report_success(report, file_request_id)

    def delete_file(
        self,
        filename: Optional[str] = None,
        file_request_id: Optional[str] = None,
        options: Any = None,
        report: Optional[ReportFn] = None,
    ) -> Awaitable[None]:
        validate_request_arguments(
            "delete_file", filename, file_request_id, options, report, options_required=False
        )

        record = find_file(self.get_state().files, filename)
        if record is None:
            report_error(report, file_request_id, f'delete: file "{filename}" does not exist')
            return _settled()

        return self._delete(filename, file_request_id, record.id, report)

    async def _delete(self, filename: str, file_request_id: str, file_id: int, report: ReportFn) -> None:
        logger.info(f"Deleting {filename} (id {file_id}) for request {file_request_id}")
        try:
            await self.file_store.delete(filename)
        except Exception as e:
            report_error(report, file_request_id, str(e))
        else:
            self.dispatch(delete_file_action(file_id))
            report_success(report, file_request_id)
