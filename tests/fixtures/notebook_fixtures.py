"""Notebook state and file store fixtures shared by the broker tests."""
from unittest.mock import AsyncMock, MagicMock, Mock

import pytest

from file_broker.adapters.file_store import BaseFileStore
from file_broker.orchestrators import FileRequestBroker
from file_broker.schemas import FileRecord, NotebookInfo
from file_broker.state import NotebookStore
from tests.consts import TEST_NOTEBOOK_ID


def initial_state() -> NotebookInfo:
    return NotebookInfo(
        notebook_id=TEST_NOTEBOOK_ID,
        files=[
            FileRecord(filename="file1.csv", id=0, last_updated="2019-04-03T16:51:45.075609+00:00"),
            FileRecord(filename="file2.csv", id=1, last_updated="2019-04-01T14:51:00.075609+00:00"),
            FileRecord(filename="file3.csv", id=2, last_updated="2019-03-29T22:22:12.075609+00:00"),
        ],
    )


@pytest.fixture
def notebook_store():
    return NotebookStore(initial_state())


@pytest.fixture
def file_store():
    store = MagicMock(spec=BaseFileStore)
    store.load = AsyncMock()
    store.save = AsyncMock()
    store.delete = AsyncMock()
    store.save_file_source = AsyncMock()
    store.delete_file_source = AsyncMock()
    return store


@pytest.fixture
def report():
    return Mock()


@pytest.fixture
def broker(file_store, notebook_store):
    return FileRequestBroker(file_store, notebook_store.get_state, notebook_store.dispatch)
