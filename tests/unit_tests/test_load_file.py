import pytest

from file_broker.errors import CallerContractError
from file_broker.schemas import FetchType, LoadOptions


@pytest.mark.parametrize("args", [
    (),
    ("file1.csv",),
    ("file1.csv", "some-file-id"),
    ("file1.csv", "some-file-id", {"fetchType": "text"}),
    ("", "some-file-id", {"fetchType": "text"}, print),
])
def test_load_file__fails_if_not_enough_arguments(broker, file_store, args):
    with pytest.raises(CallerContractError):
        broker.load_file(*args)
    file_store.load.assert_not_called()


@pytest.mark.asyncio
async def test_load_file__invalid_fetch_type_is_reported(broker, file_store, notebook_store, report):
    request = broker.load_file("file1.csv", "some-file-id", {"fetchType": "error"}, report)

    # reported before the request is awaited
    report.assert_called_once_with(
        "REQUESTED_FILE_OPERATION_ERROR",
        {"fileRequestID": "some-file-id", "reason": 'invalid fetch type "error"'},
    )
    assert await request is None
    file_store.load.assert_not_called()
    assert notebook_store.actions == []


@pytest.mark.asyncio
async def test_load_file__store_error_is_reported(broker, file_store, notebook_store, report):
    file_store.load.side_effect = Exception("artificial error")

    request = broker.load_file("file1.csv", "file-request-id-0", {"fetchType": "text"}, report)

    assert await request is None
    file_store.load.assert_awaited_once()
    assert notebook_store.actions == []
    report.assert_called_once_with(
        "REQUESTED_FILE_OPERATION_ERROR",
        {"fileRequestID": "file-request-id-0", "reason": "artificial error"},
    )


@pytest.mark.asyncio
async def test_load_file__success_is_reported_with_content(broker, file_store, notebook_store, report):
    file_store.load.return_value = "loaded-file-contents"

    request = broker.load_file("file1.csv", "file-request-id-0", {"fetchType": "text"}, report)

    assert await request is None
    file_store.load.assert_awaited_once_with("file1.csv", FetchType.TEXT)
    assert notebook_store.actions == []
    report.assert_called_once_with(
        "REQUESTED_FILE_OPERATION_SUCCESS",
        {"response": "loaded-file-contents", "fileRequestID": "file-request-id-0"},
    )


@pytest.mark.asyncio
async def test_load_file__binary_fetch(broker, file_store, report):
    file_store.load.return_value = b"\x00\x01"

    await broker.load_file("file1.csv", "file-request-id-0", LoadOptions(fetch_type="binary"), report)

    file_store.load.assert_awaited_once_with("file1.csv", FetchType.BINARY)
    assert report.call_args.args[1]["response"] == b"\x00\x01"
