import pytest

from file_broker.adapters.file_store import FileStoreFactory, LocalFileStore, S3FileStore
from file_broker.errors import FileAlreadyExistsError, FileMissingError, FileStoreError
from file_broker.schemas import FetchType
from file_broker.settings import Settings
from tests.consts import TEST_NOTEBOOK_ID


@pytest.fixture
def local_store(tmp_path):
    return LocalFileStore(TEST_NOTEBOOK_ID, str(tmp_path / "storage"), str(tmp_path / "file_index.db"))


@pytest.mark.asyncio
async def test_save_then_load_text_and_binary(local_store):
    metadata = await local_store.save("data.csv", "a,b\n1,2\n", overwrite=False)

    assert metadata["filename"] == "data.csv"
    assert isinstance(metadata["id"], int)
    assert metadata["last_updated"]

    assert await local_store.load("data.csv", FetchType.TEXT) == "a,b\n1,2\n"
    assert await local_store.load("data.csv", "binary") == b"a,b\n1,2\n"


@pytest.mark.asyncio
async def test_save_existing_file_requires_overwrite(local_store):
    first = await local_store.save("data.csv", b"one", overwrite=False)

    with pytest.raises(FileAlreadyExistsError, match='file "data.csv" already exists'):
        await local_store.save("data.csv", b"two", overwrite=False)

    second = await local_store.save("data.csv", b"two", overwrite=True)
    assert second["id"] == first["id"]
    assert await local_store.load("data.csv", FetchType.BINARY) == b"two"


@pytest.mark.asyncio
async def test_load_missing_file(local_store):
    with pytest.raises(FileMissingError) as exc_info:
        await local_store.load("nope.csv", FetchType.TEXT)
    assert str(exc_info.value) == 'file "nope.csv" does not exist'


@pytest.mark.asyncio
async def test_delete_removes_object_and_index_entry(local_store):
    await local_store.save("data.csv", b"x", overwrite=False)
    await local_store.save("other.csv", b"y", overwrite=False)

    await local_store.delete("data.csv")

    assert [f["filename"] for f in await local_store.list_files()] == ["other.csv"]
    with pytest.raises(FileMissingError):
        await local_store.delete("data.csv")


@pytest.mark.asyncio
@pytest.mark.parametrize("filename", ["../../../escaped.txt", "../other-notebook/data.csv"])
async def test_filenames_cannot_leave_the_notebook_directory(local_store, tmp_path, filename):
    with pytest.raises(FileStoreError):
        await local_store.save(filename, "pwned", overwrite=False)
    with pytest.raises(FileStoreError):
        await local_store.load(filename, FetchType.TEXT)
    with pytest.raises(FileStoreError):
        await local_store.delete(filename)

    assert not (tmp_path / "escaped.txt").exists()
    assert not (tmp_path / "storage" / "notebooks" / "other-notebook").exists()
    assert await local_store.list_files() == []


def test_notebook_id_cannot_leave_the_storage_directory(tmp_path):
    with pytest.raises(FileStoreError):
        LocalFileStore("..", str(tmp_path / "storage"), str(tmp_path / "file_index.db"))


@pytest.mark.asyncio
async def test_file_sources_round_trip(local_store):
    source = await local_store.save_file_source(
        TEST_NOTEBOOK_ID, "https://example.com/data.csv", "data.csv", "1 day, 0:00:00"
    )

    await local_store.delete_file_source(source["id"])
    with pytest.raises(FileMissingError):
        await local_store.delete_file_source(source["id"])


def test_factory_picks_store_by_deployment_mode(tmp_path, mocked_aws):
    local = FileStoreFactory.get_file_store(settings=Settings(
        deployment_mode="local-dev",
        storage_dir=str(tmp_path / "storage"),
        index_db_path=str(tmp_path / "file_index.db"),
    ))
    assert isinstance(local, LocalFileStore)
    assert local.notebook_id == "default"

    s3 = FileStoreFactory.get_file_store("nb", settings=Settings(
        deployment_mode="aws-prod",
        index_db_path=str(tmp_path / "file_index.db"),
    ))
    assert isinstance(s3, S3FileStore)


def test_settings_reject_unknown_deployment_mode():
    with pytest.raises(ValueError):
        Settings(deployment_mode="on-a-floppy")
