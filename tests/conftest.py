import os

import boto3
import pytest
from fastapi.testclient import TestClient
from moto import mock_aws

from file_broker.main import create_app
from file_broker.settings import Settings, get_settings
from tests.consts import TEST_BUCKET_NAME, TEST_NOTEBOOK_ID
from tests.fixtures.notebook_fixtures import broker, file_store, notebook_store, report  # noqa: F401


def point_away_from_aws() -> None:
    """Make sure boto3 never reaches a real AWS account from the tests."""
    os.environ["AWS_ACCESS_KEY_ID"] = "mock"
    os.environ["AWS_SECRET_ACCESS_KEY"] = "mock"
    os.environ["AWS_SECURITY_TOKEN"] = "mock"
    os.environ["AWS_SESSION_TOKEN"] = "mock"
    os.environ["AWS_DEFAULT_REGION"] = "us-east-1"


@pytest.fixture
def mocked_aws():
    point_away_from_aws()
    with mock_aws():
        s3_client = boto3.client("s3", region_name="us-east-1")
        s3_client.create_bucket(Bucket=TEST_BUCKET_NAME)
        yield s3_client


@pytest.fixture
def local_settings(tmp_path):
    return Settings(
        deployment_mode="local-dev",
        storage_dir=str(tmp_path / "storage"),
        index_db_path=str(tmp_path / "file_index.db"),
        notebook_id=TEST_NOTEBOOK_ID,
    )


@pytest.fixture
def client(local_settings):
    app = create_app(settings=local_settings)
    with TestClient(app) as client:
        yield client


@pytest.fixture
def cli_env(monkeypatch, tmp_path):
    """Point the cached settings used by the CLI at a temporary local store."""
    monkeypatch.setenv("DEPLOYMENT_MODE", "local-dev")
    monkeypatch.setenv("STORAGE_DIR", str(tmp_path / "storage"))
    monkeypatch.setenv("INDEX_DB_PATH", str(tmp_path / "file_index.db"))
    monkeypatch.setenv("NOTEBOOK_ID", TEST_NOTEBOOK_ID)
    get_settings.cache_clear()
    yield tmp_path
    get_settings.cache_clear()
