import logging
from pathlib import Path
from typing import List, Optional, Union

import boto3
from botocore.exceptions import ClientError

from file_broker.database import file_index
from file_broker.errors import FileAlreadyExistsError, FileMissingError, FileStoreError
from file_broker.schemas import FetchType
from file_broker.settings import Settings, get_settings
from file_broker.utils.decorators import async_log_execution_time

try:
    from mypy_boto3_s3 import S3Client
except ImportError:
    ...

logger = logging.getLogger(__name__)


class BaseFileStore:
    """Base class for file stores (object primitives are provided by subclasses).

    Object content lives wherever the subclass puts it; ids and last-updated
    timestamps live in the sqlite file index so every backend hands back the
    same metadata shape.
    """

    def __init__(self, notebook_id: str, db_path: str):
        self.notebook_id = notebook_id
        self.db_path = db_path
        file_index.init_db(db_path)

    def object_key(self, filename: str) -> str:
        return f"notebooks/{self.notebook_id}/{filename}"

    def _object_exists(self, key: str) -> bool:
        raise NotImplementedError

    def _read_object(self, key: str) -> bytes:
        raise NotImplementedError

    def _write_object(self, key: str, content: bytes) -> None:
        raise NotImplementedError

    def _delete_object(self, key: str) -> None:
        raise NotImplementedError

    @async_log_execution_time
    async def load(self, filename: str, fetch_type: Union[FetchType, str]) -> Union[str, bytes]:
        """Return the file's content, decoded as UTF-8 for text fetches."""
        key = self.object_key(filename)
        if not self._object_exists(key):
            raise FileMissingError(f'file "{filename}" does not exist')

        content = self._read_object(key)
        if FetchType(fetch_type) is FetchType.BINARY:
            return content
        return content.decode("utf-8")

    @async_log_execution_time
    async def save(self, filename: str, content: Union[str, bytes], overwrite: bool) -> dict:
        """Write the file and return its `{filename, id, last_updated}` metadata."""
        key = self.object_key(filename)
        if not overwrite and self._object_exists(key):
            raise FileAlreadyExistsError(f'file "{filename}" already exists')

        if isinstance(content, str):
            content = content.encode("utf-8")
        self._write_object(key, content)
        return file_index.upsert_file(self.notebook_id, filename, self.db_path)

    @async_log_execution_time
    async def delete(self, filename: str) -> None:
        key = self.object_key(filename)
        if not self._object_exists(key):
            raise FileMissingError(f'file "{filename}" does not exist')

        self._delete_object(key)
        file_index.remove_file(self.notebook_id, filename, self.db_path)

    async def list_files(self) -> List[dict]:
        return file_index.list_files(self.notebook_id, self.db_path)

    async def save_file_source(
        self,
        notebook_id: str,
        source_url: str,
        destination_filename: str,
        update_interval: Optional[str] = None,
    ) -> dict:
        return file_index.add_file_source(
            notebook_id, source_url, destination_filename, update_interval, self.db_path
        )

    async def delete_file_source(self, file_source_id: int) -> None:
        if not file_index.remove_file_source(file_source_id, self.db_path):
            raise FileMissingError(f"file source {file_source_id} does not exist")


class LocalFileStore(BaseFileStore):
    """Keeps notebook files under a local storage directory"""

    def __init__(self, notebook_id: str, storage_dir: str, db_path: str):
        super().__init__(notebook_id, db_path)
        self.storage_dir = Path(storage_dir)
        self.storage_dir.mkdir(parents=True, exist_ok=True)
        self.notebook_dir = (self.storage_dir / self.object_key("")).resolve()
        if self.notebook_dir.parent != (self.storage_dir / "notebooks").resolve():
            raise FileStoreError(f'invalid notebook id "{notebook_id}"')
        logger.info("LocalFileStore initialized at: %s", self.storage_dir)

    def _path(self, key: str) -> Path:
        path = (self.storage_dir / key).resolve()
        if not path.is_relative_to(self.notebook_dir):
            raise FileStoreError(f'invalid filename: "{key}" is outside notebook {self.notebook_id}')
        return path

    def _object_exists(self, key: str) -> bool:
        return self._path(key).is_file()

    def _read_object(self, key: str) -> bytes:
        return self._path(key).read_bytes()

    def _write_object(self, key: str, content: bytes) -> None:
        path = self._path(key)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(content)

    def _delete_object(self, key: str) -> None:
        self._path(key).unlink()


class S3FileStore(BaseFileStore):
    """Keeps notebook files in an S3 bucket"""

    def __init__(
        self,
        notebook_id: str,
        bucket_name: str,
        db_path: str,
        s3_client: Optional["S3Client"] = None,
        settings: Optional[Settings] = None,
    ):
        super().__init__(notebook_id, db_path)
        if s3_client is None:
            settings = settings or get_settings()
            s3_client = boto3.client(
                "s3",
                endpoint_url=settings.aws_endpoint_url,
                aws_access_key_id=settings.aws_access_key_id,
                aws_secret_access_key=settings.aws_secret_access_key,
                region_name=settings.aws_region
            )
        self.s3 = s3_client
        self.bucket_name = bucket_name

        logger.info(f"S3FileStore initialized")
        logger.info(f"  Bucket: {self.bucket_name}")

    def _object_exists(self, key: str) -> bool:
        try:
            self.s3.head_object(Bucket=self.bucket_name, Key=key)
            return True
        except ClientError as e:
            if e.response.get('Error', {}).get('Code') in ('404', 'NoSuchKey', 'NotFound'):
                return False
            raise

    def _read_object(self, key: str) -> bytes:
        response = self.s3.get_object(Bucket=self.bucket_name, Key=key)
        return response["Body"].read()

    def _write_object(self, key: str, content: bytes) -> None:
        self.s3.put_object(
            Bucket=self.bucket_name,
            Key=key,
            Body=content,
            ContentType="application/octet-stream",
        )
        logger.info(f"Uploaded {key} to S3 bucket {self.bucket_name}")

    def _delete_object(self, key: str) -> None:
        self.s3.delete_object(Bucket=self.bucket_name, Key=key)


class FileStoreFactory:
    """Factory to initialize the correct file store based on deployment mode"""

    @staticmethod
    def get_file_store(notebook_id: Optional[str] = None, settings: Optional[Settings] = None) -> BaseFileStore:
        settings = settings or get_settings()
        notebook_id = notebook_id or settings.notebook_id

        deployment_mode = settings.deployment_mode
        logger.info(f"Creating file store for mode: {deployment_mode}")

        if deployment_mode == "local-dev":
            return LocalFileStore(notebook_id, settings.storage_dir, settings.index_db_path)
        elif deployment_mode in ("aws-mock", "aws-prod"):
            return S3FileStore(
                notebook_id, settings.s3_bucket_name, settings.index_db_path, settings=settings
            )
        raise ValueError(
            f"Invalid deployment_mode: {deployment_mode}. "
            f"Choose from ['local-dev', 'aws-mock', 'aws-prod']"
        )
