"""
Pytest Configuration and Fixtures

Shared fixtures for minio-fluent tests: an in-memory storage capability
for facade tests and a stubbed boto3 client for MinioTemplate tests.
"""

from io import BytesIO
from typing import Dict, List, Optional, Tuple

import boto3
import pytest
from botocore.exceptions import ClientError
from botocore.stub import Stubber

from minio_fluent import (
    Bucket,
    Item,
    MinioTemplate,
    ObjectStatus,
    StorageConfig,
    StorageFacade,
    Upload,
    UserMetadata,
    as_name_predicate,
)


def not_found(code: str = "404", operation: str = "HeadObject") -> ClientError:
    return ClientError({"Error": {"Code": code, "Message": "Not Found"}}, operation)


class FakeOperations:
    """In-memory storage capability with the same call surface as MinioTemplate."""

    def __init__(self):
        self.buckets: Dict[str, Dict[str, dict]] = {}
        self.policies: Dict[str, str] = {}
        self.uploads: Dict[str, List[Tuple[str, str]]] = {}
        self.list_calls = 0

    def add_bucket(self, name: str) -> None:
        self.buckets.setdefault(name, {})

    def put(
        self,
        bucket: str,
        name: str,
        data: bytes = b"",
        meta: Optional[dict] = None,
        content_type: str = "application/octet-stream",
    ) -> None:
        self.add_bucket(bucket)
        self.buckets[bucket][name] = {
            "data": data,
            "meta": dict(UserMetadata(meta)),
            "content_type": content_type,
        }

    def _objects(self, bucket: str) -> Dict[str, dict]:
        if bucket not in self.buckets:
            raise not_found("NoSuchBucket", "ListObjectsV2")
        return self.buckets[bucket]

    def _object(self, bucket: str, name: str) -> dict:
        objects = self.buckets.get(bucket, {})
        if name not in objects:
            raise not_found()
        return objects[name]

    def find_buckets(self, name_filter=None):
        self.list_calls += 1
        matches = as_name_predicate(name_filter)
        return [Bucket(name, None, self) for name in self.buckets if matches(name)]

    def find_bucket(self, bucket: str):
        return next(iter(self.find_buckets(bucket)), None)

    def is_bucket(self, bucket: str) -> bool:
        return bucket in self.buckets

    def delete_bucket(self, bucket: str) -> bool:
        return self.buckets.pop(bucket, None) is not None

    def ensure_bucket(self, bucket: str) -> bool:
        if bucket in self.buckets:
            return False
        self.add_bucket(bucket)
        return True

    def get_bucket_policy(self, bucket: str) -> str:
        if bucket not in self.policies:
            raise not_found("NoSuchBucketPolicy", "GetBucketPolicy")
        return self.policies[bucket]

    def find_items(self, bucket: str, prefix: Optional[str] = None, recursive: bool = True):
        self.list_calls += 1
        prefix = prefix or ""
        directories = set()
        for key, obj in sorted(self._objects(bucket).items()):
            if not key.startswith(prefix):
                continue
            rest = key[len(prefix):]
            if not recursive and "/" in rest:
                directory = prefix + rest.split("/", 1)[0] + "/"
                if directory not in directories:
                    directories.add(directory)
                    yield Item(directory, bucket, self, is_file=False)
                continue
            yield Item(key, bucket, self, size=len(obj["data"]))

    def find_item(self, bucket: str, name: str):
        if bucket not in self.buckets:
            return None
        return next((item for item in self.find_items(bucket, name) if item.name == name), None)

    def find_incomplete_uploads(self, bucket: str, prefix: Optional[str] = None, recursive: bool = True):
        self.list_calls += 1
        prefix = prefix or ""
        for name, upload_id in self.uploads.get(bucket, []):
            rest = name[len(prefix):]
            if name.startswith(prefix) and (recursive or "/" not in rest):
                yield Upload(name, bucket, upload_id)

    def is_object(self, bucket: str, name: str) -> bool:
        return name in self.buckets.get(bucket, {})

    def delete_object(self, bucket: str, name: str) -> bool:
        return self.buckets.get(bucket, {}).pop(name, None) is not None

    def copy_object(self, bucket, name, dest_bucket, dest_name=None, conditions=None) -> bool:
        if not self.is_object(bucket, name):
            return False
        source = self.buckets[bucket][name]
        self.add_bucket(dest_bucket)
        meta = {} if conditions is not None and conditions.replace_metadata else source["meta"]
        self.buckets[dest_bucket][dest_name or name] = dict(source, meta=dict(meta))
        return True

    def get_object_status(self, bucket: str, name: str) -> ObjectStatus:
        obj = self._object(bucket, name)
        return ObjectStatus(
            name=name,
            bucket=bucket,
            size=len(obj["data"]),
            content_type=obj["content_type"],
            user_metadata=UserMetadata(obj["meta"]),
        )

    def get_object_stream(self, bucket: str, name: str):
        return BytesIO(self._object(bucket, name)["data"])

    def get_user_metadata(self, bucket: str, name: str) -> UserMetadata:
        return UserMetadata(self._object(bucket, name)["meta"])

    def set_user_metadata(self, bucket: str, name: str, meta) -> None:
        self._object(bucket, name)["meta"] = dict(UserMetadata(meta))

    def add_user_metadata(self, bucket: str, name: str, meta) -> None:
        if not meta:
            return
        obj = self._object(bucket, name)
        obj["meta"] = dict(UserMetadata(obj["meta"]).merge(meta))


@pytest.fixture
def fake_operations() -> FakeOperations:
    """Return an in-memory capability holding three buckets and a few objects."""
    operations = FakeOperations()
    for name in ("a", "b", "c"):
        operations.add_bucket(name)
    operations.put("a", "report.json", b'{"name": "Dean Jones", "year": 1963}', {"owner": "ana"})
    operations.put("a", "logs/2024/01.txt", b"january")
    operations.put("a", "logs/2024/02.txt", b"february")
    operations.put("a", "logs/latest.txt", b"latest")
    return operations


@pytest.fixture
def facade(fake_operations: FakeOperations) -> StorageFacade:
    """Return a facade over the in-memory capability."""
    return StorageFacade(fake_operations)


@pytest.fixture
def storage_config() -> StorageConfig:
    """Return a config pointing at a local MinIO."""
    return StorageConfig(
        endpoint_url="http://localhost:9000",
        access_key="minio",
        secret_key="minio123",
        region="us-east-1",
    )


@pytest.fixture
def s3_client(storage_config: StorageConfig):
    """Return a real boto3 S3 client; no request leaves the process under Stubber."""
    return boto3.client(
        "s3",
        endpoint_url=storage_config.endpoint_url,
        aws_access_key_id=storage_config.access_key,
        aws_secret_access_key=storage_config.secret_key,
        region_name=storage_config.region,
    )


@pytest.fixture
def stubber(s3_client):
    """Activate a botocore Stubber on the S3 client."""
    with Stubber(s3_client) as stub:
        yield stub
        stub.assert_no_pending_responses()


@pytest.fixture
def template(s3_client, stubber, storage_config: StorageConfig) -> MinioTemplate:
    """Return a MinioTemplate over the stubbed client."""
    return MinioTemplate(client=s3_client, storage_config=storage_config)
