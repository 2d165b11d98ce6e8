"""
MinIO Operations

MinioTemplate: bucket, object, metadata and policy calls on a boto3 S3
client. Not-found answers become False/None results; every other client
error is logged and re-raised unchanged.
"""

import json
import logging
import mimetypes
from io import BytesIO
from typing import IO, Any, Iterator, Mapping, Optional, Union

from botocore.exceptions import ClientError

from ..config import StorageConfig, config as default_config
from ..data import Bucket, CopyConditions, Item, ObjectStatus, Upload
from ..exceptions import is_not_found
from ..metadata import UserMetadata
from ..storage import NameFilter, as_name_predicate
from .client import get_minio_client

logger = logging.getLogger(__name__)

DEFAULT_CONTENT_TYPE = "application/octet-stream"
DEFAULT_PRESIGN_EXPIRY = 3600  # 1 hour


def guess_content_type(declared: Optional[str], name: str) -> str:
    """
    Resolve an object's content type.

    A declared type other than the generic octet-stream wins; otherwise
    the type is guessed from the object name's extension.
    """
    if declared and declared != DEFAULT_CONTENT_TYPE:
        return declared
    guessed, _ = mimetypes.guess_type(name)
    return guessed or declared or DEFAULT_CONTENT_TYPE


def _etag(value: Optional[str]) -> Optional[str]:
    return value.strip('"') if value else value


class MinioTemplate:
    """
    Storage capability backed by a boto3 S3 client pointed at MinIO.

    The boto3 client is created on first use unless one is injected.
    """

    def __init__(self, client=None, storage_config: Optional[StorageConfig] = None):
        self._client = client
        self._config = storage_config or default_config

    @property
    def client(self):
        if self._client is None:
            self._client = get_minio_client(self._config)
        return self._client

    def __repr__(self) -> str:
        return f"MinioTemplate(endpoint={self._config.endpoint_url!r}, region={self._config.region!r})"

    # ============================================
    # Buckets
    # ============================================

    def is_bucket(self, bucket: str) -> bool:
        """
        Check if a bucket exists.

        Raises:
            ClientError: If the check fails for a reason other than 404
        """
        try:
            self.client.head_bucket(Bucket=bucket)
            return True
        except ClientError as e:
            if is_not_found(e):
                return False
            logger.error(f"Error checking bucket '{bucket}': {e}")
            raise

    def ensure_bucket(self, bucket: str) -> bool:
        """
        Create a bucket if it doesn't already exist.

        Returns:
            True if the bucket was created, False if it already existed
        """
        if self.is_bucket(bucket):
            logger.info(f"Bucket '{bucket}' already exists")
            return False

        try:
            self.client.create_bucket(Bucket=bucket)
        except ClientError as e:
            logger.error(f"Error creating bucket '{bucket}': {e}")
            raise

        logger.info(f"Bucket '{bucket}' created successfully")
        return True

    def delete_bucket(self, bucket: str) -> bool:
        """
        Delete a bucket.

        Returns:
            True if deleted, False if it did not exist
        """
        if not self.is_bucket(bucket):
            logger.warning(f"Bucket does not exist: '{bucket}'")
            return False

        try:
            self.client.delete_bucket(Bucket=bucket)
        except ClientError as e:
            logger.error(f"Error deleting bucket '{bucket}': {e}")
            raise

        logger.info(f"Deleted bucket: '{bucket}'")
        return True

    def find_buckets(self, name_filter: NameFilter = None) -> Iterator[Bucket]:
        """
        Yield the buckets whose name passes the filter.

        Args:
            name_filter: None, exact name, compiled regex, predicate or set of names
        """
        matches = as_name_predicate(name_filter)
        response = self.client.list_buckets()

        for entry in response.get("Buckets", []):
            name = entry["Name"]
            if matches(name):
                yield Bucket(name, entry.get("CreationDate"), self)

    def find_bucket(self, bucket: str) -> Optional[Bucket]:
        return next(self.find_buckets(bucket), None)

    def get_bucket_policy(self, bucket: str) -> str:
        """Return the bucket's access policy as a raw JSON string."""
        response = self.client.get_bucket_policy(Bucket=bucket)
        return response["Policy"]

    def set_bucket_policy(self, bucket: str, policy: Union[str, Mapping[str, Any]]) -> None:
        """Set the bucket's access policy from a JSON string or a mapping."""
        if not isinstance(policy, str):
            policy = json.dumps(policy)

        try:
            self.client.put_bucket_policy(Bucket=bucket, Policy=policy)
        except ClientError as e:
            logger.error(f"Error setting policy on '{bucket}': {e}")
            raise

        logger.info(f"Policy set for bucket '{bucket}'")

    # ============================================
    # Objects
    # ============================================

    def find_items(
        self, bucket: str, prefix: Optional[str] = None, recursive: bool = True
    ) -> Iterator[Item]:
        """
        Yield the objects of a bucket, page by page.

        Args:
            bucket: Name of the MinIO bucket
            prefix: Only list keys starting with this prefix (None: no filtering)
            recursive: Descend into nested "directories"; when False, the
                first-level prefixes are yielded as items with is_file=False
        """
        params = {"Bucket": bucket}
        if prefix:
            params["Prefix"] = prefix
        if not recursive:
            params["Delimiter"] = self._config.delimiter

        paginator = self.client.get_paginator("list_objects_v2")
        for page in paginator.paginate(**params):
            for entry in page.get("Contents", []):
                yield Item(
                    entry["Key"],
                    bucket,
                    self,
                    size=entry.get("Size", 0),
                    etag=_etag(entry.get("ETag")),
                    is_file=True,
                    last_modified=entry.get("LastModified"),
                    storage_class=entry.get("StorageClass"),
                )
            for entry in page.get("CommonPrefixes", []):
                yield Item(entry["Prefix"], bucket, self, is_file=False)

    def find_item(self, bucket: str, name: str) -> Optional[Item]:
        """Return the object with exactly this name, or None if it or its bucket is missing."""
        try:
            for item in self.find_items(bucket, prefix=name):
                if item.name == name:
                    return item
        except ClientError as e:
            if is_not_found(e):
                logger.warning(f"Bucket does not exist: '{bucket}'")
                return None
            logger.error(f"Error listing objects in '{bucket}': {e}")
            raise
        return None

    def find_incomplete_uploads(
        self, bucket: str, prefix: Optional[str] = None, recursive: bool = True
    ) -> Iterator[Upload]:
        """
        Yield the multipart uploads of a bucket that were never completed.

        Args:
            bucket: Name of the MinIO bucket
            prefix: Only uploads whose key starts with this prefix
            recursive: When False, uploads below the first delimiter are skipped
        """
        params = {"Bucket": bucket}
        if prefix:
            params["Prefix"] = prefix
        if not recursive:
            params["Delimiter"] = self._config.delimiter

        paginator = self.client.get_paginator("list_multipart_uploads")
        for page in paginator.paginate(**params):
            for entry in page.get("Uploads", []):
                yield Upload(
                    entry["Key"],
                    bucket,
                    entry["UploadId"],
                    initiated=entry.get("Initiated"),
                )

    def is_object(self, bucket: str, name: str) -> bool:
        """
        Check if an object exists.

        Raises:
            ClientError: If the check fails for a reason other than 404
        """
        try:
            self.client.head_object(Bucket=bucket, Key=name)
            return True
        except ClientError as e:
            if is_not_found(e):
                return False
            logger.error(f"Error checking object existence: {e}")
            raise

    def delete_object(self, bucket: str, name: str) -> bool:
        """
        Delete an object.

        Returns:
            True if deleted, False if it did not exist
        """
        if not self.is_object(bucket, name):
            logger.warning(f"Object does not exist: '{bucket}/{name}'")
            return False

        try:
            self.client.delete_object(Bucket=bucket, Key=name)
        except ClientError as e:
            logger.error(f"Error deleting object: {e}")
            raise

        logger.info(f"Deleted object: '{bucket}/{name}'")
        return True

    def get_object_status(self, bucket: str, name: str) -> ObjectStatus:
        response = self.client.head_object(Bucket=bucket, Key=name)
        return ObjectStatus(
            name=name,
            bucket=bucket,
            size=response.get("ContentLength", 0),
            content_type=guess_content_type(response.get("ContentType"), name),
            etag=_etag(response.get("ETag")),
            creation_time=response.get("LastModified"),
            user_metadata=UserMetadata(response.get("Metadata")),
        )

    def get_object_stream(
        self, bucket: str, name: str, offset: int = 0, length: Optional[int] = None
    ) -> IO[bytes]:
        """
        Open an object for reading.

        The caller owns the returned stream and must close it.

        Args:
            offset: First byte to read
            length: Number of bytes to read (None: up to the end)

        Raises:
            ValueError: If offset is negative or length is not positive
        """
        if offset < 0:
            raise ValueError(f"Invalid offset: {offset}")
        if length is not None and length <= 0:
            raise ValueError(f"Invalid length: {length}")

        params = {"Bucket": bucket, "Key": name}
        if offset or length is not None:
            end = "" if length is None else str(offset + length - 1)
            params["Range"] = f"bytes={offset}-{end}"

        response = self.client.get_object(**params)
        return response["Body"]

    def copy_object(
        self,
        bucket: str,
        name: str,
        dest_bucket: str,
        dest_name: Optional[str] = None,
        conditions: Optional[CopyConditions] = None,
    ) -> bool:
        """
        Copy an object server-side, creating the destination bucket if needed.

        Args:
            dest_bucket: Destination bucket
            dest_name: Destination key (None: same name as the source)
            conditions: Preconditions the source must meet

        Returns:
            True if copied, False if the source object does not exist
        """
        if not self.is_object(bucket, name):
            logger.warning(f"Object does not exist: '{bucket}/{name}'")
            return False
        if dest_bucket != bucket:
            self.ensure_bucket(dest_bucket)

        target = dest_name or name
        params = {
            "Bucket": dest_bucket,
            "Key": target,
            "CopySource": {"Bucket": bucket, "Key": name},
        }
        if conditions is not None:
            params.update(conditions.as_params())

        try:
            self.client.copy_object(**params)
        except ClientError as e:
            logger.error(f"Error copying '{bucket}/{name}' to '{dest_bucket}/{target}': {e}")
            raise

        logger.info(f"Copied '{bucket}/{name}' to '{dest_bucket}/{target}'")
        return True

    def put_object(
        self,
        bucket: str,
        name: str,
        data: Union[bytes, IO[bytes]],
        content_type: Optional[str] = None,
        meta: Optional[Mapping[str, Any]] = None,
    ) -> None:
        """
        Upload an object, creating the bucket first if needed.

        Args:
            data: Bytes or a binary stream
            content_type: Declared type; guessed from the name when missing
            meta: User metadata to attach
        """
        self.ensure_bucket(bucket)

        body = BytesIO(data) if isinstance(data, (bytes, bytearray)) else data
        params = {
            "Bucket": bucket,
            "Key": name,
            "Body": body,
            "ContentType": guess_content_type(content_type, name),
        }
        user_metadata = UserMetadata(meta)
        if user_metadata:
            params["Metadata"] = dict(user_metadata)

        try:
            self.client.put_object(**params)
        except ClientError as e:
            logger.error(f"Error uploading object to MinIO: {e}")
            raise

        logger.info(f"Uploaded '{bucket}/{name}'")

    def get_signed_object_url(
        self, bucket: str, name: str, method: str = "GET", expires: int = DEFAULT_PRESIGN_EXPIRY
    ) -> str:
        """
        Generate a presigned URL for an object.

        Args:
            method: GET/HEAD for downloads, PUT/POST for uploads
            expires: Validity in seconds

        Raises:
            ValueError: For any other HTTP method
        """
        method = method.upper()
        if method in ("GET", "HEAD"):
            client_method = "get_object"
        elif method in ("PUT", "POST"):
            client_method = "put_object"
        else:
            raise ValueError(f"Invalid method: {method}")

        return self.client.generate_presigned_url(
            ClientMethod=client_method,
            Params={"Bucket": bucket, "Key": name},
            ExpiresIn=expires,
        )

    # ============================================
    # User metadata
    # ============================================

    def get_user_metadata(self, bucket: str, name: str) -> UserMetadata:
        response = self.client.head_object(Bucket=bucket, Key=name)
        return UserMetadata(response.get("Metadata"))

    def set_user_metadata(
        self, bucket: str, name: str, meta: Optional[Mapping[str, Any]]
    ) -> None:
        """
        Replace an object's user metadata.

        S3 only changes metadata through a copy onto itself, so the content
        type is read first and carried over.
        """
        head = self.client.head_object(Bucket=bucket, Key=name)

        try:
            self.client.copy_object(
                Bucket=bucket,
                Key=name,
                CopySource={"Bucket": bucket, "Key": name},
                Metadata=dict(UserMetadata(meta)),
                MetadataDirective="REPLACE",
                ContentType=guess_content_type(head.get("ContentType"), name),
            )
        except ClientError as e:
            logger.error(f"Error setting metadata on '{bucket}/{name}': {e}")
            raise

        logger.info(f"Metadata replaced on '{bucket}/{name}'")

    def add_user_metadata(
        self, bucket: str, name: str, meta: Optional[Mapping[str, Any]]
    ) -> None:
        """Merge entries into an object's user metadata. Empty input is a no-op."""
        if not meta:
            return
        merged = self.get_user_metadata(bucket, name).merge(meta)
        self.set_user_metadata(bucket, name, merged)
