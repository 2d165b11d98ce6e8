"""
Storage Facade

Uniform, composable calls over any storage capability. Every method is a
direct delegation: no retries, no error translation, no local state.
Listings come back as restartable lazy sequences (each iteration asks the
capability again) and "find" calls return None when nothing matches.
"""

import logging
from typing import IO, Optional

from .config import StorageConfig
from .data import Bucket, CopyConditions, Item, ObjectStatus, Upload
from .documents import Document, decode_stream
from .metadata import MetadataHandle
from .minio import MinioTemplate
from .sequences import LazySequence, lazy
from .storage import NameFilter, StorageOperations, as_name_predicate

logger = logging.getLogger(__name__)


class StorageFacade:
    """
    Fluent access to buckets and objects.

    Args:
        operations: Storage capability, held by reference (e.g. MinioTemplate)
    """

    def __init__(self, operations: StorageOperations):
        self.operations = operations

    @classmethod
    def from_config(cls, storage_config: Optional[StorageConfig] = None) -> "StorageFacade":
        """Build a facade over a MinioTemplate using the given or environment config."""
        return cls(MinioTemplate(storage_config=storage_config))

    # Buckets

    def list_buckets(self, name_filter: NameFilter = None) -> LazySequence[Bucket]:
        """
        List buckets lazily.

        Args:
            name_filter: None (all), exact name, compiled regex (searched in
                the name), predicate on the name, or a collection of names.
                The filter is read once, here, so every pass applies the same one.
        """
        matches = as_name_predicate(name_filter)
        return lazy(lambda: self.operations.find_buckets(matches))

    def find_bucket(self, bucket: str) -> Optional[Bucket]:
        return self.operations.find_bucket(bucket)

    def ensure(self, bucket: str) -> bool:
        """Create the bucket if absent. True when it was created."""
        return self.operations.ensure_bucket(bucket)

    def policy(self, bucket: str) -> str:
        return self.operations.get_bucket_policy(bucket)

    # Buckets or objects

    def exists(self, bucket: str, name: Optional[str] = None) -> bool:
        """Check a bucket, or an object when a name is given."""
        if name is None:
            return self.operations.is_bucket(bucket)
        return self.operations.is_object(bucket, name)

    def remove(self, bucket: str, name: Optional[str] = None) -> bool:
        """Delete a bucket, or an object when a name is given. False if absent."""
        if name is None:
            return self.operations.delete_bucket(bucket)
        return self.operations.delete_object(bucket, name)

    # Objects

    def list_items(
        self, bucket: str, prefix: Optional[str] = None, recursive: bool = True
    ) -> LazySequence[Item]:
        """
        List the objects of a bucket lazily.

        Args:
            prefix: Only names starting with it; None means no filtering
            recursive: When False, stop at the first delimiter level
        """
        return lazy(lambda: self.operations.find_items(bucket, prefix, recursive))

    def find_item(self, bucket: str, name: str) -> Optional[Item]:
        return self.operations.find_item(bucket, name)

    def copy(
        self,
        bucket: str,
        name: str,
        dest_bucket: str,
        dest_name: Optional[str] = None,
        conditions: Optional[CopyConditions] = None,
    ) -> bool:
        """Copy an object server-side. False when the source is absent."""
        return self.operations.copy_object(bucket, name, dest_bucket, dest_name, conditions)

    def incomplete_uploads(
        self, bucket: str, prefix: Optional[str] = None, recursive: bool = True
    ) -> LazySequence[Upload]:
        """List the multipart uploads of a bucket that were never completed, lazily."""
        return lazy(lambda: self.operations.find_incomplete_uploads(bucket, prefix, recursive))

    def status(self, bucket: str, name: str) -> ObjectStatus:
        return self.operations.get_object_status(bucket, name)

    def open_stream(self, bucket: str, name: str) -> IO[bytes]:
        """Open an object for reading. The caller closes the stream."""
        return self.operations.get_object_stream(bucket, name)

    def metadata(self, bucket: str, name: str) -> MetadataHandle:
        return MetadataHandle(self.operations, bucket, name)

    def document(self, bucket: str, name: str) -> Document:
        """Download an object and decode it as a JSON document."""
        logger.debug(f"Decoding '{bucket}/{name}' as JSON document")
        return decode_stream(self.operations.get_object_stream(bucket, name), done=True)
