"""
Bucket and Item References

Value types returned by the storage capability. Each one keeps a
back-reference to the capability it came from, so bucket- and item-level
calls are plain delegations with the target already filled in.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import IO, Any, Dict, Optional

from .documents import Document, decode_stream
from .metadata import MetadataHandle, UserMetadata
from .sequences import LazySequence, lazy


@dataclass(frozen=True)
class ObjectStatus:
    """Result of a stat call on one object."""

    name: str
    bucket: str
    size: int
    content_type: str
    etag: Optional[str] = None
    creation_time: Optional[datetime] = None
    user_metadata: UserMetadata = field(default_factory=UserMetadata)


@dataclass(frozen=True)
class CopyConditions:
    """
    Preconditions checked by the server before copying an object.

    Each field left as None is not sent. With ``replace_metadata`` the
    copy takes no user metadata from the source.
    """

    modified_since: Optional[datetime] = None
    unmodified_since: Optional[datetime] = None
    match_etag: Optional[str] = None
    match_etag_none: Optional[str] = None
    replace_metadata: bool = False

    def is_empty(self) -> bool:
        return self == CopyConditions()

    def as_params(self) -> Dict[str, Any]:
        params = {}
        if self.modified_since is not None:
            params["CopySourceIfModifiedSince"] = self.modified_since
        if self.unmodified_since is not None:
            params["CopySourceIfUnmodifiedSince"] = self.unmodified_since
        if self.match_etag is not None:
            params["CopySourceIfMatch"] = self.match_etag
        if self.match_etag_none is not None:
            params["CopySourceIfNoneMatch"] = self.match_etag_none
        if self.replace_metadata:
            params["MetadataDirective"] = "REPLACE"
        return params


@dataclass(frozen=True)
class Upload:
    """Multipart upload that was started but never completed nor aborted."""

    name: str
    bucket: str
    upload_id: str
    initiated: Optional[datetime] = None


@dataclass(frozen=True)
class Bucket:
    """Named container, bound to the storage capability that listed it."""

    name: str
    creation_time: Optional[datetime]
    operations: Any = field(repr=False, compare=False)

    def exists(self, name: Optional[str] = None) -> bool:
        """Check the bucket itself, or an object in it when a name is given."""
        if name is None:
            return self.operations.is_bucket(self.name)
        return self.operations.is_object(self.name, name)

    def remove(self) -> bool:
        return self.operations.delete_bucket(self.name)

    def remove_item(self, name: str) -> bool:
        return self.operations.delete_object(self.name, name)

    def open_stream(self, name: str) -> IO[bytes]:
        return self.operations.get_object_stream(self.name, name)

    def status(self, name: str) -> ObjectStatus:
        return self.operations.get_object_status(self.name, name)

    def items(self, prefix: Optional[str] = None, recursive: bool = True) -> LazySequence["Item"]:
        return lazy(lambda: self.operations.find_items(self.name, prefix, recursive))

    def item(self, name: str) -> Optional["Item"]:
        return self.operations.find_item(self.name, name)

    def metadata(self, name: str) -> MetadataHandle:
        return MetadataHandle(self.operations, self.name, name)

    def incomplete_uploads(
        self, prefix: Optional[str] = None, recursive: bool = True
    ) -> LazySequence[Upload]:
        return lazy(lambda: self.operations.find_incomplete_uploads(self.name, prefix, recursive))

    def policy(self) -> str:
        return self.operations.get_bucket_policy(self.name)


@dataclass(frozen=True)
class Item:
    """
    Named object within a bucket.

    Listing without recursion also reports first-level "directories";
    those carry ``is_file=False`` and a name ending with the delimiter.
    """

    name: str
    bucket: str
    operations: Any = field(repr=False, compare=False)
    size: int = 0
    etag: Optional[str] = None
    is_file: bool = True
    last_modified: Optional[datetime] = None
    storage_class: Optional[str] = None

    def exists(self) -> bool:
        return self.operations.is_object(self.bucket, self.name)

    def remove(self) -> bool:
        return self.operations.delete_object(self.bucket, self.name)

    def open_stream(self) -> IO[bytes]:
        return self.operations.get_object_stream(self.bucket, self.name)

    def status(self) -> ObjectStatus:
        return self.operations.get_object_status(self.bucket, self.name)

    def copy_to(
        self,
        dest_bucket: str,
        dest_name: Optional[str] = None,
        conditions: Optional[CopyConditions] = None,
    ) -> bool:
        """Copy this object, keeping its name unless dest_name is given."""
        return self.operations.copy_object(self.bucket, self.name, dest_bucket, dest_name, conditions)

    def find_bucket(self) -> Optional[Bucket]:
        return self.operations.find_bucket(self.bucket)

    def metadata(self) -> MetadataHandle:
        return MetadataHandle(self.operations, self.bucket, self.name)

    def document(self) -> Document:
        """Download the object and decode it as a JSON document."""
        return decode_stream(self.open_stream(), done=True)
