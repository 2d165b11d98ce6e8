"""
Storage Capability

The call surface the facade needs from an object-storage client, and the
bucket name filter shared by every implementation of it.
"""

import re
from typing import (
    IO,
    TYPE_CHECKING,
    Any,
    Callable,
    Iterable,
    Mapping,
    Optional,
    Protocol,
    Union,
    runtime_checkable,
)

if TYPE_CHECKING:
    from .data import Bucket, CopyConditions, Item, ObjectStatus, Upload
    from .metadata import UserMetadata


NameFilter = Union[None, str, "re.Pattern[str]", Callable[[str], bool], Iterable[str]]


@runtime_checkable
class StorageOperations(Protocol):
    """
    Object storage capability consumed by the facade.

    MinioTemplate is the boto3-backed implementation; anything exposing
    the same calls (an in-memory fake, another SDK wrapper) can be used.
    """

    def find_buckets(self, name_filter: NameFilter = None) -> Iterable["Bucket"]: ...

    def find_bucket(self, bucket: str) -> Optional["Bucket"]: ...

    def is_bucket(self, bucket: str) -> bool: ...

    def delete_bucket(self, bucket: str) -> bool: ...

    def ensure_bucket(self, bucket: str) -> bool: ...

    def get_bucket_policy(self, bucket: str) -> str: ...

    def find_items(
        self, bucket: str, prefix: Optional[str] = None, recursive: bool = True
    ) -> Iterable["Item"]: ...

    def find_item(self, bucket: str, name: str) -> Optional["Item"]: ...

    def is_object(self, bucket: str, name: str) -> bool: ...

    def delete_object(self, bucket: str, name: str) -> bool: ...

    def copy_object(
        self,
        bucket: str,
        name: str,
        dest_bucket: str,
        dest_name: Optional[str] = None,
        conditions: Optional["CopyConditions"] = None,
    ) -> bool: ...

    def find_incomplete_uploads(
        self, bucket: str, prefix: Optional[str] = None, recursive: bool = True
    ) -> Iterable["Upload"]: ...

    def get_object_status(self, bucket: str, name: str) -> "ObjectStatus": ...

    def get_object_stream(self, bucket: str, name: str) -> IO[bytes]: ...

    def get_user_metadata(self, bucket: str, name: str) -> "UserMetadata": ...

    def set_user_metadata(
        self, bucket: str, name: str, meta: Optional[Mapping[str, Any]]
    ) -> None: ...

    def add_user_metadata(
        self, bucket: str, name: str, meta: Optional[Mapping[str, Any]]
    ) -> None: ...


def as_name_predicate(name_filter: NameFilter = None) -> Callable[[str], bool]:
    """
    Turn a bucket name filter into a predicate over names.

    - None: every name matches
    - str: exact name
    - compiled regular expression: searched in the name, so anchors
      such as ``^test-`` behave as expected
    - callable: used as is
    - any other iterable of names: membership test
    """
    if name_filter is None:
        return lambda name: True
    if isinstance(name_filter, str):
        return lambda name: name == name_filter
    if isinstance(name_filter, re.Pattern):
        return lambda name: name_filter.search(name) is not None
    if callable(name_filter):
        return name_filter
    names = frozenset(name_filter)
    return lambda name: name in names
