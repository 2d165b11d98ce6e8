"""
User Metadata

UserMetadata is the normalized key/value mapping attached to an object.
MetadataHandle is a live view of one object's user metadata: every call
goes through to the storage capability, nothing is buffered locally.
"""

import logging
from contextlib import contextmanager
from typing import Any, Iterable, Mapping, Tuple, Union

from botocore.exceptions import ClientError

from .exceptions import UnavailableTargetError, is_not_found

logger = logging.getLogger(__name__)

AMAZON_META_PREFIX = "x-amz-meta-"

MetadataSource = Union[
    None,
    Mapping[str, Any],
    Tuple[str, Any],
    Iterable[Tuple[str, Any]],
    "MetadataHandle",
]


def _normalize_key(key: str) -> str:
    key = str(key).strip().lower()
    if key.startswith(AMAZON_META_PREFIX):
        key = key[len(AMAZON_META_PREFIX):]
    return key


def _pairs(source: MetadataSource) -> Iterable[Tuple[str, Any]]:
    if source is None:
        return []
    if isinstance(source, MetadataHandle):
        return source.current().items()
    if isinstance(source, Mapping):
        return source.items()
    if isinstance(source, tuple) and len(source) == 2 and isinstance(source[0], str):
        return [source]
    return list(source)


class UserMetadata(dict):
    """
    Object user metadata with normalized keys.

    Keys are lowercased and stripped of the ``x-amz-meta-`` prefix, the
    way S3 reports them back. Values are stored as strings; None values
    are skipped.
    """

    def __init__(self, source: MetadataSource = None):
        super().__init__()
        self._add(source)

    def _add(self, source: MetadataSource) -> None:
        for key, value in _pairs(source):
            if value is None:
                continue
            super().__setitem__(_normalize_key(key), str(value))

    def __setitem__(self, key: str, value: Any) -> None:
        super().__setitem__(_normalize_key(key), str(value))

    def update(self, other: MetadataSource = None, **kwargs: Any) -> None:
        self._add(other)
        self._add(kwargs)

    def merge(self, other: MetadataSource) -> "UserMetadata":
        """Return a new UserMetadata with other's entries layered on top."""
        merged = UserMetadata(self)
        merged._add(other)
        return merged

    def __add__(self, other: MetadataSource) -> "UserMetadata":
        return self.merge(other)

    def headers(self) -> dict:
        """Return the entries as ``x-amz-meta-*`` HTTP headers."""
        return {f"{AMAZON_META_PREFIX}{key}": value for key, value in self.items()}


def metadata_of(*args: Any) -> UserMetadata:
    """
    Build a UserMetadata.

    Accepts nothing, a key and a value, a (key, value) pair, a mapping,
    an iterable of pairs, or a MetadataHandle (snapshot of its current
    metadata).
    """
    if not args:
        return UserMetadata()
    if len(args) == 1:
        return UserMetadata(args[0])
    if len(args) == 2 and isinstance(args[0], str):
        return UserMetadata((args[0], args[1]))
    return UserMetadata(args)


class MetadataHandle:
    """
    Live view of the user metadata of one object.

    Holds a back-reference to the storage capability and the bucket/name
    target. current(), replace() and merge() all address that same target.
    """

    def __init__(self, operations, bucket: str, name: str):
        self._operations = operations
        self.bucket = bucket
        self.name = name

    @contextmanager
    def _target(self):
        try:
            yield
        except ClientError as e:
            if is_not_found(e):
                logger.warning(f"Metadata target not available: '{self.bucket}/{self.name}'")
                raise UnavailableTargetError(self.bucket, self.name) from e
            raise

    def current(self) -> UserMetadata:
        """
        Fetch the object's current user metadata.

        Raises:
            UnavailableTargetError: If the object no longer exists
        """
        with self._target():
            return UserMetadata(self._operations.get_user_metadata(self.bucket, self.name))

    def replace(self, meta: MetadataSource) -> "MetadataHandle":
        """Overwrite the object's user metadata wholesale."""
        with self._target():
            self._operations.set_user_metadata(
                self.bucket, self.name, None if meta is None else UserMetadata(meta)
            )
        return self

    def merge(self, meta: MetadataSource) -> "MetadataHandle":
        """Add or overwrite keys, keeping the ones not mentioned."""
        with self._target():
            self._operations.add_user_metadata(self.bucket, self.name, UserMetadata(meta))
        return self

    def __add__(self, meta: MetadataSource) -> "MetadataHandle":
        return self.merge(meta)

    def __repr__(self) -> str:
        return f"MetadataHandle(bucket={self.bucket!r}, name={self.name!r})"
