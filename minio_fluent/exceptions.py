"""
Custom Exceptions for minio-fluent

Only errors raised by this package live here. Errors coming from boto3,
botocore, requests or json are propagated to the caller unchanged.
"""


class StorageError(Exception):
    """Base exception for all errors raised by minio-fluent."""

    pass


class UnavailableTargetError(StorageError):
    """
    Error raised when a metadata handle addresses an object that no longer
    exists upstream.

    Examples:
        - Object deleted between ``metadata()`` and ``current()``
        - Bucket removed while a handle was still held
    """

    def __init__(self, bucket: str, name: str):
        self.bucket = bucket
        self.name = name
        super().__init__(f"Object not available: '{bucket}/{name}'")


class AlreadyConsumedError(StorageError):
    """
    Error raised when a lazy sequence backed by a one-shot iterator is
    iterated a second time.
    """

    pass


NOT_FOUND_CODES = frozenset({"404", "NoSuchKey", "NoSuchBucket", "NotFound"})


def is_not_found(error: Exception) -> bool:
    """Tell whether a botocore ClientError reports a missing bucket or object."""
    response = getattr(error, "response", None) or {}
    return str(response.get("Error", {}).get("Code", "")) in NOT_FOUND_CODES
