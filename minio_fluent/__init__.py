"""
minio-fluent: fluent helpers over MinIO object storage

Utility modules for:
- MinIO/S3 client and operations (minio)
- Bucket/object facade with lazy listings (facade, data)
- Live user metadata handles (metadata)
- Restartable lazy sequences (sequences)
- JSON documents with structural merge (documents)
"""

from .config import StorageConfig, config, load_storage_config

from .minio import (
    MinioTemplate,
    get_minio_client,
    guess_content_type,
)

from .facade import StorageFacade

from .data import Bucket, CopyConditions, Item, ObjectStatus, Upload

from .metadata import MetadataHandle, UserMetadata, metadata_of

from .sequences import LazySequence, lazy

from .documents import Document, build

from .storage import StorageOperations, as_name_predicate

from .exceptions import (
    StorageError,
    UnavailableTargetError,
    AlreadyConsumedError,
)

__version__ = "1.0.0"

__all__ = [
    # Config
    "StorageConfig",
    "config",
    "load_storage_config",
    # MinIO
    "MinioTemplate",
    "get_minio_client",
    "guess_content_type",
    # Facade
    "StorageFacade",
    "StorageOperations",
    "as_name_predicate",
    "Bucket",
    "Item",
    "ObjectStatus",
    "CopyConditions",
    "Upload",
    # Metadata
    "MetadataHandle",
    "UserMetadata",
    "metadata_of",
    # Sequences
    "LazySequence",
    "lazy",
    # Documents
    "Document",
    "build",
    # Exceptions
    "StorageError",
    "UnavailableTargetError",
    "AlreadyConsumedError",
]
