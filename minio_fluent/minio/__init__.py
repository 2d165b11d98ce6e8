"""
MinIO/S3 Client Package

boto3-backed storage capability for minio-fluent.
"""

from .client import get_minio_client

from .operations import (
    MinioTemplate,
    guess_content_type,
)

__all__ = [
    # Client
    "get_minio_client",
    # Operations
    "MinioTemplate",
    "guess_content_type",
]
