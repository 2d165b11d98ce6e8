"""
Storage Configuration

Centralized configuration for the MinIO client and the document helpers.
Values are read from environment variables, with local MinIO defaults.
"""

import os
from dataclasses import dataclass


@dataclass(frozen=True)
class StorageConfig:
    """Connection and behaviour parameters for minio-fluent."""

    # MinIO connection
    endpoint_url: str = "http://localhost:9000"
    access_key: str = "minio"
    secret_key: str = "minio123"
    region: str = "us-east-1"

    # Object listing
    delimiter: str = "/"

    # Document fetching over HTTP
    url_timeout: int = 30


def load_storage_config() -> StorageConfig:
    """Build a StorageConfig from environment variables."""
    return StorageConfig(
        endpoint_url=os.getenv("MINIO_ENDPOINT_URL", StorageConfig.endpoint_url),
        access_key=os.getenv("MINIO_ACCESS_KEY", StorageConfig.access_key),
        secret_key=os.getenv("MINIO_SECRET_KEY", StorageConfig.secret_key),
        region=os.getenv("MINIO_REGION", StorageConfig.region),
        delimiter=os.getenv("MINIO_DELIMITER", StorageConfig.delimiter),
        url_timeout=int(os.getenv("DOCUMENT_URL_TIMEOUT", str(StorageConfig.url_timeout))),
    )


# Singleton instance
config = load_storage_config()
