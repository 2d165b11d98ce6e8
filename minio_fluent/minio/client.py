"""
MinIO Client

Function for initializing a boto3 S3 client pointed at a MinIO server.
"""

import logging
from typing import Optional

import boto3

from ..config import StorageConfig, config as default_config

logger = logging.getLogger(__name__)


def get_minio_client(storage_config: Optional[StorageConfig] = None) -> boto3.client:
    """
    Initialize and return a boto3 S3 client configured for MinIO.

    Reads configuration from a StorageConfig (defaults to the module
    singleton, itself loaded from environment variables):
    - MINIO_ENDPOINT_URL (defaults to http://localhost:9000)
    - MINIO_ACCESS_KEY
    - MINIO_SECRET_KEY
    - MINIO_REGION

    Args:
        storage_config: Explicit configuration, or None for the defaults

    Returns:
        boto3.client: Configured S3 client for MinIO

    Raises:
        botocore errors are propagated unchanged
    """
    cfg = storage_config or default_config

    try:
        client = boto3.client(
            "s3",
            endpoint_url=cfg.endpoint_url,
            aws_access_key_id=cfg.access_key,
            aws_secret_access_key=cfg.secret_key,
            region_name=cfg.region,
        )
    except Exception as e:
        logger.error(f"Failed to initialize MinIO client: {e}")
        raise

    logger.info(f"MinIO client initialized with endpoint: {cfg.endpoint_url}")
    return client
