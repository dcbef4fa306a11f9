"""
Storage Interface - Document Store Abstraction
==============================================

The pipeline persists whole JSON documents under slash-separated keys
(e.g. "vctPlayers/current"). Documents are always replaced wholesale, never
patched, so the contract is a plain key -> document map.

Design Pattern: Strategy Pattern + Dependency Injection
"""

import json
import logging
import os
from pathlib import Path
from typing import Protocol, Optional, Dict, Any

logger = logging.getLogger(__name__)


class DataStore(Protocol):
    """
    Abstract document store.

    Using Protocol (structural subtyping) instead of ABC so tests can pass
    any object with the same methods.
    """

    def get(self, key: str) -> Optional[Dict[str, Any]]:
        """Return the document stored under key, or None."""
        ...

    def set(self, key: str, document: Dict[str, Any]) -> None:
        """Replace the document stored under key."""
        ...

    def exists(self, key: str) -> bool:
        """Check if a document exists under key."""
        ...


class LocalDataStore:
    """
    Local filesystem implementation.

    Each document is one JSON file: data/{key}.json

    Example:
        store = LocalDataStore(base_path="./data")
        store.set("vctPlayers/current", {"players": [], "count": 0})
        doc = store.get("vctPlayers/current")
    """

    def __init__(self, base_path: str = "./data"):
        self.base_path = Path(base_path)
        self.base_path.mkdir(parents=True, exist_ok=True)
        logger.info(f"LocalDataStore initialized at: {self.base_path.absolute()}")

    def _path(self, key: str) -> Path:
        return self.base_path / f"{key}.json"

    def get(self, key: str) -> Optional[Dict[str, Any]]:
        file_path = self._path(key)
        if not file_path.exists():
            return None

        with open(file_path, 'r', encoding='utf-8') as f:
            return json.load(f)

    def set(self, key: str, document: Dict[str, Any]) -> None:
        file_path = self._path(key)
        file_path.parent.mkdir(parents=True, exist_ok=True)

        # Write next to the target first so a crash never leaves half a document
        tmp_path = file_path.with_suffix('.json.tmp')
        with open(tmp_path, 'w', encoding='utf-8') as f:
            json.dump(document, f, ensure_ascii=False, indent=2)
        os.replace(tmp_path, file_path)

        logger.info(f"Wrote: {key} ({file_path.stat().st_size:,} bytes)")

    def exists(self, key: str) -> bool:
        return self._path(key).exists()


class S3DataStore:
    """
    AWS S3 implementation (production deployment).

    Uses boto3; credentials come from the usual AWS environment/config.
    Each document is stored as the object {key}.json.

    Example:
        store = S3DataStore(bucket="gtr-vct-data")
        store.set("earnings/teams", doc)
    """

    def __init__(self, bucket: str, region: str = "us-east-1"):
        self.bucket = bucket
        self.region = region
        self._client = None
        logger.info(f"S3DataStore initialized for bucket: {bucket}")

    @property
    def client(self):
        """Lazy-load S3 client (only when needed)."""
        if self._client is None:
            try:
                import boto3
            except ImportError as e:
                raise ImportError(
                    "boto3 not installed. Install with: pip install '.[s3]'"
                ) from e
            self._client = boto3.client('s3', region_name=self.region)
            logger.info(f"Connected to S3 in region: {self.region}")
        return self._client

    @staticmethod
    def _object_key(key: str) -> str:
        return f"{key}.json"

    def get(self, key: str) -> Optional[Dict[str, Any]]:
        if not self.exists(key):
            return None
        try:
            response = self.client.get_object(Bucket=self.bucket, Key=self._object_key(key))
            return json.loads(response['Body'].read())
        except Exception as e:
            raise IOError(f"Failed to read from S3: {key}") from e

    def set(self, key: str, document: Dict[str, Any]) -> None:
        body = json.dumps(document, ensure_ascii=False).encode('utf-8')
        try:
            self.client.put_object(
                Bucket=self.bucket,
                Key=self._object_key(key),
                Body=body,
                ContentType='application/json',
                ServerSideEncryption='AES256'  # Encrypt at rest
            )
        except Exception as e:
            raise IOError(f"Failed to write to S3: {key}") from e
        logger.info(f"Wrote to S3: {key} ({len(body):,} bytes)")

    def exists(self, key: str) -> bool:
        try:
            self.client.head_object(Bucket=self.bucket, Key=self._object_key(key))
            return True
        except Exception as e:
            error = (getattr(e, 'response', None) or {}).get('Error', {})
            if error.get('Code') in ('404', 'NoSuchKey', 'NotFound'):
                return False
            raise IOError(f"Failed to check S3 key: {key}") from e


def get_storage(storage_type: Optional[str] = None) -> DataStore:
    """
    Factory function to get the configured storage backend.

    Args:
        storage_type: "local" or "s3". If None, reads from STORAGE_TYPE env var.

    Environment Variables:
        STORAGE_TYPE: "local" or "s3" (default: "local")
        DATA_PATH: local store root (default: "./data")
        S3_BUCKET: S3 bucket name (required if storage_type="s3")
        AWS_REGION: AWS region (default: "us-east-1")
    """

    if storage_type is None:
        storage_type = os.getenv("STORAGE_TYPE", "local")

    if storage_type == "local":
        base_path = os.getenv("DATA_PATH", "./data")
        return LocalDataStore(base_path=base_path)

    elif storage_type == "s3":
        bucket = os.getenv("S3_BUCKET")
        if not bucket:
            raise ValueError(
                "S3_BUCKET environment variable required for S3 storage"
            )

        region = os.getenv("AWS_REGION", "us-east-1")
        return S3DataStore(bucket=bucket, region=region)

    else:
        raise ValueError(
            f"Unknown storage type: {storage_type}. "
            f"Must be 'local' or 's3'"
        )
