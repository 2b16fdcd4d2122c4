from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Optional

import boto3
from botocore.exceptions import ClientError


# Environment variable names for convenience configuration
ENV_BUCKET = "STATE_SYNC_BUCKET"
ENV_PREFIX = "STATE_SYNC_PREFIX"
ENV_REGION = "AWS_REGION"


@dataclass
class S3Location:
    bucket: str
    prefix: str

    def key_for(self, name: str) -> str:
        return f"{self.prefix}{name}"


class S3Storage:
    """
    S3-backed storage: one object per persisted key.

    Usage
    - Provide a bucket and an optional key prefix (e.g. "app/state/").
    - `get_item(name)` returns the object body as text, or None if the object
      does not exist.
    - `set_item` / `remove_item` map to PutObject / DeleteObject. Errors are
      raised as `botocore.exceptions.ClientError`.

    Environment variables (optional)
    - `STATE_SYNC_BUCKET`: S3 bucket holding persisted slices
    - `STATE_SYNC_PREFIX`: key prefix inside the bucket
    """

    def __init__(
        self,
        *,
        s3: Optional[object] = None,
        bucket: str,
        prefix: str = "",
        region_name: Optional[str] = None,
    ) -> None:
        self._s3 = s3 or boto3.client("s3", region_name=region_name)
        self._loc = S3Location(bucket=bucket, prefix=prefix)

    # -------- Construction helpers --------
    @classmethod
    def from_env(cls) -> "S3Storage":
        bucket = os.environ.get(ENV_BUCKET)
        if not bucket:
            raise RuntimeError(f"Missing required environment variables for S3 storage: {ENV_BUCKET}")
        return cls(
            bucket=bucket,
            prefix=os.environ.get(ENV_PREFIX, ""),
            region_name=os.environ.get(ENV_REGION) or None,
        )

    # -------- Storage contract --------
    def get_item(self, key: str) -> Optional[str]:
        try:
            resp = self._s3.get_object(Bucket=self._loc.bucket, Key=self._loc.key_for(key))
        except ClientError as e:
            code = e.response.get("Error", {}).get("Code")
            if code in ("NoSuchKey", "404"):
                return None
            raise
        return resp["Body"].read().decode("utf-8")

    def set_item(self, key: str, value: str) -> None:
        self._s3.put_object(
            Bucket=self._loc.bucket,
            Key=self._loc.key_for(key),
            Body=value.encode("utf-8"),
            ContentType="text/plain; charset=utf-8",
        )

    def remove_item(self, key: str) -> None:
        self._s3.delete_object(Bucket=self._loc.bucket, Key=self._loc.key_for(key))
