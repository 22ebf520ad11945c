import fnmatch
import logging

import boto3

logger = logging.getLogger(__name__)

_WILDCARDS = "*?["


class S3FileOperations:
    """
    Artifact storage in an S3 bucket.

    Paths are object keys under ``prefix``. S3 has no directories, so
    ``mkdir`` does nothing, and ``glob`` lists every key sharing the pattern's
    literal prefix and filters the rest with ``fnmatch``.
    """

    def __init__(self, bucket: str, *, prefix: str = "", region: str | None = None, client=None) -> None:
        self.bucket = bucket
        self.prefix = prefix.strip("/")
        self._client = client
        self._region = region

    @property
    def client(self):
        if self._client is None:
            self._client = boto3.client("s3", region_name=self._region)
        return self._client

    def _key(self, path: str) -> str:
        path = path.removeprefix("./").lstrip("/")
        return f"{self.prefix}/{path}" if self.prefix else path

    def _path(self, key: str) -> str:
        return key[len(self.prefix) + 1:] if self.prefix else key

    def read_file(self, path: str) -> str:
        response = self.client.get_object(Bucket=self.bucket, Key=self._key(path))
        return response["Body"].read().decode("utf-8")

    def write_file(self, path: str, content: str) -> None:
        self.client.put_object(
            Bucket=self.bucket,
            Key=self._key(path),
            Body=content.encode("utf-8"),
        )

    def mkdir(self, path: str, recursive: bool = True) -> None:
        pass  # Keys need no parent directory

    def glob(self, pattern: str) -> list[str]:
        key_pattern = self._key(pattern)
        cut = min((key_pattern.find(c) for c in _WILDCARDS if c in key_pattern), default=len(key_pattern))
        list_prefix = key_pattern[:cut]

        keys: list[str] = []
        paginator = self.client.get_paginator("list_objects_v2")
        for page in paginator.paginate(Bucket=self.bucket, Prefix=list_prefix):
            for obj in page.get("Contents", []):
                key = obj["Key"]
                # fnmatch lets "*" cross "/", so compare segment counts as well
                if fnmatch.fnmatchcase(key, key_pattern) and key.count("/") == key_pattern.count("/"):
                    keys.append(key)

        return sorted(self._path(key) for key in keys)

    def remove_file(self, path: str) -> None:
        self.client.delete_object(Bucket=self.bucket, Key=self._key(path))
