"""
Where compressed access logs come from.

Each source exposes download(key, fh), writing the raw .gz bytes of one object
into a binary file handle. open_log_lines() ties a source to a temporary file
and hands back the decompressed line stream.
"""

from __future__ import annotations

import gzip
import io
import logging
import shutil
import tempfile
from contextlib import contextmanager
from pathlib import Path
from typing import BinaryIO, Iterator, Optional

import boto3
import requests
from botocore.exceptions import ClientError

from accessstats import config

log = logging.getLogger(__name__)

CHUNK_SIZE = 1 << 16
_MISSING_CODES = ("NoSuchKey", "NotFound", "404")


class LogNotFoundError(Exception):
    def __init__(self, key: str, where: str):
        super().__init__(f"log {key!r} not found in {where}")
        self.key = key
        self.where = where


def object_key(service: str, date: str) -> str:
    return f"{date}-{service}-access.log.gz"


class S3LogSource:
    def __init__(self, bucket: str, client=None):
        self.bucket = bucket
        self.client = client or boto3.client("s3", region_name=config.AWS_REGION)

    def download(self, key: str, fh: BinaryIO) -> None:
        log.info("downloading s3://%s/%s", self.bucket, key)
        try:
            self.client.download_fileobj(self.bucket, key, fh)
        except ClientError as exc:
            code = exc.response.get("Error", {}).get("Code")
            if code in _MISSING_CODES:
                raise LogNotFoundError(key, f"s3://{self.bucket}") from exc
            raise


class HttpLogSource:
    def __init__(self, base_url: str, session: Optional[requests.Session] = None, timeout: float = config.HTTP_TIMEOUT):
        self.base_url = base_url.rstrip("/")
        self.session = session or requests.Session()
        self.timeout = timeout

    def download(self, key: str, fh: BinaryIO) -> None:
        url = f"{self.base_url}/{key}"
        log.info("downloading %s", url)
        with self.session.get(url, stream=True, timeout=self.timeout) as resp:
            if resp.status_code == 404:
                raise LogNotFoundError(key, self.base_url)
            resp.raise_for_status()
            for chunk in resp.iter_content(chunk_size=CHUNK_SIZE):
                if chunk:
                    fh.write(chunk)


class LocalLogSource:
    def __init__(self, directory: str):
        self.directory = Path(directory)

    def download(self, key: str, fh: BinaryIO) -> None:
        path = self.directory / key
        log.info("reading %s", path)
        try:
            with path.open("rb") as src:
                shutil.copyfileobj(src, fh, CHUNK_SIZE)
        except FileNotFoundError as exc:
            raise LogNotFoundError(key, str(self.directory)) from exc


def build_source(bucket: Optional[str] = None, base_url: Optional[str] = None, directory: Optional[str] = None):
    """Local directory wins over HTTP, HTTP over S3."""
    if directory:
        return LocalLogSource(directory)
    if base_url:
        return HttpLogSource(base_url)
    return S3LogSource(bucket or config.LOG_BUCKET)


def iter_gzip_lines(fileobj: BinaryIO, encoding: str = "utf-8") -> Iterator[str]:
    # split on "\n" only; a stray "\r" inside a quoted field stays in its line
    gz = gzip.GzipFile(fileobj=fileobj, mode="rb")
    with io.TextIOWrapper(gz, encoding=encoding, errors="replace", newline="\n") as text:
        for line in text:
            yield line


@contextmanager
def open_log_lines(source, key: str) -> Iterator[Iterator[str]]:
    # the download lives in an anonymous temp file, gone once the block exits
    with tempfile.TemporaryFile() as fh:
        source.download(key, fh)
        fh.seek(0)
        yield iter_gzip_lines(fh)
