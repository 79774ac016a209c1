#
# Copyright (C) 2019 The Android Open Source Project
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#      http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
#
"""Fetching of port source archives."""
from __future__ import annotations

from abc import ABC, abstractmethod
import hashlib
import logging
from pathlib import Path
import shutil

from aiohttp import ClientSession


CHUNK_SIZE = 4 * 1024 * 1024


def logger() -> logging.Logger:
    """Returns the module logger."""
    return logging.getLogger(__name__)


class SourceVerificationError(RuntimeError):
    """A downloaded source archive did not match its expected checksum."""


class PortSource(ABC):
    """Where the source archive for a port comes from."""

    @abstractmethod
    async def fetch(self, destination: Path) -> None:
        """Writes the source archive to destination."""

    @staticmethod
    def from_str(source: str) -> PortSource:
        if source.startswith(("http://", "https://")):
            return RemoteSource(source)
        return LocalSource(Path(source))


class RemoteSource(PortSource):
    def __init__(self, url: str) -> None:
        super().__init__()
        self.url = url

    def __str__(self) -> str:
        return self.url

    async def fetch(self, destination: Path) -> None:
        logger().info("Downloading %s", self.url)
        destination.parent.mkdir(parents=True, exist_ok=True)
        partial = destination.with_name(destination.name + ".part")
        try:
            async with ClientSession(raise_for_status=True) as session:
                async with session.get(self.url) as response:
                    with partial.open("wb") as output:
                        async for chunk in response.content.iter_chunked(CHUNK_SIZE):
                            output.write(chunk)
        except BaseException:
            partial.unlink(missing_ok=True)
            raise
        partial.replace(destination)


class LocalSource(PortSource):
    def __init__(self, path: Path) -> None:
        super().__init__()
        self.path = path

    def __str__(self) -> str:
        return str(self.path)

    async def fetch(self, destination: Path) -> None:
        if not self.path.is_file():
            raise FileNotFoundError(f"Source archive {self.path} does not exist")
        logger().info("Copying %s", self.path)
        destination.parent.mkdir(parents=True, exist_ok=True)
        shutil.copy(self.path, destination)


def sha256sum(path: Path) -> str:
    digest = hashlib.sha256()
    with path.open("rb") as source_file:
        for chunk in iter(lambda: source_file.read(CHUNK_SIZE), b""):
            digest.update(chunk)
    return digest.hexdigest()


def verify_sha256(path: Path, expected: str) -> None:
    """Raises SourceVerificationError if path does not hash to expected."""
    actual = sha256sum(path)
    if actual != expected.lower():
        raise SourceVerificationError(
            f"Checksum mismatch for {path}: expected {expected}, got {actual}"
        )
    logger().debug("Verified %s (sha256 %s)", path, actual)
