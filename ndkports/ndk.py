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
"""Discovery of the toolchain layout of an installed NDK.

An NDK installation contains exactly one host-specific LLVM toolchain under
toolchains/llvm/prebuilt. The name of that directory is the host tag, and the
toolchain binaries and sysroot live beneath it:

    <ndk>/toolchains/llvm/prebuilt/<host tag>/bin
    <ndk>/toolchains/llvm/prebuilt/<host tag>/sysroot

Resolution is an explicit, fallible step. Callers resolve once per build and
hold on to the returned NdkInstallation.
"""
from __future__ import annotations

from dataclasses import dataclass
import logging
from pathlib import Path
import re
from typing import TYPE_CHECKING, Optional, Sequence

from ndkports.hosts import Host

if TYPE_CHECKING:
    from ndkports.config import PortsConfig


# Files that file managers and archive tools leave behind. Anything starting
# with a dot is ignored as well.
OS_ARTIFACT_NAMES = frozenset(
    {
        "Thumbs.db",
        "desktop.ini",
        "__MACOSX",
    }
)


def logger() -> logging.Logger:
    """Returns the module logger."""
    return logging.getLogger(__name__)


class NdkError(RuntimeError):
    """Base class for errors describing a broken NDK installation."""


class FilesystemError(NdkError):
    """The prebuilt toolchain directory could not be listed."""

    def __init__(self, path: Path, reason: str) -> None:
        super().__init__(f"Unable to get file list for {path}: {reason}")
        self.path = path


class AmbiguousToolchainError(NdkError):
    """The prebuilt toolchain directory did not contain exactly one host."""

    def __init__(self, path: Path, entries: Sequence[str]) -> None:
        self.path = path
        self.entries = list(entries)
        if self.entries:
            found = "\n".join(f"- {entry}" for entry in self.entries)
            msg = (
                f"Expected exactly one directory in {path}, found "
                f"{len(self.entries)}:\n{found}"
            )
        else:
            msg = f"Expected exactly one directory in {path}, found none"
        super().__init__(msg)


class VersionParseError(NdkError):
    """The NDK version could not be read from source.properties."""


@dataclass(frozen=True)
class NdkVersion:
    """The version of an NDK as reported by Pkg.Revision.

    >>> NdkVersion.from_string("25.2.9519653")
    NdkVersion(major=25, minor=2, build=9519653, qualifier=None)
    >>> str(NdkVersion.from_string("26.0.10404224-beta1"))
    '26.0.10404224-beta1'
    """

    major: int
    minor: int
    build: int
    qualifier: Optional[str] = None

    _VERSION_RE = re.compile(r"^(\d+)\.(\d+)\.(\d+)(?:-(\S+))?$")
    _PKG_REVISION_RE = re.compile(r"^\s*Pkg\.Revision\s*=\s*(\S+)\s*$")

    def __str__(self) -> str:
        version = f"{self.major}.{self.minor}.{self.build}"
        if self.qualifier is not None:
            version += f"-{self.qualifier}"
        return version

    @classmethod
    def from_string(cls, version: str) -> NdkVersion:
        match = cls._VERSION_RE.match(version.strip())
        if match is None:
            raise VersionParseError(f"Unrecognized NDK version: {version!r}")
        major, minor, build, qualifier = match.groups()
        return cls(int(major), int(minor), int(build), qualifier)

    @classmethod
    def from_source_properties(cls, text: str) -> NdkVersion:
        """Parses the version from the contents of source.properties."""
        for line in text.splitlines():
            match = cls._PKG_REVISION_RE.match(line)
            if match is not None:
                return cls.from_string(match.group(1))
        raise VersionParseError("source.properties does not define Pkg.Revision")

    @classmethod
    def from_ndk(cls, ndk_path: Path) -> NdkVersion:
        properties = ndk_path / "source.properties"
        try:
            text = properties.read_text(encoding="utf-8")
        except OSError as ex:
            raise VersionParseError(f"Unable to read {properties}: {ex}") from ex
        try:
            return cls.from_source_properties(text)
        except VersionParseError as ex:
            raise VersionParseError(f"{properties}: {ex}") from ex


@dataclass(frozen=True)
class NdkInstallation:
    """A resolved NDK. Construct with resolve()."""

    path: Path
    version: NdkVersion
    host_tag: str

    @property
    def llvm_base_dir(self) -> Path:
        return prebuilt_dir(self.path)

    @property
    def toolchain_directory(self) -> Path:
        return self.llvm_base_dir / self.host_tag

    @property
    def toolchain_bin_directory(self) -> Path:
        return self.toolchain_directory / "bin"

    @property
    def sysroot_directory(self) -> Path:
        return self.toolchain_directory / "sysroot"

    @property
    def cmake_toolchain_file(self) -> Path:
        return self.path / "build/cmake/android.toolchain.cmake"

    @property
    def host(self) -> Optional[Host]:
        """The Host this toolchain runs on, or None for an unknown tag."""
        try:
            return Host.from_tag(self.host_tag)
        except ValueError:
            return None

    def clang_tool(self, name: str) -> Path:
        """Returns the path to the named tool in the toolchain bin directory."""
        host = self.host
        suffix = host.exe_suffix if host is not None else ""
        return self.toolchain_bin_directory / f"{name}{suffix}"


def prebuilt_dir(ndk_path: Path) -> Path:
    return ndk_path / "toolchains/llvm/prebuilt"


def is_os_artifact(name: str) -> bool:
    """Returns True if the directory entry is file system noise.

    >>> is_os_artifact(".DS_Store")
    True
    >>> is_os_artifact("linux-x86_64")
    False
    """
    return name.startswith(".") or name in OS_ARTIFACT_NAMES


def find_host_tag(llvm_base_dir: Path) -> str:
    """Returns the name of the only toolchain directory in llvm_base_dir."""
    try:
        names = sorted(p.name for p in llvm_base_dir.iterdir())
    except OSError as ex:
        raise FilesystemError(llvm_base_dir, ex.strerror or str(ex)) from ex

    entries = [name for name in names if not is_os_artifact(name)]
    if len(entries) != 1:
        logger().error("Found %d directories in %s:", len(entries), llvm_base_dir)
        for entry in entries:
            logger().error("- %s", entry)
        raise AmbiguousToolchainError(llvm_base_dir, entries)
    return entries[0]


def resolve(root: Path) -> NdkInstallation:
    """Resolves the toolchain layout and version of the NDK at root.

    Raises:
        FilesystemError: toolchains/llvm/prebuilt could not be listed.
        AmbiguousToolchainError: The prebuilt directory did not contain exactly
            one host toolchain.
        VersionParseError: source.properties was missing or malformed.
    """
    root = Path(root)
    host_tag = find_host_tag(prebuilt_dir(root))
    version = NdkVersion.from_ndk(root)

    try:
        current_tag = Host.current().tag
    except RuntimeError:
        current_tag = None
    if host_tag != current_tag:
        logger().warning(
            "NDK at %s contains a %s toolchain but this machine is %s",
            root,
            host_tag,
            current_tag,
        )

    ndk = NdkInstallation(root, version, host_tag)
    logger().debug("Resolved NDK %s at %s (host %s)", version, root, host_tag)
    return ndk


def resolve_from_config(config: PortsConfig) -> NdkInstallation:
    """Resolves the NDK named by the given configuration."""
    return resolve(config.ndk_path)
