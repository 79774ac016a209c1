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
"""Tests for ndkports.ndk."""
import logging
import os
from pathlib import Path

import pytest

from ndkports.config import PortsConfig
from ndkports.hosts import Host
from ndkports.ndk import (
    AmbiguousToolchainError,
    FilesystemError,
    NdkVersion,
    VersionParseError,
    is_os_artifact,
    resolve,
    resolve_from_config,
)


def test_single_host_tag(make_ndk) -> None:
    root = make_ndk(["linux-x86_64"])
    ndk = resolve(root)
    prebuilt = root / "toolchains/llvm/prebuilt"
    assert ndk.host_tag == "linux-x86_64"
    assert ndk.toolchain_directory == prebuilt / "linux-x86_64"
    assert ndk.toolchain_bin_directory == prebuilt / "linux-x86_64/bin"
    assert ndk.sysroot_directory == prebuilt / "linux-x86_64/sysroot"
    assert ndk.version == NdkVersion(25, 2, 9519653)


def test_ds_store_is_ignored(make_ndk) -> None:
    ndk = resolve(make_ndk(["linux-x86_64", ".DS_Store"]))
    assert ndk.host_tag == "linux-x86_64"


def test_other_os_artifacts_are_ignored(make_ndk) -> None:
    root = make_ndk(["darwin-x86_64", "._darwin-x86_64"])
    (root / "toolchains/llvm/prebuilt/Thumbs.db").touch()
    (root / "toolchains/llvm/prebuilt/__MACOSX").mkdir()
    assert resolve(root).host_tag == "darwin-x86_64"


def test_multiple_host_tags(make_ndk, caplog: pytest.LogCaptureFixture) -> None:
    root = make_ndk(["linux-x86_64", "darwin-x86_64"])
    with caplog.at_level(logging.ERROR):
        with pytest.raises(AmbiguousToolchainError) as excinfo:
            resolve(root)
    assert excinfo.value.entries == ["darwin-x86_64", "linux-x86_64"]
    assert excinfo.value.path == root / "toolchains/llvm/prebuilt"
    assert "- linux-x86_64" in str(excinfo.value)
    assert "- darwin-x86_64" in str(excinfo.value)
    assert "- linux-x86_64" in caplog.text
    assert "- darwin-x86_64" in caplog.text


def test_no_host_tags(make_ndk) -> None:
    with pytest.raises(AmbiguousToolchainError) as excinfo:
        resolve(make_ndk([]))
    assert excinfo.value.entries == []


def test_only_os_artifacts(make_ndk) -> None:
    with pytest.raises(AmbiguousToolchainError):
        resolve(make_ndk([".DS_Store"]))


def test_missing_prebuilt_dir(tmp_path: Path) -> None:
    (tmp_path / "source.properties").write_text("Pkg.Revision = 25.2.9519653\n")
    with pytest.raises(FilesystemError) as excinfo:
        resolve(tmp_path)
    assert str(tmp_path / "toolchains/llvm/prebuilt") in str(excinfo.value)


def test_prebuilt_dir_is_a_file(tmp_path: Path) -> None:
    llvm = tmp_path / "toolchains/llvm"
    llvm.mkdir(parents=True)
    (llvm / "prebuilt").touch()
    with pytest.raises(FilesystemError):
        resolve(tmp_path)


@pytest.mark.skipif(
    os.name == "nt" or (hasattr(os, "geteuid") and os.geteuid() == 0),
    reason="permissions are not enforced",
)
def test_unreadable_prebuilt_dir(make_ndk) -> None:
    root = make_ndk()
    prebuilt = root / "toolchains/llvm/prebuilt"
    prebuilt.chmod(0)
    try:
        with pytest.raises(FilesystemError):
            resolve(root)
    finally:
        prebuilt.chmod(0o755)


def test_missing_source_properties(make_ndk) -> None:
    root = make_ndk()
    (root / "source.properties").unlink()
    with pytest.raises(VersionParseError) as excinfo:
        resolve(root)
    assert "source.properties" in str(excinfo.value)


def test_source_properties_without_revision(make_ndk) -> None:
    root = make_ndk()
    (root / "source.properties").write_text("Pkg.Desc = Android NDK\n")
    with pytest.raises(VersionParseError):
        resolve(root)


def test_malformed_revision(make_ndk) -> None:
    with pytest.raises(VersionParseError) as excinfo:
        resolve(make_ndk(revision="r25c"))
    assert "r25c" in str(excinfo.value)


def test_beta_revision(make_ndk) -> None:
    ndk = resolve(make_ndk(revision="26.0.10404224-beta1"))
    assert ndk.version.major == 26
    assert ndk.version.qualifier == "beta1"
    assert str(ndk.version) == "26.0.10404224-beta1"


def test_version_from_source_properties() -> None:
    text = "Pkg.Desc = Android NDK\nPkg.Revision = 21.4.7075529\n"
    assert NdkVersion.from_source_properties(text) == NdkVersion(21, 4, 7075529)


def test_derived_paths_are_not_checked(make_ndk) -> None:
    root = make_ndk()
    host_dir = root / "toolchains/llvm/prebuilt/linux-x86_64"
    (host_dir / "bin").rmdir()
    (host_dir / "sysroot").rmdir()
    ndk = resolve(root)
    assert ndk.toolchain_bin_directory == host_dir / "bin"
    assert ndk.sysroot_directory == host_dir / "sysroot"


def test_host_and_tools(make_ndk) -> None:
    ndk = resolve(make_ndk(["windows-x86_64"]))
    assert ndk.host is Host.Windows64
    assert ndk.clang_tool("llvm-ar").name == "llvm-ar.exe"
    assert ndk.cmake_toolchain_file == ndk.path / "build/cmake/android.toolchain.cmake"


def test_unknown_host_tag(make_ndk) -> None:
    ndk = resolve(make_ndk(["freebsd-x86_64"]))
    assert ndk.host is None
    assert ndk.clang_tool("clang").name == "clang"


def test_resolve_from_config(make_ndk, tmp_path: Path) -> None:
    root = make_ndk()
    config = PortsConfig(root, tmp_path / "out", tmp_path / "dist")
    assert resolve_from_config(config) == resolve(root)


def test_is_os_artifact() -> None:
    assert is_os_artifact(".DS_Store")
    assert is_os_artifact("desktop.ini")
    assert not is_os_artifact("linux-x86_64")
