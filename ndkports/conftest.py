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
"""Shared fixtures for ndkports tests."""
from pathlib import Path
from typing import Callable, Sequence

import pytest

from ndkports.ndk import NdkInstallation, resolve


MakeNdk = Callable[..., Path]


def _make_ndk(
    root: Path,
    entries: Sequence[str] = ("linux-x86_64",),
    revision: str = "25.2.9519653",
) -> Path:
    prebuilt = root / "toolchains/llvm/prebuilt"
    prebuilt.mkdir(parents=True)
    for entry in entries:
        if entry.startswith("."):
            (prebuilt / entry).touch()
        else:
            (prebuilt / entry / "bin").mkdir(parents=True)
            (prebuilt / entry / "sysroot").mkdir()
    (root / "source.properties").write_text(
        f"Pkg.Desc = Android NDK\nPkg.Revision = {revision}\n"
    )
    return root


@pytest.fixture(name="make_ndk")
def make_ndk_fixture(tmp_path: Path) -> MakeNdk:
    """Returns a factory that lays out a fake NDK under tmp_path."""

    def make(
        entries: Sequence[str] = ("linux-x86_64",), revision: str = "25.2.9519653"
    ) -> Path:
        return _make_ndk(tmp_path / "ndk", entries, revision)

    return make


@pytest.fixture(name="ndk")
def ndk_fixture(make_ndk: MakeNdk) -> NdkInstallation:
    return resolve(make_ndk())
