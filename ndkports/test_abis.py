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
"""Tests for ndkports.abis."""
import pytest

from ndkports.abis import Abi, api_for_abi, clang_target


def test_clang_target() -> None:
    assert clang_target(Abi("armeabi-v7a"), 24) == "armv7a-linux-androideabi24"
    assert clang_target(Abi("arm64-v8a")) == "aarch64-linux-android21"
    assert clang_target(Abi("x86"), 21) == "i686-linux-android21"


def test_api_for_abi() -> None:
    assert api_for_abi(Abi("x86_64"), 21) == 21
    assert api_for_abi(Abi("x86_64"), 28) == 28
    assert api_for_abi(Abi("riscv64"), 21) == 35


def test_invalid_abi() -> None:
    with pytest.raises(ValueError):
        clang_target(Abi("mips"))
