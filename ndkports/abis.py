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
"""Constants and helper functions for Android ABIs."""
from typing import NewType, Optional

Arch = NewType("Arch", str)
Abi = NewType("Abi", str)


MIN_API_LEVEL = 21
FIRST_LP64_API_LEVEL = 21
FIRST_RISCV64_API_LEVEL = 35


LP32_ABIS = (
    Abi("armeabi-v7a"),
    Abi("x86"),
)


LP64_ABIS = (
    Abi("arm64-v8a"),
    Abi("riscv64"),
    Abi("x86_64"),
)


ALL_ABIS = sorted(LP32_ABIS + LP64_ABIS)


# riscv64 is opt-in since few NDKs and devices support it yet.
DEFAULT_ABIS = (
    Abi("armeabi-v7a"),
    Abi("arm64-v8a"),
    Abi("x86"),
    Abi("x86_64"),
)


def abi_to_arch(abi: Abi) -> Arch:
    """Returns the architecture for the given ABI."""
    try:
        return {
            Abi("armeabi-v7a"): Arch("arm"),
            Abi("arm64-v8a"): Arch("arm64"),
            Abi("riscv64"): Arch("riscv64"),
            Abi("x86"): Arch("x86"),
            Abi("x86_64"): Arch("x86_64"),
        }[abi]
    except KeyError as ex:
        raise ValueError(f"Invalid ABI: {abi}") from ex


def abi_to_triple(abi: Abi) -> str:
    """Returns the triple for the given ABI.

    >>> abi_to_triple(Abi('armeabi-v7a'))
    'arm-linux-androideabi'
    >>> abi_to_triple(Abi('x86'))
    'i686-linux-android'
    """
    return {
        Arch("arm"): "arm-linux-androideabi",
        Arch("arm64"): "aarch64-linux-android",
        Arch("riscv64"): "riscv64-linux-android",
        Arch("x86"): "i686-linux-android",
        Arch("x86_64"): "x86_64-linux-android",
    }[abi_to_arch(abi)]


def clang_target(abi: Abi, api: Optional[int] = None) -> str:
    """Returns the Clang target to be used for the given ABI/API combo.

    api: API level to compile for. Defaults to the lowest supported API
        level for the architecture if None.
    """
    if api is None:
        api = min_api_for_abi(abi)
    triple = abi_to_triple(abi)
    if abi == Abi("armeabi-v7a"):
        triple = "armv7a-linux-androideabi"
    return f"{triple}{api}"


def min_api_for_abi(abi: Abi) -> int:
    """Returns the minimum supported build API for the given ABI.

    >>> min_api_for_abi(Abi('arm64-v8a'))
    21

    >>> min_api_for_abi(Abi('foobar'))
    Traceback (most recent call last):
        ...
    ValueError: Invalid ABI: foobar
    """
    if abi == Abi("riscv64"):
        return FIRST_RISCV64_API_LEVEL
    if abi in LP64_ABIS:
        return FIRST_LP64_API_LEVEL
    if abi in LP32_ABIS:
        return MIN_API_LEVEL
    raise ValueError(f"Invalid ABI: {abi}")


def api_for_abi(abi: Abi, min_sdk_version: int) -> int:
    """Returns the API level a port is built against for the given ABI."""
    return max(min_sdk_version, min_api_for_abi(abi))
