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
"""Versions in the format accepted by CMake's find_package."""
from __future__ import annotations

from dataclasses import dataclass
import re
from typing import Optional


@dataclass(frozen=True)
class CMakeCompatibleVersion:
    """A version of the form MAJOR[.MINOR[.PATCH[.TWEAK]]].

    Prefab package versions must be parseable by CMake, which rules out the
    suffixes many projects use in their release names.

    >>> str(CMakeCompatibleVersion.parse("1.3.1"))
    '1.3.1'
    >>> CMakeCompatibleVersion.parse("1.3.1-rc1")
    Traceback (most recent call last):
        ...
    ValueError: Version string 1.3.1-rc1 is not a valid CMake compatible version
    """

    major: int
    minor: Optional[int] = None
    patch: Optional[int] = None
    tweak: Optional[int] = None

    _VERSION_RE = re.compile(r"^(\d+)(?:\.(\d+)(?:\.(\d+)(?:\.(\d+))?)?)?$")

    def __post_init__(self) -> None:
        if self.tweak is not None and self.patch is None:
            raise ValueError("tweak version requires a patch version")
        if self.patch is not None and self.minor is None:
            raise ValueError("patch version requires a minor version")

    def __str__(self) -> str:
        parts = [self.major, self.minor, self.patch, self.tweak]
        return ".".join(str(p) for p in parts if p is not None)

    @classmethod
    def parse(cls, version: str) -> CMakeCompatibleVersion:
        match = cls._VERSION_RE.match(version)
        if match is None:
            raise ValueError(
                f"Version string {version} is not a valid CMake compatible version"
            )
        major, minor, patch, tweak = (
            int(group) if group is not None else None for group in match.groups()
        )
        assert major is not None
        return cls(major, minor, patch, tweak)
