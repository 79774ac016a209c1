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
"""Constants and helper functions for NDK hosts."""
from __future__ import annotations

import enum
import sys


@enum.unique
class Host(enum.Enum):
    """Enumeration of hosts the NDK ships toolchains for."""

    Darwin = "darwin"
    Linux = "linux"
    Windows64 = "windows64"

    @property
    def is_windows(self) -> bool:
        """Returns True if the given host is Windows."""
        return self == Host.Windows64

    @property
    def tag(self) -> str:
        """Returns the tag used for this host in NDK prebuilt directories.

        >>> Host.Darwin.tag
        'darwin-x86_64'
        >>> Host.Windows64.tag
        'windows-x86_64'
        """
        if self is Host.Windows64:
            # The enum value is historical; the NDK has only shipped 64-bit
            # Windows toolchains for a long time.
            return "windows-x86_64"
        return f"{self.value}-x86_64"

    @property
    def exe_suffix(self) -> str:
        if self is Host.Windows64:
            return ".exe"
        return ""

    @classmethod
    def current(cls) -> Host:
        """Returns the Host matching the current machine."""
        if sys.platform in ("linux", "linux2"):
            return Host.Linux
        elif sys.platform == "darwin":
            return Host.Darwin
        elif sys.platform == "win32":
            return Host.Windows64
        else:
            raise RuntimeError(f"Unsupported host: {sys.platform}")

    @classmethod
    def from_tag(cls, tag: str) -> Host:
        for host in cls:
            if host.tag == tag:
                return host
        raise ValueError(f"Unrecognized host tag: {tag}")
