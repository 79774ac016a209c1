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
"""Defines the API for describing a port.

A port is a declarative description of a third-party library: where to
download its source, how to build it for one ABI, and what the resulting
Prefab package contains. The pipeline that drives these steps lives in
ndkports.builder.
"""
from __future__ import annotations

from pathlib import Path
from typing import Any, List, Sequence

from ndkports.abis import Abi
from ndkports.autoconf import AutoconfPortBuilder
from ndkports.cmake import CMakePortBuilder
from ndkports.ndk import NdkInstallation
from ndkports.prefab import PrefabModule, PrefabPackage
from ndkports.publishing import PomDeveloper, PomLicense, PomMetadata
from ndkports.version import CMakeCompatibleVersion


class PortValidateError(RuntimeError):
    """The error raised when a port definition is incomplete."""


class Port:
    """Base port type."""

    name: str = ""
    url_template: str = ""
    description: str = ""
    homepage: str = ""

    # Relative to the root of the extracted source.
    license_path: Path = Path("LICENSE")
    license_name: str = ""
    license_url: str = ""

    modules: Sequence[PrefabModule] = ()
    dependencies: Sequence[str] = ()
    developers: Sequence[str] = ()

    def __getattribute__(self, name: str) -> Any:
        attr = super().__getattribute__(name)
        if name in ("name", "url_template") and attr == "":
            raise RuntimeError(f"Uninitialized use of {name}")
        return attr

    def __init__(self) -> None:
        self.validate()

    def __str__(self) -> str:
        return self.name

    def validate_error(self, msg: str) -> PortValidateError:
        """Creates a validation error for this port.

        Automatically includes the port name in the error string.
        """
        return PortValidateError(f"{self.name}: {msg}")

    def validate(self) -> None:
        if "{version}" not in self.url_template:
            raise self.validate_error("url_template must contain {version}")
        if not self.modules:
            raise self.validate_error("at least one module is required")
        names = [m.name for m in self.modules]
        if len(set(names)) != len(names):
            raise self.validate_error(f"duplicate module names: {names}")

    def source_url(self, version: str) -> str:
        return self.url_template.format(version=version)

    def build_abi(
        self, src_dir: Path, build_dir: Path, ndk: NdkInstallation, abi: Abi, api: int
    ) -> Path:
        """Builds the port for a single ABI.

        Returns:
            The install directory containing include/ and lib/.
        """
        raise NotImplementedError

    def prefab_package(self, version: str, src_dir: Path) -> PrefabPackage:
        return PrefabPackage(
            name=self.name,
            version=CMakeCompatibleVersion.parse(version),
            modules=self.modules,
            license_path=src_dir / self.license_path,
            dependencies=list(self.dependencies),
        )

    def pom(self, url: str) -> PomMetadata:
        licenses: List[PomLicense] = []
        if self.license_name:
            licenses.append(PomLicense(self.license_name, self.license_url))
        return PomMetadata(
            name=self.name,
            description=self.description or f"The ndkports AAR for {self.name}.",
            url=url,
            licenses=licenses,
            developers=[PomDeveloper(d) for d in self.developers],
        )


class CMakePort(Port):
    """A port built with CMake."""

    cmake_args: Sequence[str] = ()

    def build_abi(
        self, src_dir: Path, build_dir: Path, ndk: NdkInstallation, abi: Abi, api: int
    ) -> Path:
        builder = CMakePortBuilder(
            src_dir, build_dir, ndk, abi, api, additional_args=list(self.cmake_args)
        )
        return builder.build()


class AutoconfPort(Port):
    """A port built with an autoconf configure script."""

    configure_args: Sequence[str] = ()

    def build_abi(
        self, src_dir: Path, build_dir: Path, ndk: NdkInstallation, abi: Abi, api: int
    ) -> Path:
        builder = AutoconfPortBuilder(src_dir / "configure", build_dir, ndk, abi, api)
        return builder.build(list(self.configure_args))
