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
"""Drives the build of a port from source download to distribution zip."""
from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Optional

from ndkports.abis import api_for_abi
import ndkports.archive
from ndkports.config import ConfigError, PortsConfig
from ndkports.ndk import NdkInstallation
from ndkports.port import Port
from ndkports.prefab import AbiInstall, make_aar
from ndkports.publishing import MavenPublication, make_distribution
from ndkports.source import PortSource, RemoteSource, verify_sha256
from ndkports.timer import Timer
from ndkports.version import CMakeCompatibleVersion


def logger() -> logging.Logger:
    """Returns the module logger."""
    return logging.getLogger(__name__)


class PortBuilder:
    """Builds, packages, and publishes a single port.

    All intermediates live in <out>/<port>, including the Maven repository the
    port is published to. The distribution zip of that repository is written
    to the dist directory.
    """

    def __init__(
        self,
        port: Port,
        config: PortsConfig,
        ndk: NdkInstallation,
        source: Optional[PortSource] = None,
    ) -> None:
        self.port = port
        self.config = config
        self.ndk = ndk
        self.project = config.project(port.name)
        self.version = self.project.lib_version
        # Fail before downloading anything if the version can't be packaged.
        try:
            CMakeCompatibleVersion.parse(self.version)
        except ValueError as ex:
            raise ConfigError(
                f"libVersion {self.version} of {port.name} cannot be packaged: {ex}"
            ) from ex
        if source is None:
            source = RemoteSource(port.source_url(self.version))
        self.source = source

        self.port_dir = config.out_dir / port.name
        self.archive_path = self.port_dir / "src.tar.gz"
        self.src_dir = self.port_dir / "src"
        self.build_root = self.port_dir / "build"
        self.package_dir = self.port_dir / "aar"
        self.aar_path = self.port_dir / f"{port.name}-{self.version}.aar"
        self.repo_dir = self.port_dir / "repository"
        self.dist_zip = config.dist_dir / f"{port.name}-{self.version}.zip"

    async def fetch_source(self) -> None:
        await self.source.fetch(self.archive_path)
        if self.project.sha256 is not None:
            verify_sha256(self.archive_path, self.project.sha256)

    def extract_source(self) -> None:
        ndkports.archive.extract_tarball(self.archive_path, self.src_dir)

    def build_abis(self) -> List[AbiInstall]:
        installs = []
        for abi in self.config.abis:
            api = api_for_abi(abi, self.config.min_sdk_version)
            with Timer(f"{self.port.name} {abi}"):
                install_dir = self.port.build_abi(
                    self.src_dir, self.build_root / abi, self.ndk, abi, api
                )
            installs.append(AbiInstall(abi, api, install_dir))
        return installs

    def package(self, installs: List[AbiInstall]) -> Path:
        prefab_package = self.port.prefab_package(self.version, self.src_dir)
        prefab_package.write(self.package_dir, installs, self.ndk)
        return make_aar(
            self.package_dir, self.aar_path, self.port.name, self.config.min_sdk_version
        )

    def publication(self) -> MavenPublication:
        default_url = self.port.homepage or self.port.source_url(self.version)
        url = self.config.repository_url_for(default_url)
        return MavenPublication(
            group=self.config.group,
            artifact=self.port.name,
            version=self.version,
            pom=self.port.pom(url),
        )

    def publish(self, aar: Path) -> List[Path]:
        return self.publication().publish(self.repo_dir, aar, signed=self.config.sign)

    def distribute(self) -> Path:
        return make_distribution(self.repo_dir, self.dist_zip)

    async def run(self) -> Path:
        """Runs every step of the build.

        Returns:
            The path to the distribution zip.
        """
        logger().info(
            "Building %s %s with NDK %s", self.port.name, self.version, self.ndk.version
        )
        with Timer(f"{self.port.name} fetch"):
            await self.fetch_source()
        with Timer(f"{self.port.name} extract"):
            self.extract_source()
        installs = self.build_abis()
        with Timer(f"{self.port.name} package"):
            aar = self.package(installs)
        with Timer(f"{self.port.name} publish"):
            self.publish(aar)
            dist = self.distribute()
        logger().info("Finished %s: %s", self.port.name, dist)
        return dist
