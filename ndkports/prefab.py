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
"""Prefab package layout and AAR creation.

A port is published as an AAR containing a Prefab package:

    AndroidManifest.xml
    META-INF/<license>
    prefab/prefab.json
    prefab/modules/<module>/module.json
    prefab/modules/<module>/include/...
    prefab/modules/<module>/libs/android.<abi>/abi.json
    prefab/modules/<module>/libs/android.<abi>/lib<module>.so

See https://google.github.io/prefab/ for the format.
"""
from __future__ import annotations

from dataclasses import dataclass, field
import json
import logging
from pathlib import Path
import shutil
import textwrap
from typing import Any, Dict, List, Optional, Sequence

from ndkports.abis import Abi
import ndkports.archive
from ndkports.ndk import NdkInstallation
from ndkports.version import CMakeCompatibleVersion


PREFAB_SCHEMA_VERSION = 2
STL = "c++_shared"


def logger() -> logging.Logger:
    """Returns the module logger."""
    return logging.getLogger(__name__)


class PrefabError(RuntimeError):
    """The build output did not contain what the package describes."""


@dataclass(frozen=True)
class PrefabModule:
    """A library exposed by a Prefab package."""

    name: str
    library_name: Optional[str] = None
    static: bool = False
    header_only: bool = False
    export_libraries: Sequence[str] = ()

    @property
    def library_file_name(self) -> str:
        base = self.library_name if self.library_name is not None else f"lib{self.name}"
        return base + (".a" if self.static else ".so")

    def metadata(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "export_libraries": list(self.export_libraries),
            "android": {},
        }
        if self.library_name is not None:
            data["library_name"] = self.library_name
        return data


@dataclass(frozen=True)
class AbiInstall:
    """The installed build output for one ABI."""

    abi: Abi
    api: int
    install_dir: Path


@dataclass
class PrefabPackage:
    name: str
    version: CMakeCompatibleVersion
    modules: Sequence[PrefabModule]
    license_path: Path
    dependencies: List[str] = field(default_factory=list)

    def metadata(self) -> Dict[str, Any]:
        return {
            "schema_version": PREFAB_SCHEMA_VERSION,
            "name": self.name,
            "version": str(self.version),
            "dependencies": list(self.dependencies),
        }

    def write(
        self, package_dir: Path, installs: Sequence[AbiInstall], ndk: NdkInstallation
    ) -> Path:
        """Lays out the package in package_dir, replacing any previous contents.

        Headers are taken from the first install, since they are expected to
        be identical across ABIs.
        """
        if not installs:
            raise PrefabError(f"{self.name}: no ABIs were built")
        if package_dir.exists():
            shutil.rmtree(package_dir)

        prefab_dir = package_dir / "prefab"
        prefab_dir.mkdir(parents=True)
        _write_json(prefab_dir / "prefab.json", self.metadata())

        for module in self.modules:
            self._write_module(prefab_dir / "modules" / module.name, module, installs, ndk)

        if not self.license_path.is_file():
            raise PrefabError(f"{self.name}: license {self.license_path} does not exist")
        meta_inf = package_dir / "META-INF"
        meta_inf.mkdir()
        shutil.copy2(self.license_path, meta_inf / self.license_path.name)
        return package_dir

    def _write_module(
        self,
        module_dir: Path,
        module: PrefabModule,
        installs: Sequence[AbiInstall],
        ndk: NdkInstallation,
    ) -> None:
        module_dir.mkdir(parents=True)
        _write_json(module_dir / "module.json", module.metadata())

        include_src = installs[0].install_dir / "include"
        if include_src.is_dir():
            shutil.copytree(include_src, module_dir / "include")
        else:
            (module_dir / "include").mkdir()

        if module.header_only:
            return

        for install in installs:
            lib_src = install.install_dir / "lib" / module.library_file_name
            if not lib_src.is_file():
                raise PrefabError(
                    f"{self.name}: {lib_src} was not produced for {install.abi}"
                )
            abi_dir = module_dir / "libs" / f"android.{install.abi}"
            abi_dir.mkdir(parents=True)
            shutil.copy2(lib_src, abi_dir / lib_src.name)
            _write_json(
                abi_dir / "abi.json",
                {
                    "abi": install.abi,
                    "api": install.api,
                    "ndk": ndk.version.major,
                    "stl": STL,
                    "static": module.static,
                },
            )
            logger().debug("Packaged %s for %s", lib_src.name, install.abi)


def _write_json(path: Path, data: Dict[str, Any]) -> None:
    path.write_text(json.dumps(data, indent=2) + "\n", encoding="utf-8")


def manifest_package_name(name: str) -> str:
    """Returns the Android package name used in the AAR's manifest.

    >>> manifest_package_name("curl-ssl")
    'com.android.ndk.thirdparty.curl_ssl'
    """
    return "com.android.ndk.thirdparty." + name.replace("-", "_")


def make_aar(package_dir: Path, aar_path: Path, name: str, min_sdk_version: int) -> Path:
    """Adds an AndroidManifest.xml to package_dir and zips it into aar_path."""
    (package_dir / "AndroidManifest.xml").write_text(
        textwrap.dedent(
            f"""\
            <manifest xmlns:android="http://schemas.android.com/apk/res/android"
                package="{manifest_package_name(name)}"
                android:versionCode="1"
                android:versionName="1.0">

                <uses-sdk
                    android:minSdkVersion="{min_sdk_version}"
                    android:targetSdkVersion="{min_sdk_version}" />

            </manifest>
            """
        ),
        encoding="utf-8",
    )
    files = [
        p.relative_to(package_dir) for p in package_dir.rglob("*") if p.is_file()
    ]
    return ndkports.archive.make_zip(aar_path, package_dir, files)
