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
"""APIs for building CMake projects with an NDK."""
from __future__ import annotations

import logging
import os
from pathlib import Path
import pprint
import shlex
import shutil
import subprocess
from typing import Dict, List, Optional

from ndkports.abis import Abi
from ndkports.ndk import NdkInstallation


def logger() -> logging.Logger:
    """Returns the module logger."""
    return logging.getLogger(__name__)


class ToolNotFoundError(RuntimeError):
    """A build tool required by a port is not installed."""


def find_tool(name: str) -> Path:
    """Returns the path to the named build tool on PATH."""
    path = shutil.which(name)
    if path is None:
        raise ToolNotFoundError(f"Could not find {name} on PATH")
    return Path(path)


def run_logged(
    cmd: List[str], cwd: Path, additional_env: Optional[Dict[str, str]] = None
) -> None:
    """Runs and logs execution of a subprocess."""
    subproc_env = dict(os.environ)
    if additional_env:
        subproc_env.update(additional_env)

    pp_cmd = shlex.join(cmd)
    if additional_env:
        pp_env = pprint.pformat(additional_env, indent=4)
        logger().info("Running: %s with env:\n%s", pp_cmd, pp_env)
    else:
        logger().info("Running: %s", pp_cmd)

    subprocess.check_call(cmd, env=subproc_env, cwd=cwd)


class CMakePortBuilder:
    """Builder for a CMake project targeting a single Android ABI."""

    def __init__(
        self,
        src_path: Path,
        build_dir: Path,
        ndk: NdkInstallation,
        abi: Abi,
        api: int,
        additional_args: Optional[List[str]] = None,
        additional_env: Optional[Dict[str, str]] = None,
    ) -> None:
        """Initializes a CMake builder.

        Args:
            src_path: Path to the CMake project.
            build_dir: Directory to use for building. If the directory exists,
                it will be deleted and recreated to ensure the build is
                correct.
            ndk: The NDK to build with.
            abi: ABI to build for.
            api: API level to build against.
            additional_args: Additional arguments to pass to cmake when
                configuring. Typically -D options specific to the port.
            additional_env: Additional environment to set, used during
                configure, build, and install.
        """
        self.src_path = src_path
        self.build_directory = build_dir
        self.ndk = ndk
        self.abi = abi
        self.api = api
        self.additional_args = additional_args
        self.additional_env = additional_env

        self.working_directory = self.build_directory / "build"
        self.install_directory = self.build_directory / "install"

    @property
    def cmake_defines(self) -> Dict[str, str]:
        """CMake defines."""
        return {
            "CMAKE_TOOLCHAIN_FILE": str(self.ndk.cmake_toolchain_file),
            "ANDROID_ABI": self.abi,
            "ANDROID_PLATFORM": f"android-{self.api}",
            "ANDROID_STL": "c++_shared",
            "CMAKE_BUILD_TYPE": "RelWithDebInfo",
            "CMAKE_INSTALL_PREFIX": str(self.install_directory),
        }

    def configure_command(self, cmake: Path) -> List[str]:
        cmake_cmd = [str(cmake), "-GNinja"]
        cmake_cmd.extend(f"-D{key}={val}" for key, val in self.cmake_defines.items())
        if self.additional_args:
            cmake_cmd.extend(self.additional_args)
        cmake_cmd.extend(["-S", str(self.src_path), "-B", str(self.working_directory)])
        return cmake_cmd

    def _run(self, cmd: List[str]) -> None:
        run_logged(cmd, self.working_directory, self.additional_env)

    def clean(self) -> None:
        """Cleans output directory.

        If necessary, existing output directory will be removed. After
        removal, the inner directories (working directory and install
        directory) will be created.
        """
        if self.build_directory.exists():
            shutil.rmtree(self.build_directory)

        self.working_directory.mkdir(parents=True)
        self.install_directory.mkdir(parents=True)

    def configure(self) -> None:
        """Invokes cmake configure."""
        self._run(self.configure_command(find_tool("cmake")))

    def make(self) -> None:
        """Builds the project."""
        self._run([str(find_tool("ninja"))])

    def install(self) -> None:
        """Installs the project."""
        self._run([str(find_tool("ninja")), "install"])

    def build(self) -> Path:
        """Configures, builds, and installs the project.

        Returns:
            The install directory.
        """
        self.clean()
        self.configure()
        self.make()
        self.install()
        return self.install_directory
