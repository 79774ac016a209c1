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
"""APIs for building autoconf projects with an NDK."""
from __future__ import annotations

import multiprocessing
from pathlib import Path
import shutil
from typing import Dict, List, Optional

from ndkports.abis import Abi, abi_to_triple, clang_target
from ndkports.cmake import run_logged
from ndkports.ndk import NdkInstallation


class AutoconfPortBuilder:
    """Builder for an autoconf project targeting a single Android ABI."""

    jobs_arg = f"-j{multiprocessing.cpu_count()}"

    def __init__(
        self,
        configure_script: Path,
        build_dir: Path,
        ndk: NdkInstallation,
        abi: Abi,
        api: int,
        additional_flags: Optional[List[str]] = None,
        additional_env: Optional[Dict[str, str]] = None,
    ) -> None:
        """Initializes an autoconf builder.

        Args:
            configure_script: Path to the configure script.
            build_dir: Directory to use for building. If the directory exists,
                it will be deleted and recreated to ensure the build is
                correct.
            ndk: The NDK whose toolchain and sysroot are used.
            abi: ABI to build for. Determines the --host triple.
            api: API level to build against.
            additional_flags: Additional flags to pass to the compiler.
            additional_env: Additional environment to set, used during
                configure, build, and install.
        """
        self.configure_script = configure_script
        self.build_directory = build_dir
        self.ndk = ndk
        self.abi = abi
        self.api = api
        self.additional_flags = additional_flags
        self.additional_env = additional_env

        self.working_directory = self.build_directory / "build"
        self.install_directory = self.build_directory / "install"

    @property
    def flags(self) -> List[str]:
        """Returns default cflags for the target."""
        flags = [
            f"--sysroot={self.ndk.sysroot_directory}",
            "-fPIC",
        ]
        if self.additional_flags:
            flags.extend(self.additional_flags)
        return flags

    def _compiler(self, name: str) -> Path:
        target = clang_target(self.abi, self.api)
        host = self.ndk.host
        # The target-prefixed compilers are batch files on Windows.
        suffix = ".cmd" if host is not None and host.is_windows else ""
        return self.ndk.toolchain_bin_directory / f"{target}-{name}{suffix}"

    @property
    def configure_env(self) -> Dict[str, str]:
        flags_str = " ".join(self.flags)
        env = {
            "CC": str(self._compiler("clang")),
            "CXX": str(self._compiler("clang++")),
            "AR": str(self.ndk.clang_tool("llvm-ar")),
            "AS": str(self._compiler("clang")),
            "LD": str(self.ndk.clang_tool("ld.lld")),
            "NM": str(self.ndk.clang_tool("llvm-nm")),
            "RANLIB": str(self.ndk.clang_tool("llvm-ranlib")),
            "STRIP": str(self.ndk.clang_tool("llvm-strip")),
            "CFLAGS": flags_str,
            "CXXFLAGS": flags_str,
        }
        if self.additional_env:
            env.update(self.additional_env)
        return env

    def _run(self, cmd: List[str], env: Optional[Dict[str, str]] = None) -> None:
        run_logged(cmd, self.working_directory, env or self.additional_env)

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

    def configure(self, args: List[str]) -> None:
        """Invokes configure in the working directory with the given arguments.

        Args:
            args: List of arguments to be passed to configure. Does not need to
                include --prefix or --host. Those are set up automatically.
        """
        configure_args = [
            str(self.configure_script),
            f"--host={abi_to_triple(self.abi)}",
            f"--prefix={self.install_directory}",
        ] + args
        self._run(configure_args, self.configure_env)

    def make(self) -> None:
        """Builds the project."""
        self._run(["make", self.jobs_arg])

    def install(self) -> None:
        """Installs the project."""
        self._run(["make", self.jobs_arg, "install"])

    def build(self, configure_args: Optional[List[str]] = None) -> Path:
        """Configures, builds, and installs an autoconf project.

        Args:
            configure_args: List of arguments to be passed to configure. Does
                not need to include --prefix or --host. Those are set up
                automatically.

        Returns:
            The install directory.
        """
        self.clean()
        self.configure([] if configure_args is None else configure_args)
        self.make()
        self.install()
        return self.install_directory
