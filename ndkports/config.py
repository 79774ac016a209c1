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
"""Configuration for building ports.

Everything a build needs is carried explicitly in a PortsConfig rather than
read from process-wide state. Per-library settings (the version to package,
and optionally the expected source checksum) are read from a JSON file:

    {
        "zlib": {"libVersion": "1.3.1"}
    }
"""
from __future__ import annotations

from dataclasses import dataclass, field
import json
import os
from pathlib import Path
from typing import Dict, Mapping, Optional, Sequence

from ndkports.abis import DEFAULT_ABIS, MIN_API_LEVEL, Abi, min_api_for_abi
import ndkports.paths


NDK_ENV_VARS = ("ANDROID_NDK_ROOT", "ANDROID_NDK_HOME")

DEFAULT_GROUP = "io.github.ronickg"


class ConfigError(RuntimeError):
    """The build configuration is incomplete or malformed."""


@dataclass(frozen=True)
class ProjectConfig:
    """Settings for a single port."""

    lib_version: str
    sha256: Optional[str] = None

    @classmethod
    def from_json(cls, name: str, data: object) -> ProjectConfig:
        if not isinstance(data, dict):
            raise ConfigError(f"Configuration for {name} must be an object")
        lib_version = data.get("libVersion")
        if not isinstance(lib_version, str) or not lib_version:
            raise ConfigError(f"Configuration for {name} is missing libVersion")
        sha256 = data.get("sha256")
        if sha256 is not None and not isinstance(sha256, str):
            raise ConfigError(f"sha256 for {name} must be a string")
        return cls(lib_version, sha256)


def load_project_configs(path: Path) -> Dict[str, ProjectConfig]:
    """Loads the per-project configuration file."""
    try:
        with path.open(encoding="utf-8") as config_file:
            data = json.load(config_file)
    except OSError as ex:
        raise ConfigError(f"Unable to read {path}: {ex}") from ex
    except json.JSONDecodeError as ex:
        raise ConfigError(f"{path} is not valid JSON: {ex}") from ex

    if not isinstance(data, dict):
        raise ConfigError(f"{path} must contain a JSON object")
    return {name: ProjectConfig.from_json(name, value) for name, value in data.items()}


def find_ndk_path(
    ndk_path: Optional[Path] = None, environ: Optional[Mapping[str, str]] = None
) -> Path:
    """Returns the configured NDK path.

    An explicit path wins, followed by $ANDROID_NDK_ROOT and $ANDROID_NDK_HOME.
    """
    if ndk_path is not None:
        return ndk_path
    if environ is None:
        environ = os.environ
    for env_var in NDK_ENV_VARS:
        value = environ.get(env_var)
        if value:
            return Path(value)
    raise ConfigError(
        "No NDK configured. Use --ndk-path or set one of: " + ", ".join(NDK_ENV_VARS)
    )


@dataclass(frozen=True)
class PortsConfig:
    """Build-wide configuration shared by every port."""

    ndk_path: Path
    out_dir: Path
    dist_dir: Path
    min_sdk_version: int = MIN_API_LEVEL
    abis: Sequence[Abi] = DEFAULT_ABIS
    group: str = DEFAULT_GROUP
    repository_url: Optional[str] = None
    sign: bool = False
    projects: Mapping[str, ProjectConfig] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if self.min_sdk_version < MIN_API_LEVEL:
            raise ConfigError(
                f"minSdkVersion {self.min_sdk_version} is lower than the minimum "
                f"supported API level {MIN_API_LEVEL}"
            )
        if not self.abis:
            raise ConfigError("At least one ABI must be configured")
        for abi in self.abis:
            try:
                min_api_for_abi(abi)
            except ValueError as ex:
                raise ConfigError(str(ex)) from ex

    @classmethod
    def create(
        cls,
        ndk_path: Optional[Path] = None,
        out_dir: Optional[Path] = None,
        dist_dir: Optional[Path] = None,
        config_file: Optional[Path] = None,
        min_sdk_version: int = MIN_API_LEVEL,
        abis: Optional[Sequence[Abi]] = None,
        group: Optional[str] = None,
        repository_url: Optional[str] = None,
        sign: bool = False,
    ) -> PortsConfig:
        """Builds a configuration from CLI-style inputs and the environment.

        Unset abis and group fall back to DEFAULT_ABIS and DEFAULT_GROUP.
        """
        resolved_out = ndkports.paths.get_out_dir(out_dir)
        projects = load_project_configs(config_file) if config_file is not None else {}
        return cls(
            ndk_path=find_ndk_path(ndk_path),
            out_dir=resolved_out,
            dist_dir=ndkports.paths.get_dist_dir(resolved_out, dist_dir),
            min_sdk_version=min_sdk_version,
            abis=tuple(abis) if abis else DEFAULT_ABIS,
            group=group if group is not None else DEFAULT_GROUP,
            repository_url=repository_url,
            sign=sign,
            projects=projects,
        )

    def project(self, name: str) -> ProjectConfig:
        try:
            return self.projects[name]
        except KeyError as ex:
            raise ConfigError(f"No configuration found for project {name}") from ex

    def repository_url_for(self, default: str) -> str:
        """Returns the project URL used in published metadata."""
        if self.repository_url is not None:
            return self.repository_url
        github_repository = os.environ.get("GITHUB_REPOSITORY")
        if github_repository:
            return f"https://github.com/{github_repository}"
        return default
