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
"""Tests for ndkports.config."""
import json
from pathlib import Path

import pytest

from ndkports.abis import DEFAULT_ABIS, Abi
from ndkports.config import (
    DEFAULT_GROUP,
    ConfigError,
    PortsConfig,
    ProjectConfig,
    find_ndk_path,
    load_project_configs,
)


def write_json(path: Path, data: object) -> Path:
    path.write_text(json.dumps(data))
    return path


def test_load_project_configs(tmp_path: Path) -> None:
    path = write_json(
        tmp_path / "ports.json",
        {"zlib": {"libVersion": "1.3.1"}, "curl": {"libVersion": "8.4.0", "sha256": "ab"}},
    )
    configs = load_project_configs(path)
    assert configs["zlib"] == ProjectConfig("1.3.1")
    assert configs["curl"] == ProjectConfig("8.4.0", "ab")


@pytest.mark.parametrize(
    "data",
    [
        [],
        {"zlib": "1.3.1"},
        {"zlib": {}},
        {"zlib": {"libVersion": 1}},
        {"zlib": {"libVersion": "1.3.1", "sha256": 5}},
    ],
)
def test_load_invalid_project_configs(tmp_path: Path, data: object) -> None:
    with pytest.raises(ConfigError):
        load_project_configs(write_json(tmp_path / "ports.json", data))


def test_load_missing_or_corrupt(tmp_path: Path) -> None:
    with pytest.raises(ConfigError):
        load_project_configs(tmp_path / "missing.json")
    corrupt = tmp_path / "corrupt.json"
    corrupt.write_text("{")
    with pytest.raises(ConfigError):
        load_project_configs(corrupt)


def test_find_ndk_path() -> None:
    explicit = Path("/opt/ndk")
    assert find_ndk_path(explicit, {"ANDROID_NDK_ROOT": "/a"}) == explicit
    assert find_ndk_path(None, {"ANDROID_NDK_ROOT": "/a", "ANDROID_NDK_HOME": "/b"}) == Path("/a")
    assert find_ndk_path(None, {"ANDROID_NDK_HOME": "/b"}) == Path("/b")
    with pytest.raises(ConfigError):
        find_ndk_path(None, {})


def test_project_lookup(tmp_path: Path) -> None:
    config = PortsConfig(
        tmp_path, tmp_path, tmp_path, projects={"zlib": ProjectConfig("1.3.1")}
    )
    assert config.project("zlib").lib_version == "1.3.1"
    with pytest.raises(ConfigError, match="No configuration found for project curl"):
        config.project("curl")


def test_validation(tmp_path: Path) -> None:
    with pytest.raises(ConfigError):
        PortsConfig(tmp_path, tmp_path, tmp_path, min_sdk_version=19)
    with pytest.raises(ConfigError):
        PortsConfig(tmp_path, tmp_path, tmp_path, abis=())
    with pytest.raises(ConfigError):
        PortsConfig(tmp_path, tmp_path, tmp_path, abis=(Abi("mips"),))


def test_create(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("DIST_DIR", raising=False)
    monkeypatch.setenv("ANDROID_NDK_ROOT", str(tmp_path / "ndk"))
    config_file = write_json(tmp_path / "ports.json", {"zlib": {"libVersion": "1.3.1"}})
    config = PortsConfig.create(
        out_dir=tmp_path / "out", config_file=config_file, min_sdk_version=24
    )
    assert config.ndk_path == tmp_path / "ndk"
    assert config.out_dir == (tmp_path / "out").resolve()
    assert config.dist_dir == (tmp_path / "out/dist").resolve()
    assert config.dist_dir.is_dir()
    assert config.min_sdk_version == 24
    assert "zlib" in config.projects


def test_create_defaults(tmp_path: Path) -> None:
    config = PortsConfig.create(
        ndk_path=tmp_path, out_dir=tmp_path / "out", abis=[], group=None
    )
    assert config.abis == DEFAULT_ABIS
    assert config.group == DEFAULT_GROUP
    assert not config.sign

    config = PortsConfig.create(
        ndk_path=tmp_path,
        out_dir=tmp_path / "out",
        abis=[Abi("x86_64")],
        group="com.example",
        sign=True,
    )
    assert config.abis == (Abi("x86_64"),)
    assert config.group == "com.example"
    assert config.sign


def test_create_uses_out_dir_env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("OUT_DIR", str(tmp_path / "env-out"))
    monkeypatch.setenv("DIST_DIR", str(tmp_path / "env-dist"))
    config = PortsConfig.create(ndk_path=tmp_path)
    assert config.out_dir == (tmp_path / "env-out").resolve()
    assert config.dist_dir == (tmp_path / "env-dist").resolve()


def test_repository_url(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("GITHUB_REPOSITORY", raising=False)
    config = PortsConfig(tmp_path, tmp_path, tmp_path)
    assert config.repository_url_for("https://zlib.net") == "https://zlib.net"
    monkeypatch.setenv("GITHUB_REPOSITORY", "someone/ports")
    assert config.repository_url_for("x") == "https://github.com/someone/ports"
    explicit = PortsConfig(tmp_path, tmp_path, tmp_path, repository_url="https://e.com")
    assert explicit.repository_url_for("x") == "https://e.com"
