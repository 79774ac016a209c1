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
"""Tests for ndkports.archive."""
from pathlib import Path
import tarfile
import zipfile

import pytest

from ndkports.archive import extract_tarball, make_zip


def make_tarball(path: Path, root: Path) -> Path:
    with tarfile.open(path, "w:gz") as tar:
        for child in sorted(root.iterdir()):
            tar.add(child, arcname=child.name)
    return path


def test_extract_tarball(tmp_path: Path) -> None:
    tree = tmp_path / "tree"
    (tree / "zlib-1.3.1").mkdir(parents=True)
    (tree / "zlib-1.3.1/zlib.h").write_text("header")
    archive = make_tarball(tmp_path / "src.tar.gz", tree)

    install = tmp_path / "out/src"
    install.mkdir(parents=True)
    (install / "stale").touch()
    extract_tarball(archive, install)
    assert (install / "zlib.h").read_text() == "header"
    assert not (install / "stale").exists()
    assert [p.name for p in install.parent.iterdir()] == ["src"]


def test_extract_tarball_with_many_roots(tmp_path: Path) -> None:
    tree = tmp_path / "tree"
    (tree / "a").mkdir(parents=True)
    (tree / "b").mkdir()
    archive = make_tarball(tmp_path / "src.tar.gz", tree)
    with pytest.raises(RuntimeError, match="more than one root"):
        extract_tarball(archive, tmp_path / "src")


def test_extract_empty_tarball(tmp_path: Path) -> None:
    tree = tmp_path / "tree"
    tree.mkdir()
    archive = make_tarball(tmp_path / "src.tar.gz", tree)
    with pytest.raises(RuntimeError, match="empty"):
        extract_tarball(archive, tmp_path / "src")


def test_make_zip_is_reproducible(tmp_path: Path) -> None:
    root = tmp_path / "root"
    (root / "b").mkdir(parents=True)
    (root / "b/two.txt").write_text("2")
    (root / "one.txt").write_text("1")
    paths = [Path("one.txt"), Path("b/two.txt")]

    first = make_zip(tmp_path / "first.zip", root, paths).read_bytes()
    (root / "one.txt").touch()
    second = make_zip(tmp_path / "second.zip", root, reversed(paths)).read_bytes()
    assert first == second

    with zipfile.ZipFile(tmp_path / "first.zip") as archive:
        assert archive.namelist() == ["b/two.txt", "one.txt"]
        assert archive.read("one.txt") == b"1"


def test_make_zip_requires_directory(tmp_path: Path) -> None:
    with pytest.raises(RuntimeError):
        make_zip(tmp_path / "out.zip", tmp_path / "missing", [])
