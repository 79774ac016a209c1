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
"""Helper functions for reading and writing source tarballs and zip files."""
import logging
from pathlib import Path
import shlex
import shutil
import subprocess
import tempfile
from typing import Iterable
import zipfile


# Zip entries are written with a fixed timestamp so that rebuilding a port
# produces byte-identical AARs.
ZIP_EPOCH = (1980, 1, 1, 0, 0, 0)


def logger() -> logging.Logger:
    """Returns the module logger."""
    return logging.getLogger(__name__)


def extract_tarball(package_path: Path, install_path: Path) -> None:
    """Extracts the contents of a tarball to a directory.

    This behaves similar to the following shell commands:

        mkdir -p $install_path
        tar xf $package_path -C $install_path --strip-components=1

    That is, the first directory in the package is stripped and the contents
    are placed in the install path. Any existing install_path is replaced.

    Args:
        package_path: Path to the tarball to extract.
        install_path: Directory in which to extract the contents.

    Raises:
        RuntimeError: The tarball was not in the allowed format. i.e. the
                      tarball had more than one top level directory or was
                      empty.
    """
    install_path.parent.mkdir(parents=True, exist_ok=True)
    # Extract beside the destination so the final step is a rename.
    extract_dir = Path(tempfile.mkdtemp(dir=install_path.parent))
    try:
        cmd = ["tar", "-xf", str(package_path), "-C", str(extract_dir)]
        logger().info("check_call `%s`", shlex.join(cmd))
        subprocess.check_call(cmd)
        dirs = list(extract_dir.iterdir())
        if len(dirs) > 1:
            raise RuntimeError(
                f"Package has more than one root directory: {package_path.name}"
            )
        if not dirs or not dirs[0].is_dir():
            raise RuntimeError(f"Package was empty: {package_path.name}")
        if install_path.exists():
            shutil.rmtree(install_path)
        shutil.move(str(dirs[0]), str(install_path))
    finally:
        shutil.rmtree(extract_dir)


def make_zip(zip_file: Path, root_dir: Path, paths: Iterable[Path]) -> Path:
    """Creates a zip file.

    Args:
        zip_file: Path to the output archive. Replaced if it exists.
        root_dir: Path to the directory from which to perform the packaging
                  (identical to tar's -C).
        paths: Files to package, relative to root_dir. Entries are written
               in sorted order.
    """
    if not root_dir.is_dir():
        raise RuntimeError(f"Not a directory: {root_dir}")

    zip_file.parent.mkdir(parents=True, exist_ok=True)
    if zip_file.exists():
        zip_file.unlink()

    with zipfile.ZipFile(zip_file, "w", zipfile.ZIP_DEFLATED) as archive:
        for path in sorted(Path(p) for p in paths):
            source = root_dir / path
            info = zipfile.ZipInfo(path.as_posix(), date_time=ZIP_EPOCH)
            info.compress_type = zipfile.ZIP_DEFLATED
            info.external_attr = (source.stat().st_mode & 0o777) << 16
            archive.writestr(info, source.read_bytes())
    logger().info("Created %s", zip_file)
    return zip_file
