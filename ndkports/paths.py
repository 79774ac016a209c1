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
"""Helper functions for output paths."""
import os
from pathlib import Path
from typing import Optional


def _get_dir_from_env(default: Path, env_var: str) -> Path:
    """Returns the path to a directory specified by the environment.

    If the environment variable is not set, the default will be used. The
    directory is created if it does not exist.

    Args:
        default: The path used if the environment variable is not set.
        env_var: The environment variable that contains the path, if any.

    Returns:
        The absolute path to the directory.
    """
    path = Path(os.getenv(env_var, str(default))).resolve()
    path.mkdir(parents=True, exist_ok=True)
    return path


def get_out_dir(out_dir: Optional[Path] = None) -> Path:
    """Returns the out directory.

    An explicit out_dir takes precedence over $OUT_DIR, which takes precedence
    over ./out.
    """
    if out_dir is not None:
        out_dir = out_dir.resolve()
        out_dir.mkdir(parents=True, exist_ok=True)
        return out_dir
    return _get_dir_from_env(Path("out"), "OUT_DIR")


def get_dist_dir(out_dir: Path, dist_dir: Optional[Path] = None) -> Path:
    """Returns the distribution directory.

    The distribution directory holds the final artifacts: the zipped Maven
    repository for each port.
    """
    if dist_dir is not None:
        dist_dir = dist_dir.resolve()
        dist_dir.mkdir(parents=True, exist_ok=True)
        return dist_dir
    return _get_dir_from_env(out_dir / "dist", "DIST_DIR")
