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
"""zlib, a general purpose compression library."""
from ndkports.port import CMakePort
from ndkports.prefab import PrefabModule


class Zlib(CMakePort):
    name = "zlib"
    url_template = (
        "https://github.com/madler/zlib/releases/download/v{version}/"
        "zlib-{version}.tar.gz"
    )
    homepage = "https://zlib.net"
    license_name = "zlib License"
    license_url = "https://zlib.net/zlib_license.html"
    developers = ("Ronald",)

    cmake_args = ("-DBUILD_SHARED_LIBS=ON",)

    modules = (PrefabModule("z"),)
