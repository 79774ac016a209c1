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
"""The ports that can be built."""
from typing import Dict, Type

from ndkports.port import Port
from ndkports.ports.zlib import Zlib


ALL_PORTS: Dict[str, Type[Port]] = {port.name: port for port in (Zlib,)}


def get_port(name: str) -> Port:
    """Returns an instance of the named port."""
    try:
        port_class = ALL_PORTS[name]
    except KeyError as ex:
        known = ", ".join(sorted(ALL_PORTS))
        raise KeyError(f"Unknown port {name}. Known ports: {known}") from ex
    return port_class()
