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
"""Timer APIs."""
from __future__ import annotations

import datetime
import logging
import timeit
from types import TracebackType
from typing import Optional, Type


def logger() -> logging.Logger:
    """Returns the module logger."""
    return logging.getLogger(__name__)


class Timer:
    """Times a named step of a port build.

    Preferably used as a context manager, which logs the duration on exit:

        with Timer("extract") as timer:
            extract()
        print(timer.duration)
    """

    def __init__(self, name: str) -> None:
        self.name = name
        self.start_time: Optional[float] = None
        self.duration: Optional[datetime.timedelta] = None

    def start(self) -> None:
        self.start_time = timeit.default_timer()

    def finish(self) -> datetime.timedelta:
        assert self.start_time is not None
        # Not interested in partial seconds at this scale.
        seconds = int(timeit.default_timer() - self.start_time)
        self.duration = datetime.timedelta(seconds=seconds)
        return self.duration

    def __enter__(self) -> Timer:
        self.start()
        return self

    def __exit__(
        self,
        exc_type: Optional[Type[BaseException]],
        _exc_value: Optional[BaseException],
        _traceback: Optional[TracebackType],
    ) -> None:
        duration = self.finish()
        if exc_type is None:
            logger().info("%s: %s", self.name, duration)
        else:
            logger().info("%s failed after %s", self.name, duration)
