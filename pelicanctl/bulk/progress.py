#
# The pelicanctl module is a Python/CLI interface to the Pelican panel.
#
# Copyright (C) 2024-2026 pelicanctl contributors
#
# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU Affero General Public License as
# published by the Free Software Foundation, either version 3 of the
# License, or (at your option) any later version.
#
# This program is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the
# GNU Affero General Public License for more details.
#
# You should have received a copy of the GNU Affero General Public License
# along with this program.  If not, see <http://www.gnu.org/licenses/>.

"""
pelicanctl.bulk.progress
~~~~~~~~~~~~~~~~~~~~~~~~

Progress bar for bulk runs, fed from the executor's result callback.

:copyright: (C) 2024-2026 by pelicanctl contributors.
:license: AGPL 3, see LICENSE for more details.
"""
from __future__ import annotations

import os
import sys
import threading
from typing import IO, Any

from tqdm import tqdm

from pelicanctl.bulk.executor import Result


def _color_enabled(file: IO[str]) -> bool:
    if os.environ.get("NO_COLOR") is not None:
        return False
    return hasattr(file, "isatty") and file.isatty()


class ProgressBar:
    """Single tqdm bar counting finished operations.

    :param total: Number of operations in the batch.
    :param desc: Bar description, e.g. the action name.
    :param file: Writable stream for the bar (default: ``sys.stderr``).
    :param disable: Force the bar on or off. ``None`` enables it only
        when *file* is a TTY.
    """

    def __init__(
        self,
        total: int,
        desc: str = "Bulk",
        file: IO[str] | None = None,
        disable: bool | None = None,
    ):
        self._file = file or sys.stderr
        if disable is None:
            disable = not (hasattr(self._file, "isatty") and self._file.isatty())
        self._done = 0
        self._failed = 0
        self._lock = threading.Lock()
        kwargs: dict[str, Any] = {
            "total": total,
            "desc": desc,
            "unit": "server",
            "file": self._file,
            "dynamic_ncols": True,
            "leave": False,
            "disable": disable,
        }
        if _color_enabled(self._file):
            kwargs["colour"] = "green"
        self._bar: Any = tqdm(**kwargs)

    @property
    def count(self) -> int:
        return self._done

    def handle_result(self, result: Result) -> None:
        """Advance the bar by one. Safe to call from worker threads."""
        with self._lock:
            self._done += 1
            if not result.success:
                self._failed += 1
                self._bar.set_postfix(failed=self._failed, refresh=False)
            self._bar.update(1)

    def close(self) -> None:
        self._bar.close()

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()
