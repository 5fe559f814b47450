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
pelicanctl.bulk
~~~~~~~~~~~~~~~

Bulk operation executor for running one action across many servers.

:copyright: (C) 2024-2026 by pelicanctl contributors.
:license: AGPL 3, see LICENSE for more details.
"""

__all__ = [
    "BulkExecutor",
    "Operation",
    "Result",
    "Summary",
    "execute",
    "summarize",
]


def __getattr__(name):
    if name in __all__:
        from pelicanctl.bulk import executor  # noqa: PLC0415
        return getattr(executor, name)
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
