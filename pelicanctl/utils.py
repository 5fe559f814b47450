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
pelicanctl.utils
~~~~~~~~~~~~~~~~

This module provides utility functions for the pelicanctl library.

:copyright: (C) 2024-2026 by pelicanctl contributors.
:license: AGPL 3, see LICENSE for more details.
"""
from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Iterable

from pelicanctl.exceptions import PelicanError

# Keys the panel wraps collections and objects in.
WRAPPER_KEYS = ('data', 'servers', 'backups', 'databases', 'files')


def deep_update(d: dict, u: Mapping) -> dict:
    for k, v in u.items():
        if isinstance(v, Mapping):
            r = deep_update(d.get(k, {}), v)
            d[k] = r
        else:
            d[k] = u[k]
    return d


def unwrap_response(body: Any) -> Any:
    """Strip the panel's envelope from a decoded JSON body.

    ``{"object": "list", "data": [...]}`` becomes ``[...]``. Bodies
    without a known wrapper key are returned unchanged.
    """
    if isinstance(body, dict):
        for key in WRAPPER_KEYS:
            if key in body:
                return body[key]
    return body


def as_list(body: Any) -> list:
    data = unwrap_response(body)
    if data is None:
        return []
    if isinstance(data, list):
        return data
    return [data]


def as_object(body: Any) -> dict:
    data = unwrap_response(body)
    if isinstance(data, list):
        if len(data) == 1 and isinstance(data[0], dict):
            return data[0]
        raise PelicanError(f'expected a single object, got a list of {len(data)}')
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise PelicanError(f'unexpected response shape: {type(data).__name__}')
    return data


def get_attr(item: Any, key: str) -> Any:
    """Return *key* from *item* or from its ``attributes`` mapping."""
    if not isinstance(item, dict):
        return None
    value = item.get(key)
    if value is None and isinstance(item.get('attributes'), dict):
        value = item['attributes'].get(key)
    return value


def server_uuid(item: Any) -> str | None:
    """UUID of a server object, falling back to its ``id``."""
    for key in ('uuid', 'id'):
        value = get_attr(item, key)
        if value not in (None, ''):
            return str(value)
    return None


def is_int_identifier(identifier: str) -> bool:
    return identifier.isdigit()


def split_identifiers(values: Iterable[str]) -> list[str]:
    """Split comma separated identifiers and drop empty entries.

    >>> split_identifiers(['a, b', 'c', ' ,'])
    ['a', 'b', 'c']
    """
    out = []
    for value in values:
        for part in value.split(','):
            part = part.strip()
            if part:
                out.append(part)
    return out


def read_identifier_file(path: str) -> list[str]:
    """Read one identifier per line. Blank lines and ``#`` comments are
    skipped."""
    with open(path, encoding='utf-8') as fh:
        return [line.strip() for line in fh
                if line.strip() and not line.strip().startswith('#')]


def parse_backup_pair(value: str) -> tuple[str, str]:
    """Parse ``server,backup-uuid`` into a tuple."""
    parts = [p.strip() for p in value.split(',')]
    if len(parts) != 2 or not all(parts):
        raise PelicanError(f'invalid backup pair {value!r}, expected server,backup-uuid')
    return parts[0], parts[1]


def read_backup_pairs(path: str) -> list[tuple[str, str]]:
    """Read a pairs file as written by ``admin backup create --save-pairs``."""
    pairs = []
    with open(path, encoding='utf-8') as fh:
        for lineno, line in enumerate(fh, start=1):
            line = line.strip()
            if not line or line.startswith('#'):
                continue
            try:
                pairs.append(parse_backup_pair(line))
            except PelicanError as exc:
                raise PelicanError(f'{path}:{lineno}: {exc}') from exc
    return pairs
