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
pelicanctl.output
~~~~~~~~~~~~~~~~~

Rendering of API responses for the ``pelicanctl`` CLI.

Lists are rendered as Rich tables, single objects as an indented
key/value view, and everything can be switched to JSON with
``--json``. Status lines (success, warning, ...) go to stderr in JSON
mode so that stdout stays parseable.

:copyright: (C) 2024-2026 by pelicanctl contributors.
:license: AGPL 3, see LICENSE for more details.
"""
from __future__ import annotations

import json
import os
from typing import IO, Any

from rich import box
from rich.console import Console
from rich.table import Table

FORMAT_TABLE = 'table'
FORMAT_JSON = 'json'

# resource type -> [(header, field path), ...]
TABLE_CONFIGS: dict[str, list[tuple[str, str]]] = {
    'client.server': [
        ('ID', 'identifier'),
        ('UUID', 'uuid'),
        ('Name', 'name'),
        ('Node', 'node'),
    ],
    'client.resources': [
        ('State', 'current_state'),
        ('Memory', 'resources.memory_bytes'),
        ('CPU', 'resources.cpu_absolute'),
        ('Disk', 'resources.disk_bytes'),
    ],
    'client.backup': [
        ('UUID', 'uuid'),
        ('Name', 'name'),
        ('Size', 'bytes'),
        ('Created', 'created_at'),
    ],
    'client.database': [
        ('ID', 'id'),
        ('Name', 'name'),
        ('Username', 'username'),
    ],
    'client.file': [
        ('Name', 'name'),
        ('File', 'is_file'),
        ('Size', 'size'),
        ('Modified', 'modified_at'),
    ],
    'admin.server': [
        ('ID', 'id'),
        ('UUID', 'uuid'),
        ('Name', 'name'),
        ('Node', 'node'),
        ('Suspended', 'suspended'),
    ],
    'admin.node': [
        ('ID', 'id'),
        ('Name', 'name'),
        ('FQDN', 'fqdn'),
    ],
    'admin.user': [
        ('ID', 'id'),
        ('Username', 'username'),
        ('Email', 'email'),
        ('Admin', 'root_admin'),
    ],
    'admin.backup': [
        ('UUID', 'uuid'),
        ('Name', 'name'),
        ('Successful', 'is_successful'),
        ('Created', 'created_at'),
    ],
}

MISSING = '-'
_MAX_AUTO_COLUMNS = 8
_missing = object()


def get_field(item: Any, path: str) -> Any:
    """Look up a dotted *path* in *item*.

    Panel objects usually nest their fields under ``attributes``, so the
    lookup falls back to ``attributes.<path>``. Returns :data:`MISSING`
    when neither exists.
    """
    for candidate in (path, f'attributes.{path}'):
        value = _walk(item, candidate.split('.'))
        if value is not _missing and value is not None:
            return value
    return MISSING


def _walk(item: Any, keys: list[str]) -> Any:
    for key in keys:
        if not isinstance(item, dict) or key not in item:
            return _missing
        item = item[key]
    return item


def format_value(value: Any) -> str:
    if isinstance(value, bool):
        return 'yes' if value else 'no'
    if isinstance(value, (dict, list)):
        return json.dumps(value, separators=(',', ':'))
    return str(value)


def humanize_key(key: str) -> str:
    """``current_state`` -> ``Current State``."""
    words = key.replace('-', '_').split('_')
    return ' '.join(w.upper() if w in ('id', 'uuid', 'ip', 'cpu', 'url') else w.capitalize()
                    for w in words if w)


def _flatten(item: Any) -> dict:
    """Merge ``attributes`` into the top level of a panel object."""
    if not isinstance(item, dict):
        return {'value': item}
    flat = {k: v for k, v in item.items() if k not in ('attributes', 'object')}
    attributes = item.get('attributes')
    if isinstance(attributes, dict):
        for k, v in attributes.items():
            if k != 'relationships':
                flat.setdefault(k, v)
    return flat


class Formatter:
    """Writes command output as tables or JSON.

    :param fmt: ``'table'`` or ``'json'``.
    :param stream: Output stream (default ``sys.stdout`` at write time).
    :param err_stream: Stream for errors, and for all status lines in
        JSON mode (default ``sys.stderr`` at write time).
    :param quiet: Suppress ``info`` and ``success`` lines.
    """

    def __init__(
        self,
        fmt: str = FORMAT_TABLE,
        stream: IO[str] | None = None,
        err_stream: IO[str] | None = None,
        quiet: bool = False,
    ) -> None:
        if fmt not in (FORMAT_TABLE, FORMAT_JSON):
            raise ValueError(f'unknown output format: {fmt}')
        self.fmt = fmt
        self.quiet = quiet
        no_color = os.environ.get('NO_COLOR') is not None
        self._out = Console(file=stream, highlight=False, no_color=no_color)
        if err_stream is None:
            self._err = Console(stderr=True, highlight=False, no_color=no_color)
        else:
            self._err = Console(file=err_stream, highlight=False, no_color=no_color)

    @property
    def is_json(self) -> bool:
        return self.fmt == FORMAT_JSON

    @property
    def stream(self) -> IO[str]:
        return self._out.file

    # -- data ----------------------------------------------------------

    def print(self, data: Any) -> None:
        """Render *data* according to the output format."""
        if self.is_json:
            self.print_json(data)
        elif isinstance(data, str):
            self.line(data)
        elif isinstance(data, list):
            self._print_auto_table(data)
        elif isinstance(data, dict):
            self._print_detail(data)
        else:
            self.line(format_value(data))

    def print_json(self, data: Any) -> None:
        self._out.out(json.dumps(data, indent=2, default=str), highlight=False)

    def print_with_config(self, data: Any, resource_type: str) -> None:
        """Render *data* using the columns registered for *resource_type*.

        Single objects and unknown resource types fall back to
        :meth:`print`.
        """
        columns = TABLE_CONFIGS.get(resource_type)
        if self.is_json or columns is None or not isinstance(data, list):
            self.print(data)
            return
        if not data:
            self.info('No results found')
            return
        headers = [header for header, _ in columns]
        rows = [[format_value(get_field(item, path)) for _, path in columns]
                for item in data]
        self.print_table(headers, rows)

    def print_table(self, headers: list[str], rows: list[list[Any]]) -> None:
        table = Table(box=box.SIMPLE_HEAD, show_edge=False, pad_edge=False)
        for header in headers:
            table.add_column(header, overflow='fold')
        for row in rows:
            table.add_row(*(format_value(cell) for cell in row))
        self._out.print(table)

    def line(self, text: str = '') -> None:
        """Write *text* unstyled to the output stream."""
        self._out.out(text, highlight=False)

    def _print_auto_table(self, items: list) -> None:
        if not items:
            self.info('No results found')
            return
        flat = [_flatten(item) for item in items]
        headers: list[str] = []
        for key, value in flat[0].items():
            if isinstance(value, (dict, list)):
                continue
            headers.append(key)
            if len(headers) == _MAX_AUTO_COLUMNS:
                break
        rows = [[item.get(h, MISSING) for h in headers] for item in flat]
        self.print_table([humanize_key(h) for h in headers], rows)

    def _print_detail(self, data: dict, indent: int = 0) -> None:
        flat = _flatten(data) if indent == 0 else data
        pad = '  ' * indent
        width = max((len(humanize_key(k)) for k in flat), default=0) + 1
        for key, value in flat.items():
            label = f'{humanize_key(key)}:'.ljust(width)
            if isinstance(value, dict) and value:
                self.line(f'{pad}{label}')
                self._print_detail(value, indent + 1)
            elif isinstance(value, list) and value and all(isinstance(v, dict) for v in value):
                self.line(f'{pad}{label}')
                for entry in value:
                    self._print_detail(_flatten(entry), indent + 1)
                    self.line()
            else:
                shown = MISSING if value is None or value == '' else format_value(value)
                self.line(f'{pad}{label} {shown}')

    # -- status lines --------------------------------------------------

    def _status_console(self) -> Console:
        return self._err if self.is_json else self._out

    def success(self, message: str) -> None:
        if not self.quiet:
            self._status_console().print(f'✓ {message}', style='green',
                                         markup=False, soft_wrap=True)

    def info(self, message: str) -> None:
        if not self.quiet:
            self._status_console().print(message, style='cyan', markup=False, soft_wrap=True)

    def warning(self, message: str) -> None:
        self._err.print(f'⚠ {message}', style='yellow', markup=False, soft_wrap=True)

    def error(self, message: str) -> None:
        self._err.print(f'✗ {message}', style='red', markup=False, soft_wrap=True)
