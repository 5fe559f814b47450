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
pelicanctl.bulk.report
~~~~~~~~~~~~~~~~~~~~~~

Per-operation and aggregate reporting of bulk results.

:copyright: (C) 2024-2026 by pelicanctl contributors.
:license: AGPL 3, see LICENSE for more details.
"""
from __future__ import annotations

from typing import Any, Callable, Mapping, Sequence

from pelicanctl.bulk.executor import Result, Summary
from pelicanctl.exceptions import BulkOperationError, handle_error
from pelicanctl.output import Formatter


def error_text(result: Result) -> str:
    """First line of the user-facing error text of a failed result."""
    if result.error is None:
        return ''
    lines = handle_error(result.error).splitlines()
    return lines[0] if lines else type(result.error).__name__


def print_results(formatter: Formatter, results: Sequence[Result], describe: str) -> None:
    """Write one line per result, in input order.

    :param describe: Text shown after the identifier on success, e.g.
        ``"start signal sent"``.
    """
    for r in results:
        if r.success:
            formatter.line(f'{r.operation.name}: {describe}')
        else:
            formatter.line(f'{r.operation.name}: {error_text(r)}')


def build_report(
    results: Sequence[Result],
    summary: Summary,
    extra: Mapping[str, Any] | None = None,
    per_result: Callable[[Result], Mapping[str, Any]] | None = None,
) -> dict:
    """Build the JSON document for a bulk run.

    :param extra: Fields added to every result entry.
    :param per_result: Callable returning additional fields for one
        result.
    """
    entries = []
    for r in results:
        entry: dict[str, Any] = {
            'server_identifier': r.operation.id,
            'status': 'success' if r.success else 'error',
        }
        if not r.success:
            entry['error'] = error_text(r)
        if extra:
            entry.update(extra)
        if per_result is not None:
            entry.update(per_result(r))
        entries.append(entry)
    return {
        'results': entries,
        'summary': {
            'total': summary.total,
            'succeeded': summary.succeeded,
            'failed': summary.failed,
            'skipped': summary.skipped,
        },
    }


def print_summary(formatter: Formatter, summary: Summary) -> None:
    text = f'Summary: {summary.succeeded} succeeded, {summary.failed} failed'
    if summary.skipped:
        text += f', {summary.skipped} skipped'
    formatter.line()
    formatter.line(text)


def check_summary(
    summary: Summary,
    continue_on_error: bool,
    always_fatal: bool = False,
    noun: str = 'operation(s)',
) -> None:
    """Raise if the batch outcome is fatal.

    :param always_fatal: Treat any failure as fatal, whatever
        *continue_on_error* says.
    :raises BulkOperationError: With the number of failed operations.
    """
    if summary.is_fatal(continue_on_error) or (always_fatal and summary.failed):
        raise BulkOperationError(summary.failed, noun)
