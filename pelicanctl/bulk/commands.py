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
pelicanctl.bulk.commands
~~~~~~~~~~~~~~~~~~~~~~~~

CLI-facing entry points for bulk operations.

Bridges the bulk flags (``--all``, ``--from-file``,
``--max-concurrency``, ``--continue-on-error``, ``--fail-fast``,
``--dry-run``, ``--yes``) with the executor, the progress bar and the
result report.

:copyright: (C) 2024-2026 by pelicanctl contributors.
:license: AGPL 3, see LICENSE for more details.
"""
from __future__ import annotations

import argparse
import logging
import sys
from dataclasses import dataclass
from typing import IO, Any, Callable, Mapping, Sequence

from pelicanctl.bulk.executor import (
    DEFAULT_MAX_CONCURRENCY,
    BulkExecutor,
    Operation,
    Result,
    Summary,
    summarize,
)
from pelicanctl.bulk.progress import ProgressBar
from pelicanctl.bulk.report import (
    build_report,
    check_summary,
    print_results,
    print_summary,
)
from pelicanctl.exceptions import PelicanError
from pelicanctl.output import Formatter
from pelicanctl.utils import read_identifier_file, split_identifiers

logger = logging.getLogger(__name__)


@dataclass
class BulkFlags:
    """Bulk options as parsed from the command line."""

    all: bool = False
    from_file: str | None = None
    max_concurrency: int = DEFAULT_MAX_CONCURRENCY
    continue_on_error: bool = False
    fail_fast: bool = False
    dry_run: bool = False
    yes: bool = False

    @classmethod
    def from_args(cls, args: argparse.Namespace) -> BulkFlags:
        return cls(
            all=getattr(args, 'all', False),
            from_file=getattr(args, 'from_file', None),
            max_concurrency=getattr(args, 'max_concurrency', DEFAULT_MAX_CONCURRENCY),
            continue_on_error=getattr(args, 'continue_on_error', False),
            fail_fast=getattr(args, 'fail_fast', False),
            dry_run=getattr(args, 'dry_run', False),
            yes=getattr(args, 'yes', False),
        )


def resolve_targets(
    identifiers: Sequence[str],
    flags: BulkFlags,
    list_all: Callable[[], list[str]],
) -> list[str]:
    """Build the target list.

    ``--all`` takes precedence over ``--from-file``, which takes
    precedence over positional identifiers. Positional identifiers may
    be comma separated.

    :param list_all: Returns every selectable server identifier.
    :raises PelicanError: If no targets remain.
    """
    if flags.all:
        targets = list_all()
    elif flags.from_file:
        try:
            targets = read_identifier_file(flags.from_file)
        except OSError as exc:
            raise PelicanError(f'failed to read {flags.from_file}: {exc}') from exc
    else:
        targets = split_identifiers(identifiers or [])
    if not targets:
        raise PelicanError('no servers specified')
    return targets


def needs_confirmation(action: str, count: int) -> bool:
    """Destructive actions ask first: ``kill`` and ``reinstall`` always,
    ``stop`` when it hits more than one server."""
    if action in ('kill', 'reinstall'):
        return True
    return action == 'stop' and count > 1


def confirm(action: str, count: int, stdin: IO[str] | None = None,
            stderr: IO[str] | None = None) -> bool:
    """Ask ``This will <action> <n> server(s). Continue? (y/N)``.

    Only ``y`` and ``yes`` (any case) confirm. End of input declines.
    """
    stdin = stdin or sys.stdin
    stderr = stderr or sys.stderr
    print(f'This will {action} {count} server(s). Continue? (y/N): ',
          end='', file=stderr, flush=True)
    answer = stdin.readline().strip().lower()
    return answer in ('y', 'yes')


def print_dry_run(formatter: Formatter, description: str, targets: Sequence[str]) -> None:
    if formatter.is_json:
        formatter.print_json({'dry_run': True, 'action': description,
                              'servers': list(targets)})
        return
    formatter.line(f'Dry run - would {description} {len(targets)} server(s):')
    for target in targets:
        formatter.line(f'  - {target}')


def prepare_targets(
    args: argparse.Namespace,
    formatter: Formatter,
    list_all: Callable[[], list[str]],
    action: str,
    description: str | None = None,
) -> list[str] | None:
    """Resolve targets and handle ``--dry-run`` and confirmation.

    :param action: Action verb used for confirmation, e.g. ``'kill'``.
    :param description: Text for the dry-run line, defaults to *action*.
    :returns: The targets to run, or ``None`` if nothing should run.
    """
    flags = BulkFlags.from_args(args)
    targets = resolve_targets(getattr(args, 'servers', []), flags, list_all)
    if flags.dry_run:
        print_dry_run(formatter, description or action, targets)
        return None
    if not flags.yes and needs_confirmation(action, len(targets)):
        if not confirm(action, len(targets)):
            formatter.info('Operation cancelled')
            return None
    return targets


def build_operations(
    targets: Sequence[str],
    make_action: Callable[[str], Callable[[], object]],
) -> list[Operation]:
    """Build one operation per target.

    *make_action* is called with each target, so every action is bound
    to its own identifier.
    """
    return [Operation(target, make_action(target)) for target in targets]


def run_bulk(
    args: argparse.Namespace,
    formatter: Formatter,
    targets: Sequence[str],
    make_action: Callable[[str], Callable[[], object]],
    action_name: str,
    describe: str,
    always_fatal: bool = False,
    extra: Mapping[str, Any] | None = None,
    per_result: Callable[[Result], Mapping[str, Any]] | None = None,
    noun: str = 'operation(s)',
    render: Callable[[list[Result], Summary], None] | None = None,
) -> list[Result]:
    """Run *make_action* against every target and report the outcome.

    :param action_name: Short name used for logs and the progress bar.
    :param describe: Text shown after the identifier on success.
    :param always_fatal: Fail the command on any failure, ignoring
        ``--continue-on-error``.
    :param extra: Fields added to every JSON result entry.
    :param per_result: Extra JSON fields for a single result.
    :param render: Replaces the default per-result lines, summary
        and JSON report.
    :raises BulkOperationError: If the outcome is fatal.
    """
    flags = BulkFlags.from_args(args)
    operations = build_operations(targets, make_action)
    executor = BulkExecutor(flags.max_concurrency, flags.continue_on_error, flags.fail_fast)
    logger.info(f'{action_name}: {len(operations)} server(s), '
                f'max concurrency {executor.max_concurrency}')

    disable_bar = True if (formatter.is_json or formatter.quiet) else None
    with ProgressBar(len(operations), desc=action_name, disable=disable_bar) as bar:
        results = executor.execute(operations, on_result=bar.handle_result)

    summary = summarize(results)
    for r in results:
        if not r.success and not r.skipped:
            logger.debug(f'{action_name} failed for {r.operation.id}: {r.error!r}')
    logger.info(f'{action_name}: {summary.succeeded} succeeded, {summary.failed} failed')

    if render is not None:
        render(results, summary)
    elif formatter.is_json:
        formatter.print_json(build_report(results, summary, extra, per_result))
    else:
        print_results(formatter, results, describe)
        print_summary(formatter, summary)

    check_summary(summary, flags.continue_on_error, always_fatal, noun)
    return results
