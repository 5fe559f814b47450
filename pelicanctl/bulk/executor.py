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
pelicanctl.bulk.executor
~~~~~~~~~~~~~~~~~~~~~~~~

Concurrent bulk operation executor using ThreadPoolExecutor.

The :class:`BulkExecutor` runs the same kind of action against many
servers with bounded parallelism. Every input :class:`Operation` gets
exactly one :class:`Result`, stored at the operation's input index no
matter in which order the actions finish.

With ``fail_fast`` set, submission stops once a finished operation has
failed and the remaining operations are reported as skipped
(:class:`~pelicanctl.exceptions.OperationSkipped`). Work that was
already submitted is never cancelled, so a few operations submitted
around the failure may still run.

``continue_on_error`` does not change scheduling at all; it is carried
here so callers can ask :meth:`Summary.is_fatal` with the same policy.

:copyright: (C) 2024-2026 by pelicanctl contributors.
:license: AGPL 3, see LICENSE for more details.
"""
from __future__ import annotations

import threading
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Callable, Iterable

from pelicanctl.exceptions import OperationSkipped

DEFAULT_MAX_CONCURRENCY = 10


@dataclass(frozen=True)
class Operation:
    """A single unit of bulk work.

    :param id: Identifier of the target, usually a server UUID.
    :param action: Zero-argument callable doing the work. Returning
        normally means success, raising means failure. Its return
        value is ignored.
    :param name: Display label, defaults to ``id``.
    """

    id: str
    action: Callable[[], object] = field(repr=False, compare=False)
    name: str = ''

    def __post_init__(self):
        if not self.name:
            object.__setattr__(self, 'name', self.id)


@dataclass
class Result:
    """Outcome of one :class:`Operation`.

    :param operation: The operation this result belongs to.
    :param success: Whether the action returned without raising.
    :param error: The raised exception, or an
        :class:`~pelicanctl.exceptions.OperationSkipped` marker. Set
        if and only if ``success`` is false.
    """

    operation: Operation
    success: bool
    error: Exception | None = None

    def __post_init__(self):
        if self.success and self.error is not None:
            raise ValueError('a successful result cannot carry an error')
        if not self.success and self.error is None:
            raise ValueError('a failed result must carry an error')

    @property
    def skipped(self) -> bool:
        """``True`` if the operation was never attempted."""
        return isinstance(self.error, OperationSkipped)


@dataclass
class Summary:
    """Aggregate counts over a list of results.

    ``skipped`` counts the failed results that were never attempted,
    so it is always included in ``failed``.
    """

    total: int = 0
    succeeded: int = 0
    failed: int = 0
    skipped: int = 0

    def is_fatal(self, continue_on_error: bool) -> bool:
        """Return ``True`` if the batch outcome should fail the command."""
        return self.failed > 0 and not continue_on_error


def summarize(results: Iterable[Result]) -> Summary:
    """Fold *results* into a :class:`Summary`.

    The fold only counts, so any permutation of the same results gives
    the same summary.
    """
    summary = Summary()
    for r in results:
        summary.total += 1
        if r.success:
            summary.succeeded += 1
        else:
            summary.failed += 1
            if r.skipped:
                summary.skipped += 1
    return summary


class BulkExecutor:
    """Runs operations concurrently with bounded parallelism.

    :param max_concurrency: Maximum number of actions running at the
        same time. Zero or negative values fall back to
        :data:`DEFAULT_MAX_CONCURRENCY`.
    :param continue_on_error: Policy value handed back to callers via
        :meth:`is_fatal`. It never affects scheduling.
    :param fail_fast: Stop submitting new operations once a finished
        operation has failed.
    """

    def __init__(
        self,
        max_concurrency: int = DEFAULT_MAX_CONCURRENCY,
        continue_on_error: bool = False,
        fail_fast: bool = False,
    ) -> None:
        if max_concurrency is None or max_concurrency <= 0:
            max_concurrency = DEFAULT_MAX_CONCURRENCY
        self.max_concurrency = max_concurrency
        self.continue_on_error = continue_on_error
        self.fail_fast = fail_fast

    def is_fatal(self, summary: Summary) -> bool:
        return summary.is_fatal(self.continue_on_error)

    def execute(
        self,
        operations: Iterable[Operation],
        on_result: Callable[[Result], None] | None = None,
    ) -> list[Result]:
        """Run *operations* and return one result per operation.

        :param operations: Operations in the order they should be
            offered to the pool.
        :param on_result: Optional callback invoked once per result
            (executed or skipped), from the thread that produced it.
        :returns: Results index-aligned with *operations*.
        """
        operations = list(operations)
        if not operations:
            return []

        results: list[Result | None] = [None] * len(operations)
        lock = threading.Lock()
        state = {'has_error': False}
        slots = threading.Semaphore(self.max_concurrency)

        def should_stop() -> bool:
            if not self.fail_fast:
                return False
            with lock:
                return state['has_error']

        def run(idx: int, op: Operation) -> None:
            try:
                try:
                    op.action()
                except Exception as exc:
                    result = Result(op, False, exc)
                else:
                    result = Result(op, True)
                # The failure flag must be visible before the slot is
                # released so the next submission can observe it.
                with lock:
                    results[idx] = result
                    if not result.success:
                        state['has_error'] = True
            finally:
                slots.release()
            if on_result is not None:
                on_result(result)

        futures: list[Future] = []
        workers = min(self.max_concurrency, len(operations))
        with ThreadPoolExecutor(max_workers=workers,
                                thread_name_prefix='pelicanctl-bulk') as pool:
            for idx, op in enumerate(operations):
                if should_stop():
                    self._skip_remaining(operations, results, idx, lock, on_result)
                    break
                # Block until a worker slot is free.
                slots.acquire()
                if should_stop():
                    slots.release()
                    self._skip_remaining(operations, results, idx, lock, on_result)
                    break
                futures.append(pool.submit(run, idx, op))

        # Surface errors raised by the on_result callback.
        for fut in futures:
            fut.result()

        return results  # type: ignore[return-value]

    @staticmethod
    def _skip_remaining(operations, results, start, lock, on_result) -> None:
        """Mark every operation from *start* on as skipped."""
        skipped = [Result(op, False, OperationSkipped())
                   for op in operations[start:]]
        with lock:
            results[start:] = skipped
        if on_result is not None:
            for result in skipped:
                on_result(result)


def execute(
    operations: Iterable[Operation],
    max_concurrency: int = DEFAULT_MAX_CONCURRENCY,
    continue_on_error: bool = False,
    fail_fast: bool = False,
    on_result: Callable[[Result], None] | None = None,
) -> list[Result]:
    """Run *operations* with a one-off :class:`BulkExecutor`.

    Usage::

        >>> from pelicanctl.bulk import Operation, execute, summarize
        >>> ops = [Operation(sid, lambda: None) for sid in ('a', 'b')]
        >>> summarize(execute(ops, max_concurrency=2))
        Summary(total=2, succeeded=2, failed=0, skipped=0)
    """
    executor = BulkExecutor(max_concurrency, continue_on_error, fail_fast)
    return executor.execute(operations, on_result=on_result)
