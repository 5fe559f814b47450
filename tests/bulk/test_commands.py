import argparse
import io
import json
import threading

import pytest

from pelicanctl.bulk.commands import (
    BulkFlags,
    build_operations,
    confirm,
    needs_confirmation,
    prepare_targets,
    print_dry_run,
    resolve_targets,
    run_bulk,
)
from pelicanctl.exceptions import BulkOperationError, PelicanError
from pelicanctl.output import Formatter


def bulk_args(**kwargs):
    defaults = dict(servers=[], all=False, from_file=None, max_concurrency=10,
                    continue_on_error=False, fail_fast=False, dry_run=False, yes=False)
    defaults.update(kwargs)
    return argparse.Namespace(**defaults)


def list_all():
    return ['all-1', 'all-2']


def test_flags_from_args_tolerates_missing_attributes():
    flags = BulkFlags.from_args(argparse.Namespace())
    assert flags == BulkFlags()
    flags = BulkFlags.from_args(bulk_args(max_concurrency=3, fail_fast=True))
    assert flags.max_concurrency == 3
    assert flags.fail_fast


def test_resolve_targets_splits_positional_identifiers():
    targets = resolve_targets(['a,b', ' c '], BulkFlags(), list_all)
    assert targets == ['a', 'b', 'c']


def test_resolve_targets_keeps_duplicates():
    assert resolve_targets(['a', 'a'], BulkFlags(), list_all) == ['a', 'a']


def test_resolve_targets_all_wins(tmp_path):
    path = tmp_path / 'servers.txt'
    path.write_text('f-1\n')
    flags = BulkFlags(all=True, from_file=str(path))
    assert resolve_targets(['x'], flags, list_all) == ['all-1', 'all-2']


def test_resolve_targets_from_file(tmp_path):
    path = tmp_path / 'servers.txt'
    path.write_text('# production\nf-1\n\n  f-2  \n')
    targets = resolve_targets(['x'], BulkFlags(from_file=str(path)), list_all)
    assert targets == ['f-1', 'f-2']


def test_resolve_targets_missing_file(tmp_path):
    flags = BulkFlags(from_file=str(tmp_path / 'missing.txt'))
    with pytest.raises(PelicanError, match='failed to read'):
        resolve_targets([], flags, list_all)


def test_resolve_targets_empty():
    with pytest.raises(PelicanError, match='no servers specified'):
        resolve_targets([], BulkFlags(), list_all)
    with pytest.raises(PelicanError, match='no servers specified'):
        resolve_targets([' , '], BulkFlags(), list_all)


@pytest.mark.parametrize('action,count,expected', [
    ('kill', 1, True),
    ('reinstall', 1, True),
    ('stop', 1, False),
    ('stop', 2, True),
    ('start', 5, False),
    ('restart', 5, False),
])
def test_needs_confirmation(action, count, expected):
    assert needs_confirmation(action, count) is expected


@pytest.mark.parametrize('answer,expected', [
    ('y\n', True),
    ('YES\n', True),
    ('n\n', False),
    ('\n', False),
    ('', False),
    ('yep\n', False),
])
def test_confirm(answer, expected):
    stderr = io.StringIO()
    assert confirm('kill', 3, stdin=io.StringIO(answer), stderr=stderr) is expected
    assert stderr.getvalue() == 'This will kill 3 server(s). Continue? (y/N): '


def test_print_dry_run_text():
    out = io.StringIO()
    print_dry_run(Formatter(stream=out), 'restart', ['a', 'b'])
    assert out.getvalue().splitlines() == [
        'Dry run - would restart 2 server(s):',
        '  - a',
        '  - b',
    ]


def test_print_dry_run_json():
    out = io.StringIO()
    print_dry_run(Formatter('json', stream=out), 'restart', ['a'])
    assert json.loads(out.getvalue()) == {'dry_run': True, 'action': 'restart',
                                          'servers': ['a']}


def test_prepare_targets_dry_run_skips_confirmation(monkeypatch):
    def fail_confirm(*args, **kwargs):
        raise AssertionError('confirmation must not be asked on a dry run')
    monkeypatch.setattr('pelicanctl.bulk.commands.confirm', fail_confirm)
    out = io.StringIO()
    args = bulk_args(servers=['a'], dry_run=True)
    assert prepare_targets(args, Formatter(stream=out), list_all, 'kill') is None
    assert 'Dry run - would kill 1 server(s):' in out.getvalue()


def test_prepare_targets_declined(monkeypatch):
    monkeypatch.setattr('pelicanctl.bulk.commands.confirm', lambda action, count: False)
    out = io.StringIO()
    args = bulk_args(servers=['a', 'b'])
    assert prepare_targets(args, Formatter(stream=out), list_all, 'stop') is None
    assert 'Operation cancelled' in out.getvalue()


def test_prepare_targets_yes(monkeypatch):
    monkeypatch.setattr('pelicanctl.bulk.commands.confirm', lambda action, count: False)
    args = bulk_args(servers=['a', 'b'], yes=True)
    assert prepare_targets(args, Formatter(stream=io.StringIO()), list_all, 'stop') == ['a', 'b']


def test_build_operations_binds_each_target():
    seen = []
    ops = build_operations(['a', 'b', 'c'], lambda t: lambda: seen.append(t))
    for o in ops:
        o.action()
    assert [o.id for o in ops] == ['a', 'b', 'c']
    assert seen == ['a', 'b', 'c']


def make_action(failing=()):
    lock = threading.Lock()
    calls = []

    def factory(target):
        def run():
            with lock:
                calls.append(target)
            if target in failing:
                raise PelicanError(f'{target} exploded')
        return run
    factory.calls = calls
    return factory


def test_run_bulk_text_output():
    out = io.StringIO()
    factory = make_action()
    results = run_bulk(bulk_args(), Formatter(stream=out), ['a', 'b'], factory,
                       action_name='start', describe='start')
    assert [r.success for r in results] == [True, True]
    assert sorted(factory.calls) == ['a', 'b']
    assert out.getvalue().splitlines() == [
        'a: start',
        'b: start',
        '',
        'Summary: 2 succeeded, 0 failed',
    ]


def test_run_bulk_failure_is_fatal_after_report():
    out = io.StringIO()
    with pytest.raises(BulkOperationError):
        run_bulk(bulk_args(), Formatter(stream=out), ['a', 'b'], make_action({'b'}),
                 action_name='start', describe='start')
    assert 'b: b exploded' in out.getvalue()
    assert 'Summary: 1 succeeded, 1 failed' in out.getvalue()


def test_run_bulk_continue_on_error():
    results = run_bulk(bulk_args(continue_on_error=True), Formatter(stream=io.StringIO()),
                       ['a', 'b'], make_action({'b'}),
                       action_name='start', describe='start')
    assert [r.success for r in results] == [True, False]


def test_run_bulk_always_fatal_ignores_continue_on_error():
    with pytest.raises(BulkOperationError):
        run_bulk(bulk_args(continue_on_error=True), Formatter(stream=io.StringIO()),
                 ['a', 'b'], make_action({'b'}),
                 action_name='suspend', describe='suspended', always_fatal=True)


def test_run_bulk_json_report():
    out = io.StringIO()
    run_bulk(bulk_args(continue_on_error=True), Formatter('json', stream=out),
             ['a', 'b'], make_action({'a'}),
             action_name='command', describe='command sent', extra={'command': 'say hi'})
    report = json.loads(out.getvalue())
    assert report['summary'] == {'total': 2, 'succeeded': 1, 'failed': 1, 'skipped': 0}
    assert report['results'][0] == {'server_identifier': 'a', 'status': 'error',
                                    'error': 'a exploded', 'command': 'say hi'}
    assert report['results'][1] == {'server_identifier': 'b', 'status': 'success',
                                    'command': 'say hi'}


def test_run_bulk_fail_fast_skips_the_rest():
    out = io.StringIO()
    args = bulk_args(fail_fast=True, max_concurrency=1)
    factory = make_action({'a'})
    with pytest.raises(BulkOperationError):
        run_bulk(args, Formatter(stream=out), ['a', 'b', 'c'], factory,
                 action_name='start', describe='start')
    assert factory.calls == ['a']
    assert 'Summary: 0 succeeded, 3 failed, 2 skipped' in out.getvalue()


def test_run_bulk_custom_render():
    rendered = []
    out = io.StringIO()
    run_bulk(bulk_args(), Formatter(stream=out), ['a'], make_action(),
             action_name='health', describe='healthy',
             render=lambda results, summary: rendered.append((results, summary)))
    assert out.getvalue() == ''
    assert rendered[0][1].succeeded == 1
