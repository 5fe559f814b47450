import io
import json

import pytest
import responses

from tests.conftest import CLIENT_URL, UUID_A, UUID_B, pc_call


def power_url(uuid):
    return f'{CLIENT_URL}/servers/{uuid}/power'


@pytest.fixture(autouse=True)
def _tokens(tokens):
    pass


def test_start_many(capsys):
    with responses.RequestsMock() as rsps:
        rsps.add(responses.POST, power_url(UUID_A), status=204)
        rsps.add(responses.POST, power_url(UUID_B), status=204)
        pc_call(['pelicanctl', 'client', 'power', 'start', f'{UUID_A},{UUID_B}'])
        bodies = [json.loads(c.request.body) for c in rsps.calls]
    assert bodies == [{'signal': 'start'}, {'signal': 'start'}]
    out, err = capsys.readouterr()
    assert out.splitlines() == [
        f'{UUID_A}: start',
        f'{UUID_B}: start',
        '',
        'Summary: 2 succeeded, 0 failed',
    ]


def test_partial_failure_is_fatal(capsys):
    with responses.RequestsMock() as rsps:
        rsps.add(responses.POST, power_url(UUID_A), status=204)
        rsps.add(responses.POST, power_url(UUID_B), status=409,
                 json={'errors': [{'code': 'ConflictHttpException',
                                   'detail': 'Server is installing.'}]})
        pc_call(['pelicanctl', 'client', 'power', 'restart', UUID_A, UUID_B],
                expected_exit_code=1)
    out, err = capsys.readouterr()
    assert f'{UUID_B}: Request error: Server is installing.' in out
    assert 'Summary: 1 succeeded, 1 failed' in out
    assert 'Error: 1 operation(s) failed' in err


def test_continue_on_error_succeeds(capsys):
    with responses.RequestsMock() as rsps:
        rsps.add(responses.POST, power_url(UUID_A), status=500)
        rsps.add(responses.POST, power_url(UUID_B), status=204)
        pc_call(['pelicanctl', 'client', 'power', 'restart', UUID_A, UUID_B,
                 '--continue-on-error'])
    out, err = capsys.readouterr()
    assert f'{UUID_A}: Server error: HTTP 500 Internal Server Error' in out


def test_all_uses_server_list(capsys):
    with responses.RequestsMock() as rsps:
        rsps.add(responses.GET, CLIENT_URL, json={'data': [
            {'attributes': {'uuid': UUID_A}}, {'attributes': {'uuid': UUID_B}}]})
        rsps.add(responses.POST, power_url(UUID_A), status=204)
        rsps.add(responses.POST, power_url(UUID_B), status=204)
        pc_call(['pelicanctl', 'client', 'power', 'start', '--all'])
    out, err = capsys.readouterr()
    assert 'Summary: 2 succeeded, 0 failed' in out


def test_from_file(capsys, tmp_path):
    servers = tmp_path / 'servers.txt'
    servers.write_text(f'# lobby servers\n{UUID_B}\n')
    with responses.RequestsMock() as rsps:
        rsps.add(responses.POST, power_url(UUID_B), status=204)
        pc_call(['pelicanctl', 'client', 'power', 'start', '--from-file', str(servers)])


def test_numeric_ids_are_resolved(capsys):
    with responses.RequestsMock() as rsps:
        rsps.add(responses.GET, CLIENT_URL, json={'data': [
            {'attributes': {'uuid': UUID_A, 'internal_id': 1}},
            {'attributes': {'uuid': UUID_B, 'internal_id': 2}}]})
        rsps.add(responses.POST, power_url(UUID_B), status=204)
        pc_call(['pelicanctl', 'client', 'power', 'start', '2'])
    out, err = capsys.readouterr()
    assert out.startswith('2: start')


def test_no_servers(capsys):
    pc_call(['pelicanctl', 'client', 'power', 'start'], expected_exit_code=1)
    out, err = capsys.readouterr()
    assert 'Error: no servers specified' in err


def test_dry_run(capsys):
    with responses.RequestsMock():
        pc_call(['pelicanctl', 'client', 'power', 'kill', UUID_A, UUID_B, '--dry-run'])
    out, err = capsys.readouterr()
    assert out.splitlines() == [
        'Dry run - would kill 2 server(s):',
        f'  - {UUID_A}',
        f'  - {UUID_B}',
    ]


def test_dry_run_json(capsys):
    with responses.RequestsMock():
        pc_call(['pelicanctl', 'client', 'power', 'stop', UUID_A, '--dry-run', '--json'])
    out, err = capsys.readouterr()
    assert json.loads(out) == {'dry_run': True, 'action': 'stop', 'servers': [UUID_A]}


def test_kill_declined(capsys, monkeypatch):
    monkeypatch.setattr('sys.stdin', io.StringIO('n\n'))
    with responses.RequestsMock():
        pc_call(['pelicanctl', 'client', 'power', 'kill', UUID_A])
    out, err = capsys.readouterr()
    assert 'This will kill 1 server(s). Continue? (y/N): ' in err
    assert 'Operation cancelled' in out


def test_kill_confirmed(capsys, monkeypatch):
    monkeypatch.setattr('sys.stdin', io.StringIO('yes\n'))
    with responses.RequestsMock() as rsps:
        rsps.add(responses.POST, power_url(UUID_A), status=204)
        pc_call(['pelicanctl', 'client', 'power', 'kill', UUID_A])


def test_stop_single_server_needs_no_confirmation(capsys):
    with responses.RequestsMock() as rsps:
        rsps.add(responses.POST, power_url(UUID_A), status=204)
        pc_call(['pelicanctl', 'client', 'power', 'stop', UUID_A])


def test_stop_many_with_yes(capsys):
    with responses.RequestsMock() as rsps:
        rsps.add(responses.POST, power_url(UUID_A), status=204)
        rsps.add(responses.POST, power_url(UUID_B), status=204)
        pc_call(['pelicanctl', 'client', 'power', 'stop', UUID_A, UUID_B, '-y'])


def test_fail_fast_skips(capsys):
    with responses.RequestsMock() as rsps:
        rsps.add(responses.POST, power_url(UUID_A), status=404)
        pc_call(['pelicanctl', 'client', 'power', 'start', UUID_A, UUID_B,
                 '--fail-fast', '--max-concurrency', '1'], expected_exit_code=1)
    out, err = capsys.readouterr()
    assert f'{UUID_B}: skipped due to previous error' in out
    assert 'Summary: 0 succeeded, 2 failed, 1 skipped' in out


def test_json_report(capsys):
    with responses.RequestsMock() as rsps:
        rsps.add(responses.POST, power_url(UUID_A), status=204)
        pc_call(['pelicanctl', '--json', 'client', 'power', 'restart', UUID_A])
    out, err = capsys.readouterr()
    assert json.loads(out) == {
        'results': [{'server_identifier': UUID_A, 'status': 'success', 'action': 'restart'}],
        'summary': {'total': 1, 'succeeded': 1, 'failed': 0, 'skipped': 0},
    }


def test_quiet(capsys):
    with responses.RequestsMock() as rsps:
        rsps.add(responses.POST, power_url(UUID_A), status=204)
        pc_call(['pelicanctl', '--quiet', 'client', 'power', 'start', UUID_A])
    out, err = capsys.readouterr()
    assert err == ''
