import io
import json

import pytest
import responses

from tests.conftest import APP_URL, pc_call


@pytest.fixture(autouse=True)
def _tokens(tokens):
    pass


def test_node_list(capsys):
    with responses.RequestsMock() as rsps:
        rsps.add(responses.GET, f'{APP_URL}/nodes', json={'object': 'list', 'data': [
            {'object': 'node', 'attributes': {'id': 1, 'name': 'eu-1',
                                              'fqdn': 'eu-1.example.com'}}]})
        pc_call(['pelicanctl', 'admin', 'node', 'list'])
    out, err = capsys.readouterr()
    assert 'FQDN' in out
    assert 'eu-1.example.com' in out


def test_user_view_json(capsys):
    user = {'object': 'user', 'attributes': {'id': 7, 'username': 'steve'}}
    with responses.RequestsMock() as rsps:
        rsps.add(responses.GET, f'{APP_URL}/users/7', json=user)
        pc_call(['pelicanctl', 'admin', 'user', 'view', '7', '--json'])
    out, err = capsys.readouterr()
    assert json.loads(out) == user


def test_user_create_from_stdin(capsys, monkeypatch):
    monkeypatch.setattr('sys.stdin', io.StringIO('{"username": "alex", "email": "a@x.io"}'))
    with responses.RequestsMock() as rsps:
        rsps.add(responses.POST, f'{APP_URL}/users',
                 json={'object': 'user', 'attributes': {'id': 8, 'username': 'alex'}})
        pc_call(['pelicanctl', 'admin', 'user', 'create'])
        assert json.loads(rsps.calls[0].request.body) == {'username': 'alex',
                                                          'email': 'a@x.io'}
    out, err = capsys.readouterr()
    assert 'User created successfully' in out


def test_node_update(capsys):
    with responses.RequestsMock() as rsps:
        rsps.add(responses.PATCH, f'{APP_URL}/nodes/1',
                 json={'object': 'node', 'attributes': {'id': 1, 'name': 'eu-2'}})
        pc_call(['pelicanctl', 'admin', 'node', 'update', '1', '--data', '{"name": "eu-2"}'])
    out, err = capsys.readouterr()
    assert 'Node updated successfully' in out


def test_node_delete_missing(capsys):
    with responses.RequestsMock() as rsps:
        rsps.add(responses.DELETE, f'{APP_URL}/nodes/9', status=404)
        pc_call(['pelicanctl', 'admin', 'node', 'delete', '9'], expected_exit_code=1)
    out, err = capsys.readouterr()
    assert 'Error: Resource not found' in err
