import logging
import os
import signal
import sys

import keyring
import pytest
import responses
from keyring.backend import KeyringBackend
from keyring.errors import PasswordDeleteError

from pelicanctl import get_session
from pelicanctl.cli import pc

ROOT_DIR = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
TEST_CONFIG = os.path.join(ROOT_DIR, 'tests/pelicanctl.ini')
BASE_URL = 'https://panel.example.com'
CLIENT_URL = BASE_URL + '/api/client'
APP_URL = BASE_URL + '/api/application'

CLIENT_TOKEN = 'ptlc_test_token'
ADMIN_TOKEN = 'ptla_test_token'

UUID_A = 'a1b2c3d4-0000-4000-8000-000000000001'
UUID_B = 'a1b2c3d4-0000-4000-8000-000000000002'
UUID_C = 'a1b2c3d4-0000-4000-8000-000000000003'


def pc_call(argv, expected_exit_code=0, config=TEST_CONFIG):
    # Use a test config for all `pelicanctl` tests.
    argv = list(argv)
    argv.insert(1, '--config')
    argv.insert(2, config)
    sys.argv = argv
    sigint = signal.getsignal(signal.SIGINT)
    try:
        pc.main()
    except SystemExit as exc:
        exit_code = exc.code if exc.code else 0
    else:
        exit_code = 0
    finally:
        signal.signal(signal.SIGINT, sigint)
    assert exit_code == expected_exit_code


def client_server(uuid, identifier, internal_id, name):
    return {
        'object': 'server',
        'attributes': {
            'uuid': uuid,
            'identifier': identifier,
            'internal_id': internal_id,
            'name': name,
            'node': 'node-1',
        },
    }


def app_server(server_id, uuid, name):
    return {
        'object': 'server',
        'attributes': {
            'id': server_id,
            'uuid': uuid,
            'identifier': uuid[:8],
            'name': name,
            'node': 1,
            'suspended': False,
        },
    }


CLIENT_SERVERS = {
    'object': 'list',
    'data': [
        client_server(UUID_A, UUID_A[:8], 1, 'survival'),
        client_server(UUID_B, UUID_B[:8], 2, 'creative'),
    ],
}

APP_SERVERS = {
    'object': 'list',
    'data': [
        app_server(1, UUID_A, 'survival'),
        app_server(2, UUID_B, 'creative'),
        app_server(3, UUID_C, 'lobby'),
    ],
}


class MemoryKeyring(KeyringBackend):
    """Keyring backend keeping passwords in a dict."""

    priority = 1

    def __init__(self):
        super().__init__()
        self.passwords = {}

    def get_password(self, service, username):
        return self.passwords.get((service, username))

    def set_password(self, service, username, password):
        self.passwords[(service, username)] = password

    def delete_password(self, service, username):
        try:
            del self.passwords[(service, username)]
        except KeyError:
            raise PasswordDeleteError(username)


@pytest.fixture(autouse=True)
def memory_keyring():
    previous = keyring.get_keyring()
    backend = MemoryKeyring()
    keyring.set_keyring(backend)
    yield backend
    keyring.set_keyring(previous)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch, tmp_path):
    for name in list(os.environ):
        if name.startswith('PELICANCTL_'):
            monkeypatch.delenv(name)
    monkeypatch.setenv('XDG_CONFIG_HOME', str(tmp_path / 'xdg'))
    monkeypatch.setenv('NO_COLOR', '1')


@pytest.fixture(autouse=True)
def reset_stream_logger():
    yield
    log = logging.getLogger('pelicanctl')
    for handler in list(log.handlers):
        if handler.get_name() == 'pelicanctl-stream':
            log.removeHandler(handler)


@pytest.fixture
def tokens(monkeypatch):
    monkeypatch.setenv('PELICANCTL_CLIENT_TOKEN', CLIENT_TOKEN)
    monkeypatch.setenv('PELICANCTL_ADMIN_TOKEN', ADMIN_TOKEN)


@pytest.fixture
def tmp_config(tmp_path):
    path = tmp_path / 'config.ini'
    path.write_text('[api]\nbase_url = https://panel.example.com\n')
    return str(path)


@pytest.fixture
def session(tokens):
    return get_session(config={'api': {'base_url': BASE_URL}},
                       http_adapter_kwargs={'max_retries': 0})


@pytest.fixture
def client_api(session):
    return session.client_api()


@pytest.fixture
def app_api(session):
    return session.application_api()


@pytest.fixture
def rsps():
    with responses.RequestsMock() as mocker:
        yield mocker


@pytest.fixture
def client_servers_mock(rsps):
    rsps.add(responses.GET, CLIENT_URL, json=CLIENT_SERVERS)
    return rsps


@pytest.fixture
def app_servers_mock(rsps):
    rsps.add(responses.GET, APP_URL + '/servers', json=APP_SERVERS)
    return rsps
