import logging

import keyring
import pytest
import requests
from keyring.errors import KeyringError

import pelicanctl.config
from pelicanctl.auth import (
    SERVICE_NAME,
    TokenAuth,
    TokenStore,
    WarningRegistry,
    prompt_api_url,
    prompt_token,
    token_env_var,
    validate_api_url,
)
from pelicanctl.exceptions import AuthenticationError, ConfigError


def test_token_auth_sets_headers():
    r = requests.Request('GET', 'https://panel.example.com/api/client',
                         auth=TokenAuth('secret')).prepare()
    assert r.headers['Authorization'] == 'Bearer secret'
    assert r.headers['Accept'] == 'application/json'


def test_token_env_var():
    assert token_env_var('client') == 'PELICANCTL_CLIENT_TOKEN'
    assert token_env_var('admin') == 'PELICANCTL_ADMIN_TOKEN'


def test_warning_registry():
    registry = WarningRegistry()
    assert registry.warn_once('a')
    assert not registry.warn_once('a')
    assert registry.warn_once('b')


def test_lookup_order(tmp_config, memory_keyring, monkeypatch):
    store = TokenStore(tmp_config)
    pelicanctl.config.write_config_file({'client': {'token': 'from-config'}}, tmp_config)
    assert store.get_token('client') == 'from-config'

    memory_keyring.set_password(SERVICE_NAME, 'client-token', 'from-keyring')
    assert store.get_token('client') == 'from-keyring'

    monkeypatch.setenv('PELICANCTL_CLIENT_TOKEN', 'from-env')
    assert store.get_token('client') == 'from-env'


def test_missing_token(tmp_config):
    with pytest.raises(AuthenticationError, match='no admin API token configured'):
        TokenStore(tmp_config).get_token('admin')


def test_invalid_api_type(tmp_config):
    with pytest.raises(ValueError):
        TokenStore(tmp_config).get_token('root')


def test_config_token_warns_once(tmp_config, caplog):
    pelicanctl.config.write_config_file({'admin': {'token': 'from-config'}}, tmp_config)
    store = TokenStore(tmp_config)
    with caplog.at_level(logging.WARNING, logger='pelicanctl'):
        store.get_token('admin')
        store.get_token('admin')
    warnings = [r for r in caplog.records if 'Token found in config file' in r.getMessage()]
    assert len(warnings) == 1
    assert "pelicanctl auth login admin" in warnings[0].getMessage()


def test_warnings_are_per_store(tmp_config, caplog):
    pelicanctl.config.write_config_file({'admin': {'token': 'from-config'}}, tmp_config)
    with caplog.at_level(logging.WARNING, logger='pelicanctl'):
        TokenStore(tmp_config).get_token('admin')
        TokenStore(tmp_config).get_token('admin')
    assert len([r for r in caplog.records if 'Token found' in r.getMessage()]) == 2


def test_set_token_prefers_keyring_and_clears_config(tmp_config, memory_keyring):
    pelicanctl.config.write_config_file({'client': {'token': 'old'}}, tmp_config)
    store = TokenStore(tmp_config)
    assert store.set_token('client', 'new') == 'keyring'
    assert memory_keyring.passwords[(SERVICE_NAME, 'client-token')] == 'new'
    assert pelicanctl.config.get_config_value(tmp_config, 'client', 'token') is None


def test_set_token_falls_back_to_config(tmp_config, monkeypatch):
    def broken(*args):
        raise KeyringError('locked')
    monkeypatch.setattr(keyring, 'set_password', broken)
    store = TokenStore(tmp_config)
    assert store.set_token('admin', 'tok') == 'config'
    assert pelicanctl.config.get_config_value(tmp_config, 'admin', 'token') == 'tok'


def test_keyring_read_errors_fall_through(tmp_config, monkeypatch):
    def broken(*args):
        raise KeyringError('locked')
    monkeypatch.setattr(keyring, 'get_password', broken)
    pelicanctl.config.write_config_file({'client': {'token': 'from-config'}}, tmp_config)
    assert TokenStore(tmp_config).get_token('client') == 'from-config'


def test_fail_backend_is_unavailable(tmp_config):
    from keyring.backends.fail import Keyring as FailKeyring
    keyring.set_keyring(FailKeyring())
    store = TokenStore(tmp_config)
    assert not store.keyring_available
    assert store.set_token('client', 'tok') == 'config'


def test_delete_token(tmp_config, memory_keyring):
    store = TokenStore(tmp_config)
    store.set_token('client', 'tok')
    pelicanctl.config.write_config_file({'client': {'token': 'tok'}}, tmp_config)
    store.delete_token('client')
    assert (SERVICE_NAME, 'client-token') not in memory_keyring.passwords
    assert pelicanctl.config.get_config_value(tmp_config, 'client', 'token') is None
    # Deleting again is not an error.
    store.delete_token('client')


def test_prompt_api_url():
    prompts = []

    def answer(text):
        prompts.append(text)
        return ' https://panel.example.com/ '
    assert prompt_api_url(input_func=answer) == 'https://panel.example.com'
    assert prompts == ['Panel URL: ']


def test_prompt_api_url_keeps_default():
    url = prompt_api_url('https://old.example.com', input_func=lambda text: '')
    assert url == 'https://old.example.com'


def test_prompt_api_url_rejects_bad_urls():
    with pytest.raises(ConfigError, match='cannot be empty'):
        prompt_api_url(input_func=lambda text: '')
    with pytest.raises(ConfigError, match='must start with http'):
        validate_api_url('panel.example.com')


def test_prompt_token():
    assert prompt_token('client', getpass_func=lambda text: ' tok\n') == 'tok'
    with pytest.raises(AuthenticationError):
        prompt_token('client', getpass_func=lambda text: '   ')
