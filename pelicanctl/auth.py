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
pelicanctl.auth
~~~~~~~~~~~~~~~

This module contains the panel authentication handler for Requests and
the token store backed by the system keyring.

Tokens are looked up in this order:

1. ``PELICANCTL_CLIENT_TOKEN`` / ``PELICANCTL_ADMIN_TOKEN``
2. the system keyring (service ``pelicanctl``)
3. the ``token`` key of the ``[client]`` / ``[admin]`` config section

:copyright: (C) 2024-2026 by pelicanctl contributors.
:license: AGPL 3, see LICENSE for more details.
"""
from __future__ import annotations

import getpass
import logging
import os
import threading
from typing import Callable

import keyring
import keyring.errors
from requests.auth import AuthBase

from pelicanctl import config as config_module
from pelicanctl.exceptions import AuthenticationError, ConfigError

logger = logging.getLogger(__name__)

SERVICE_NAME = 'pelicanctl'
API_TYPES = ('client', 'admin')


class TokenAuth(AuthBase):
    """Attaches a panel API bearer token to the given Request object."""
    def __init__(self, token):
        self.token = token

    def __call__(self, r):
        r.headers['Authorization'] = f'Bearer {self.token}'
        r.headers['Accept'] = 'application/json'
        return r


class WarningRegistry:
    """Remembers which warnings were already shown.

    Owned by whoever emits the warnings; safe to share between threads.
    """

    def __init__(self):
        self._seen: set[str] = set()
        self._lock = threading.Lock()

    def warn_once(self, key: str) -> bool:
        """Return ``True`` the first time *key* is seen, else ``False``."""
        with self._lock:
            if key in self._seen:
                return False
            self._seen.add(key)
            return True


def _check_api_type(api_type: str) -> None:
    if api_type not in API_TYPES:
        raise ValueError(f'invalid API type {api_type!r}, expected one of {API_TYPES}')


def token_env_var(api_type: str) -> str:
    return f'PELICANCTL_{api_type.upper()}_TOKEN'


class TokenStore:
    """Reads and writes API tokens.

    :param config_file: Config file used for the plain-text fallback.
    :param warnings: Registry used to warn only once per process about
        tokens found in the config file.
    """

    def __init__(self, config_file=None, warnings: WarningRegistry | None = None):
        self.config_file = config_file
        self.warnings = warnings or WarningRegistry()
        self.keyring_available = True
        try:
            backend = keyring.get_keyring()
            backend_name = f'{type(backend).__module__}.{type(backend).__name__}'
            if 'fail' in backend_name.lower() or 'null' in backend_name.lower():
                self.keyring_available = False
                logger.debug(f'keyring backend is non-functional: {backend_name}')
        except keyring.errors.KeyringError as exc:
            self.keyring_available = False
            logger.debug(f'keyring initialization failed: {exc}')

    @staticmethod
    def _key(api_type: str) -> str:
        return f'{api_type}-token'

    def get_token(self, api_type: str) -> str:
        """Return the token for *api_type*.

        :raises AuthenticationError: If no token is configured.
        """
        _check_api_type(api_type)
        token = os.environ.get(token_env_var(api_type))
        if token:
            return token

        if self.keyring_available:
            try:
                token = keyring.get_password(SERVICE_NAME, self._key(api_type))
            except keyring.errors.KeyringError as exc:
                logger.debug(f'failed to read token from keyring: {exc}')
                token = None
            if token:
                return token

        token = config_module.get_config_value(self.config_file, api_type, 'token')
        if token:
            if self.warnings.warn_once(f'config-token-{api_type}'):
                logger.warning(
                    'Token found in config file. Consider migrating to system '
                    'keyring for better security.\n'
                    f"  Run 'pelicanctl auth login {api_type}' to migrate.")
            return token

        raise AuthenticationError(f'no {api_type} API token configured')

    def set_token(self, api_type: str, token: str) -> str:
        """Store *token*, preferring the keyring.

        :returns: ``'keyring'`` or ``'config'``, where the token ended up.
        """
        _check_api_type(api_type)
        if self.keyring_available:
            try:
                keyring.set_password(SERVICE_NAME, self._key(api_type), token)
            except keyring.errors.KeyringError as exc:
                logger.warning(f'could not store token in system keyring: {exc}')
            else:
                self._clear_config_token(api_type)
                return 'keyring'
        logger.warning('storing token in config file; it is readable by anyone '
                       'with access to that file')
        config_module.write_config_file({api_type: {'token': token}}, self.config_file)
        return 'config'

    def delete_token(self, api_type: str) -> None:
        _check_api_type(api_type)
        if self.keyring_available:
            try:
                keyring.delete_password(SERVICE_NAME, self._key(api_type))
            except keyring.errors.PasswordDeleteError:
                logger.debug(f'no {api_type} token in keyring')
            except keyring.errors.KeyringError as exc:
                logger.warning(f'could not remove token from system keyring: {exc}')
        self._clear_config_token(api_type)

    def _clear_config_token(self, api_type: str) -> None:
        if config_module.get_config_value(self.config_file, api_type, 'token'):
            config_module.write_config_file({api_type: {'token': None}}, self.config_file)


def prompt_api_url(default: str = '', input_func: Callable[[str], str] = input) -> str:
    """Ask for the panel base URL; an empty answer keeps *default*."""
    suffix = f' [{default}]' if default else ''
    url = input_func(f'Panel URL{suffix}: ').strip() or default
    return validate_api_url(url)


def validate_api_url(url: str) -> str:
    """Return *url* without trailing slash.

    :raises ConfigError: If *url* is empty or not an http(s) URL.
    """
    url = url.strip()
    if not url:
        raise ConfigError('panel URL cannot be empty')
    if not url.startswith(('http://', 'https://')):
        raise ConfigError(f'invalid panel URL {url!r}, must start with http:// or https://')
    return url.rstrip('/')


def prompt_token(api_type: str, getpass_func: Callable[[str], str] = getpass.getpass) -> str:
    _check_api_type(api_type)
    token = getpass_func(f'Enter {api_type} API token: ').strip()
    if not token:
        raise AuthenticationError('token cannot be empty')
    return token
