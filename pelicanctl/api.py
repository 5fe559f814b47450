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
pelicanctl.api
~~~~~~~~~~~~~~

This module implements the pelicanctl API.

:copyright: (C) 2024-2026 by pelicanctl contributors.
:license: AGPL 3, see LICENSE for more details.
"""
from __future__ import annotations

from typing import Mapping, MutableMapping

from pelicanctl import auth, session
from pelicanctl import config as config_module
from pelicanctl.application_api import ApplicationAPI
from pelicanctl.client_api import ClientAPI


def get_session(
    config: Mapping | None = None,
    config_file: str | None = None,
    debug: bool = False,
    http_adapter_kwargs: MutableMapping | None = None,
    token_store: auth.TokenStore | None = None,
) -> session.PanelSession:
    """Return a new :class:`PanelSession` object. The :class:`PanelSession`
    object is the main interface to the ``pelicanctl`` lib. It allows you to
    persist certain parameters across requests.

    :param config: A dictionary used to configure your session.

    :param config_file: A path to a config file used to configure your session.

    :param debug: Also log ``urllib3`` activity to the log file.

    :param http_adapter_kwargs: Keyword arguments that
                                :py:class:`requests.adapters.HTTPAdapter` takes.

    :param token_store: Token store used to look up API tokens.

    :returns: To persist certain parameters across requests.

    Usage:

        >>> from pelicanctl import get_session
        >>> config = {'api': {'base_url': 'https://panel.example.com'}}
        >>> s = get_session(config)
        >>> s.base_url
        'https://panel.example.com'
    """
    return session.PanelSession(config, config_file or "", debug, http_adapter_kwargs,
                                token_store)


def get_client_api(
    config: Mapping | None = None,
    config_file: str | None = None,
    http_adapter_kwargs: MutableMapping | None = None,
) -> ClientAPI:
    """Return a :class:`ClientAPI` bound to a new session."""
    s = get_session(config, config_file, http_adapter_kwargs=http_adapter_kwargs)
    return s.client_api()


def get_application_api(
    config: Mapping | None = None,
    config_file: str | None = None,
    http_adapter_kwargs: MutableMapping | None = None,
) -> ApplicationAPI:
    """Return an :class:`ApplicationAPI` bound to a new session."""
    s = get_session(config, config_file, http_adapter_kwargs=http_adapter_kwargs)
    return s.application_api()


def login(
    api_type: str,
    token: str = "",
    base_url: str = "",
    config_file: str = "",
    token_store: auth.TokenStore | None = None,
) -> str:
    """Store an API token and, if given, the panel URL.

    Prompts for the URL when none is configured yet, and for the token
    when *token* is empty.

    :param api_type: ``'client'`` or ``'admin'``.

    :returns: Where the token was stored, ``'keyring'`` or ``'config'``.

    Usage:
        >>> from pelicanctl import login
        >>> login('client', base_url='https://panel.example.com')
        Enter client API token:
        'keyring'
    """
    config_file = config_file or None
    current_url = config_module.get_config(config_file=config_file).get('api', {}).get('base_url')
    if base_url:
        base_url = auth.validate_api_url(base_url)
    elif not current_url:
        base_url = auth.prompt_api_url()
    if base_url and base_url != current_url:
        config_module.write_config_file({'api': {'base_url': base_url}}, config_file)

    token = token or auth.prompt_token(api_type)
    store = token_store or auth.TokenStore(config_file)
    return store.set_token(api_type, token)


def logout(api_type: str, config_file: str = "",
           token_store: auth.TokenStore | None = None) -> None:
    """Remove the stored token for *api_type*."""
    store = token_store or auth.TokenStore(config_file or None)
    store.delete_token(api_type)
