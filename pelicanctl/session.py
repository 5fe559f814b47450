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
pelicanctl.session
~~~~~~~~~~~~~~~~~~

This module provides a PanelSession object to manage and persist
settings across the pelicanctl package.

:copyright: (C) 2024-2026 by pelicanctl contributors.
:license: AGPL 3, see LICENSE for more details.
"""
from __future__ import annotations

import json
import locale
import logging
import platform
import sys
import threading
from typing import IO, Any, Mapping, MutableMapping
from urllib.parse import urlparse

import requests.sessions
from requests import Response
from requests.adapters import HTTPAdapter
from requests.utils import default_headers
from urllib3 import Retry

from pelicanctl import __version__
from pelicanctl.application_api import ApplicationAPI
from pelicanctl.auth import TokenAuth, TokenStore
from pelicanctl.client_api import ClientAPI
from pelicanctl.config import get_config
from pelicanctl.exceptions import APIError, ConfigError

logger = logging.getLogger(__name__)

API_PREFIXES = {
    'client': '/api/client',
    'admin': '/api/application',
}

DEFAULT_TIMEOUT = 30

_LOG_LEVELS = {
    'CRITICAL': 50,
    'ERROR': 40,
    'WARNING': 30,
    'INFO': 20,
    'DEBUG': 10,
    'NOTSET': 0,
}

_STREAM_HANDLER_NAME = 'pelicanctl-stream'


class JSONLogFormatter(logging.Formatter):
    """Formats log records as one JSON object per line."""

    def format(self, record):
        entry = {
            'time': self.formatTime(record),
            'level': record.levelname,
            'logger': record.name,
            'msg': record.getMessage(),
        }
        if record.exc_info:
            entry['exc_info'] = self.formatException(record.exc_info)
        return json.dumps(entry)


class PanelSession(requests.sessions.Session):
    """The :class:`PanelSession <pelicanctl.PanelSession>` object
    collects together configuration, credentials and the HTTP plumbing
    shared by :class:`~pelicanctl.ClientAPI` and
    :class:`~pelicanctl.ApplicationAPI`. It is subclassed from
    :class:`requests.Session <requests.Session>`.

    A single session is used concurrently by bulk operations; it holds
    no per-request state.

    Usage::

        >>> from pelicanctl import PanelSession
        >>> s = PanelSession({'api': {'base_url': 'https://panel.example.com'}})
        >>> s.client_api().list_servers()
        [...]
    """

    def __init__(self,
                 config: Mapping | None = None,
                 config_file: str = "",
                 debug: bool = False,
                 http_adapter_kwargs: MutableMapping | None = None,
                 token_store: TokenStore | None = None):
        """Initialize :class:`PanelSession <PanelSession>` object with config.

        :param config: A config dict used for initializing the
                       :class:`PanelSession <PanelSession>` object.

        :param config_file: Path to config file used for initializing the
                            :class:`PanelSession <PanelSession>` object.

        :param http_adapter_kwargs: Keyword arguments used to initialize the
                                    :class:`requests.adapters.HTTPAdapter <HTTPAdapter>`
                                    object.

        :param token_store: Token store used to look up API tokens.

        :returns: :class:`PanelSession` object.
        """
        super().__init__()
        debug = bool(debug)

        self.config = get_config(config, config_file)
        self.config_file = config_file
        api_config = self.config.get('api', {})
        self.base_url: str = (api_config.get('base_url') or '').rstrip('/')
        self.timeout = float(api_config.get('timeout', DEFAULT_TIMEOUT))
        self.token_store = token_store or TokenStore(config_file or None)
        self.http_adapter_kwargs: MutableMapping = http_adapter_kwargs or {}
        self._tokens: dict[str, str] = {}
        self._tokens_lock = threading.Lock()

        self.headers = default_headers()  # type: ignore[assignment]
        self.headers.update({'User-Agent': self._get_user_agent_string()})
        self.headers.update({'Accept': 'application/json'})

        self.mount_http_adapter()

        logging_config = self.config.get('logging', {})
        if logging_config.get('level'):
            self.set_file_logger(logging_config.get('level', 'NOTSET'),
                                 logging_config.get('file', 'pelicanctl.log'))
            if debug:
                self.set_file_logger(logging_config.get('level', 'NOTSET'),
                                     logging_config.get('file', 'pelicanctl.log'),
                                     'urllib3')

    def _get_user_agent_string(self) -> str:
        """Generate a User-Agent string to be sent with every request."""
        uname = platform.uname()
        try:
            lang = locale.getlocale()[0][:2]  # type: ignore
        except Exception:
            lang = ''
        py_version = '{}.{}.{}'.format(*sys.version_info)
        return (f'pelicanctl/{__version__} '
                f'({uname[0]} {uname[-1]}; N; {lang}) '
                f'Python/{py_version}')

    def mount_http_adapter(self, max_retries: int | None = None,
                           status_forcelist: list | None = None) -> None:
        """Mount an HTTP adapter with retries on the panel URL.

        Only idempotent methods are retried; power signals and backup
        creation are sent once.

        :param max_retries: The number of times to retry a failed request.
                            This can also be an `urllib3.Retry` object.

        :param status_forcelist: A list of status codes (as int's) to retry on.
        """
        if max_retries is None:
            max_retries = self.http_adapter_kwargs.get('max_retries', 3)

        status_forcelist = status_forcelist or [502, 503, 504]
        if max_retries and isinstance(max_retries, (int, float)):
            self.http_adapter_kwargs['max_retries'] = Retry(total=max_retries,
                                connect=max_retries,
                                read=max_retries,
                                redirect=False,
                                allowed_methods=Retry.DEFAULT_ALLOWED_METHODS,
                                status_forcelist=status_forcelist,
                                raise_on_status=False,
                                backoff_factor=1)
        else:
            self.http_adapter_kwargs['max_retries'] = max_retries

        max_retries_adapter = HTTPAdapter(**self.http_adapter_kwargs)
        if self.base_url:
            parsed = urlparse(self.base_url)
            self.mount(f'{parsed.scheme}://{parsed.netloc}', max_retries_adapter)
        else:
            self.mount('https://', max_retries_adapter)
            self.mount('http://', max_retries_adapter)

    def set_file_logger(
        self,
        log_level: str,
        path: str,
        logger_name: str = 'pelicanctl'
    ) -> None:
        """Convenience function to quickly configure any level of
        logging to a file.

        :param log_level: A log level as specified in the `logging` module.

        :param path: Path to the log file. The file will be created if it doesn't already
                     exist.

        :param logger_name: The name of the logger.
        """
        log_format = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'

        _log = logging.getLogger(logger_name)
        _log.setLevel(logging.DEBUG)

        fh = logging.FileHandler(path, encoding='utf-8')
        fh.setLevel(_LOG_LEVELS[log_level.upper()])

        formatter = logging.Formatter(log_format)
        fh.setFormatter(formatter)

        _log.addHandler(fh)

    def set_stream_logger(
        self,
        log_level: str,
        json_format: bool = False,
        stream: IO[str] | None = None,
        logger_name: str = 'pelicanctl'
    ) -> None:
        """Log to *stream* (``sys.stderr`` by default).

        Calling this again replaces the previously installed stream
        handler.

        :param log_level: A log level as specified in the `logging` module.

        :param json_format: Emit one JSON object per record.
        """
        _log = logging.getLogger(logger_name)
        _log.setLevel(logging.DEBUG)
        for handler in list(_log.handlers):
            if handler.get_name() == _STREAM_HANDLER_NAME:
                _log.removeHandler(handler)

        sh = logging.StreamHandler(stream or sys.stderr)
        sh.set_name(_STREAM_HANDLER_NAME)
        sh.setLevel(_LOG_LEVELS[log_level.upper()])
        if json_format:
            sh.setFormatter(JSONLogFormatter())
        else:
            sh.setFormatter(logging.Formatter('%(levelname)s: %(message)s'))
        _log.addHandler(sh)

    def get_token(self, api_type: str) -> str:
        """Return the API token for *api_type*, cached for the session."""
        with self._tokens_lock:
            if api_type not in self._tokens:
                self._tokens[api_type] = self.token_store.get_token(api_type)
            return self._tokens[api_type]

    def api_url(self, api_type: str, path: str = '') -> str:
        if not self.base_url:
            raise ConfigError(
                'panel URL is not configured. Set PELICANCTL_API_BASE_URL '
                "or run 'pelicanctl auth login'")
        return f'{self.base_url}{API_PREFIXES[api_type]}{path}'

    def request_api(self,
                    api_type: str,
                    method: str,
                    path: str = '',
                    **request_kwargs) -> Response:
        """Send an authenticated request to the client or application API.

        :param api_type: ``'client'`` or ``'admin'``.

        :param method: HTTP method.

        :param path: Path below the API prefix, e.g. ``'/servers/abc'``.

        :raises APIError: If the panel answers with a status >= 400.
        """
        url = self.api_url(api_type, path)
        request_kwargs.setdefault('timeout', self.timeout)
        token_auth = TokenAuth(self.get_token(api_type))
        r = self.request(method, url, auth=token_auth, **request_kwargs)
        logger.debug(f'{method} {url} -> {r.status_code}')
        if r.status_code >= 400:
            error = APIError.from_response(r)
            logger.debug(f'request failed: {error}')
            raise error
        return r

    def request_json(self, api_type: str, method: str, path: str = '',
                     **request_kwargs) -> Any:
        """Like :meth:`request_api` but returns the decoded body, or
        ``None`` for empty responses."""
        r = self.request_api(api_type, method, path, **request_kwargs)
        if r.status_code == 204 or not r.content:
            return None
        return r.json()

    def client_api(self) -> ClientAPI:
        return ClientAPI(self)

    def application_api(self) -> ApplicationAPI:
        return ApplicationAPI(self)
