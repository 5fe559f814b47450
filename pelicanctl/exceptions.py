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
pelicanctl.exceptions
~~~~~~~~~~~~~~~~~~~~~

:copyright: (C) 2024-2026 by pelicanctl contributors.
:license: AGPL 3, see LICENSE for more details.
"""
from __future__ import annotations

import requests

LOGIN_TIP = "Tip: Run 'pelicanctl auth login' to configure your API token"


class PelicanError(Exception):
    """Base class for pelicanctl errors."""


class ConfigError(PelicanError):
    """Missing or unreadable configuration."""


class AuthenticationError(PelicanError):
    """No usable API token."""


class APIError(PelicanError):
    """The panel answered with a non-success status code.

    :param status_code: HTTP status code of the response.
    :param message: Human readable message extracted from the body.
    :param details: Raw response body, if any.
    """

    def __init__(self, status_code: int, message: str, details: str = ''):
        self.status_code = status_code
        self.message = message
        self.details = details
        super().__init__(f'API error {status_code}: {message}')

    @property
    def is_not_found(self) -> bool:
        return self.status_code == 404

    @property
    def is_unauthorized(self) -> bool:
        return self.status_code in (401, 403)

    @property
    def is_server_error(self) -> bool:
        return self.status_code >= 500

    @classmethod
    def from_response(cls, response: requests.Response) -> APIError:
        """Build an :class:`APIError` from a failed response.

        The message is taken from the first ``errors[].detail`` (or
        ``code``), then ``message``, then ``error``; failing that the raw
        body, and finally ``HTTP <code> <reason>``.
        """
        body = response.text or ''
        message = ''
        try:
            data = response.json()
        except ValueError:
            data = None
        if isinstance(data, dict):
            errors = data.get('errors')
            if isinstance(errors, list) and errors and isinstance(errors[0], dict):
                message = errors[0].get('detail') or errors[0].get('code') or ''
            if not message and isinstance(data.get('message'), str):
                message = data['message']
            if not message and isinstance(data.get('error'), str):
                message = data['error']
        if not message:
            message = body.strip()
        if not message:
            message = f'HTTP {response.status_code} {response.reason or ""}'.strip()
        return cls(response.status_code, message, body)


class OperationSkipped(PelicanError):
    """Marks a bulk operation that was never attempted because fail-fast
    stopped submission after an earlier failure."""

    def __init__(self, *args, **kwargs):
        default_message = 'skipped due to previous error'
        if args or kwargs:
            super().__init__(*args, **kwargs)
        else:
            super().__init__(default_message)


class BulkOperationError(PelicanError):
    """A bulk command finished with failures that make it fatal."""

    def __init__(self, failed: int, noun: str = 'operation(s)'):
        self.failed = failed
        super().__init__(f'{failed} {noun} failed')


def handle_error(exc: BaseException) -> str:
    """Return the user-facing text for *exc*.

    :param exc: Any exception raised while running a command.
    :returns: A message suitable for printing after ``Error:``.
    """
    if isinstance(exc, APIError):
        if exc.is_not_found:
            return f'Resource not found: {exc.message}'
        if exc.is_unauthorized:
            return f'Authentication failed: {exc.message}\n  {LOGIN_TIP}'
        if exc.is_server_error:
            return (f'Server error: {exc.message}\n'
                    '  The Pelican panel may be experiencing issues')
        return f'Request error: {exc.message}'
    if isinstance(exc, AuthenticationError):
        return f'{exc}\n  {LOGIN_TIP}'
    if isinstance(exc, requests.exceptions.ConnectionError):
        return f'Could not connect to the panel: {exc}'
    if isinstance(exc, requests.exceptions.Timeout):
        return f'Request to the panel timed out: {exc}'
    return str(exc)
