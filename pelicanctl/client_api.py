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
pelicanctl.client_api
~~~~~~~~~~~~~~~~~~~~~

Wrapper for the panel's client API (``/api/client``), the API used by
server owners and subusers.

Servers can be addressed by UUID, short identifier, or by numeric id;
numeric ids are translated to UUIDs through the server list.

:copyright: (C) 2024-2026 by pelicanctl contributors.
:license: AGPL 3, see LICENSE for more details.
"""
from __future__ import annotations

import logging
from typing import IO
from urllib.parse import quote

from pelicanctl import utils
from pelicanctl.api_base import BaseAPI, check_power_signal
from pelicanctl.exceptions import PelicanError

logger = logging.getLogger(__name__)


class ClientAPI(BaseAPI):
    """Client API bound to a :class:`~pelicanctl.PanelSession`."""

    api_type = 'client'

    def list_servers(self) -> list[dict]:
        return utils.as_list(self._get(''))

    def resolve(self, identifier: str) -> str:
        """Translate a numeric server id into its UUID.

        Anything that is not purely numeric is returned unchanged.
        """
        if not utils.is_int_identifier(identifier):
            return identifier
        for server in self.cached_servers():
            for key in ('id', 'internal_id'):
                if str(utils.get_attr(server, key)) == identifier:
                    uuid = utils.server_uuid(server)
                    if uuid:
                        return uuid
        raise PelicanError(f'server with id {identifier} not found')

    def _server_path(self, identifier: str, suffix: str = '') -> str:
        return f'/servers/{quote(self.resolve(identifier), safe="")}{suffix}'

    def get_server(self, identifier: str) -> dict:
        return utils.as_object(self._get(self._server_path(identifier)))

    def get_resources(self, identifier: str) -> dict:
        return utils.as_object(self._get(self._server_path(identifier, '/resources')))

    def send_power(self, identifier: str, signal: str) -> None:
        check_power_signal(signal)
        self._post(self._server_path(identifier, '/power'), json={'signal': signal})

    def send_command(self, identifier: str, command: str) -> None:
        self._post(self._server_path(identifier, '/command'), json={'command': command})

    def list_backups(self, identifier: str) -> list[dict]:
        return utils.as_list(self._get(self._server_path(identifier, '/backups')))

    def create_backup(self,
                      identifier: str,
                      name: str | None = None,
                      ignored: str | None = None,
                      is_locked: bool = False) -> dict:
        body: dict = {}
        if name:
            body['name'] = name
        if ignored:
            body['ignored'] = ignored
        if is_locked:
            body['is_locked'] = True
        return utils.as_object(self._post(self._server_path(identifier, '/backups'),
                                          json=body))

    def list_databases(self, identifier: str) -> list[dict]:
        return utils.as_list(self._get(self._server_path(identifier, '/databases')))

    def list_files(self, identifier: str, directory: str = '/') -> list[dict]:
        return utils.as_list(self._get(self._server_path(identifier, '/files/list'),
                                       params={'directory': directory}))

    def download_file(self, identifier: str, file_path: str, fileobj: IO[bytes],
                      chunk_size: int = 1048576) -> int:
        """Download *file_path* from a server into *fileobj*.

        The panel either answers with a signed download URL, which is
        then fetched, or with the file contents directly.

        :returns: Number of bytes written.
        """
        r = self.session.request_api(self.api_type, 'GET',
                                     self._server_path(identifier, '/files/download'),
                                     params={'file': file_path}, stream=True)
        if 'json' in r.headers.get('Content-Type', ''):
            signed_url = utils.get_attr(r.json(), 'url')
            if not signed_url:
                raise PelicanError('download response did not contain a URL')
            logger.debug(f'downloading {file_path} from signed URL')
            r = self.session.get(signed_url, stream=True, timeout=self.session.timeout)
            r.raise_for_status()
        written = 0
        for chunk in r.iter_content(chunk_size=chunk_size):
            if chunk:
                fileobj.write(chunk)
                written += len(chunk)
        return written
