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
pelicanctl.application_api
~~~~~~~~~~~~~~~~~~~~~~~~~~

Wrapper for the panel's administrative application API
(``/api/application``).

The application API addresses servers by numeric id. UUIDs and short
identifiers are translated through the server list.

:copyright: (C) 2024-2026 by pelicanctl contributors.
:license: AGPL 3, see LICENSE for more details.
"""
from __future__ import annotations

import logging
from typing import Mapping
from urllib.parse import quote

from pelicanctl import utils
from pelicanctl.api_base import BaseAPI, check_power_signal
from pelicanctl.exceptions import PelicanError

logger = logging.getLogger(__name__)


class ApplicationAPI(BaseAPI):
    """Application API bound to a :class:`~pelicanctl.PanelSession`."""

    api_type = 'admin'

    # -- generic resources ---------------------------------------------

    def list_resource(self, resource: str) -> list[dict]:
        return utils.as_list(self._get(f'/{resource}'))

    def get_resource(self, resource: str, resource_id: str) -> dict:
        return utils.as_object(self._get(f'/{resource}/{quote(str(resource_id), safe="")}'))

    def create_resource(self, resource: str, data: Mapping) -> dict:
        return utils.as_object(self._post(f'/{resource}', json=dict(data)))

    def update_resource(self, resource: str, resource_id: str, data: Mapping) -> dict:
        return utils.as_object(self._patch(f'/{resource}/{quote(str(resource_id), safe="")}',
                                           json=dict(data)))

    def delete_resource(self, resource: str, resource_id: str) -> None:
        self._delete(f'/{resource}/{quote(str(resource_id), safe="")}')

    def list_nodes(self) -> list[dict]:
        return self.list_resource('nodes')

    def get_node(self, node_id: str) -> dict:
        return self.get_resource('nodes', node_id)

    def list_users(self) -> list[dict]:
        return self.list_resource('users')

    def get_user(self, user_id: str) -> dict:
        return self.get_resource('users', user_id)

    # -- servers -------------------------------------------------------

    def list_servers(self) -> list[dict]:
        return self.list_resource('servers')

    def resolve(self, identifier: str) -> str:
        """Translate a server UUID or short identifier into its numeric id.

        Numeric identifiers are returned unchanged.
        """
        if utils.is_int_identifier(identifier):
            return identifier
        for server in self.cached_servers():
            for key in ('uuid', 'identifier'):
                if utils.get_attr(server, key) == identifier:
                    server_id = utils.get_attr(server, 'id')
                    if server_id is not None:
                        return str(server_id)
        raise PelicanError(f'server {identifier} not found')

    def _server_path(self, identifier: str, suffix: str = '') -> str:
        return f'/servers/{self.resolve(identifier)}{suffix}'

    def get_server(self, identifier: str) -> dict:
        return utils.as_object(self._get(self._server_path(identifier)))

    def create_server(self, data: Mapping) -> dict:
        return self.create_resource('servers', data)

    def delete_server(self, identifier: str, force: bool = False) -> None:
        self._delete(self._server_path(identifier, '/force' if force else ''))

    def suspend_server(self, identifier: str) -> None:
        self._post(self._server_path(identifier, '/suspend'))

    def unsuspend_server(self, identifier: str) -> None:
        self._post(self._server_path(identifier, '/unsuspend'))

    def reinstall_server(self, identifier: str) -> None:
        self._post(self._server_path(identifier, '/reinstall'))

    def send_power(self, identifier: str, signal: str) -> None:
        check_power_signal(signal)
        self._post(self._server_path(identifier, '/power'), json={'signal': signal})

    def send_command(self, identifier: str, command: str) -> None:
        self._post(self._server_path(identifier, '/command'), json={'command': command})

    def get_health(self, identifier: str, since: str | None = None,
                   window: int | None = None) -> dict:
        params: dict = {}
        if since:
            params['since'] = since
        if window is not None:
            params['window'] = window
        return utils.as_object(self._get(self._server_path(identifier, '/health'),
                                         params=params))

    # -- backups -------------------------------------------------------

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

    def get_backup(self, identifier: str, backup_uuid: str) -> dict:
        path = self._server_path(identifier, f'/backups/{quote(backup_uuid, safe="")}')
        return utils.as_object(self._get(path))

    def delete_backup(self, identifier: str, backup_uuid: str) -> None:
        self._delete(self._server_path(identifier, f'/backups/{quote(backup_uuid, safe="")}'))
