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
pelicanctl.api_base
~~~~~~~~~~~~~~~~~~~

Shared plumbing for :class:`~pelicanctl.ClientAPI` and
:class:`~pelicanctl.ApplicationAPI`.

:copyright: (C) 2024-2026 by pelicanctl contributors.
:license: AGPL 3, see LICENSE for more details.
"""
from __future__ import annotations

import logging
import threading
from typing import Any

from pelicanctl import utils
from pelicanctl.exceptions import PelicanError

logger = logging.getLogger(__name__)

POWER_SIGNALS = ('start', 'stop', 'restart', 'kill')


def check_power_signal(signal: str) -> str:
    if signal not in POWER_SIGNALS:
        raise PelicanError(f"invalid power signal {signal!r}, "
                           f"must be one of: {', '.join(POWER_SIGNALS)}")
    return signal


class BaseAPI:
    """Base class binding a session to one of the panel APIs.

    Identifier translation needs the server list. It is fetched once
    and cached behind a lock, so a bulk run over many servers costs a
    single listing request.
    """

    api_type = ''

    def __init__(self, session):
        self.session = session
        self._servers: list[dict] | None = None
        self._servers_lock = threading.Lock()

    def _get(self, path: str = '', **kwargs) -> Any:
        return self.session.request_json(self.api_type, 'GET', path, **kwargs)

    def _post(self, path: str, **kwargs) -> Any:
        return self.session.request_json(self.api_type, 'POST', path, **kwargs)

    def _patch(self, path: str, **kwargs) -> Any:
        return self.session.request_json(self.api_type, 'PATCH', path, **kwargs)

    def _delete(self, path: str, **kwargs) -> Any:
        return self.session.request_json(self.api_type, 'DELETE', path, **kwargs)

    def list_servers(self) -> list[dict]:
        raise NotImplementedError

    def cached_servers(self, refresh: bool = False) -> list[dict]:
        """Return the server list, fetching it on first use."""
        with self._servers_lock:
            if self._servers is None or refresh:
                self._servers = self.list_servers()
                logger.debug(f'cached {len(self._servers)} servers')
            return self._servers

    def list_server_uuids(self, refresh: bool = False) -> list[str]:
        """UUIDs of all servers, used to expand ``--all``.

        :raises PelicanError: If the panel has no servers.
        """
        servers = self.cached_servers(refresh)
        uuids = [u for u in (utils.server_uuid(s) for s in servers) if u]
        if not uuids:
            raise PelicanError('no servers found')
        return uuids
