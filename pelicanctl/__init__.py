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
Pelicanctl Library
~~~~~~~~~~~~~~~~~~

Pelicanctl is a python interface to the client and application APIs
of a Pelican game-server panel.

Usage::

    >>> from pelicanctl import get_client_api
    >>> api = get_client_api()
    >>> [s['attributes']['name'] for s in api.list_servers()]
    ['minecraft-1', 'valheim']

:copyright: (C) 2024-2026 by pelicanctl contributors.
:license: AGPL 3, see LICENSE for more details.
"""

__title__ = 'pelicanctl'
__license__ = 'AGPL 3'
__copyright__ = 'Copyright (C) 2024-2026 pelicanctl contributors'

from .__version__ import __version__  # isort:skip
from pelicanctl.api import (
    get_application_api,
    get_client_api,
    get_session,
    login,
    logout,
)
from pelicanctl.application_api import ApplicationAPI
from pelicanctl.bulk.executor import (
    BulkExecutor,
    Operation,
    Result,
    Summary,
    execute,
    summarize,
)
from pelicanctl.client_api import ClientAPI
from pelicanctl.session import PanelSession

__all__ = [
    '__version__',

    # Classes.
    'PanelSession',
    'ClientAPI',
    'ApplicationAPI',
    'BulkExecutor',
    'Operation',
    'Result',
    'Summary',

    # API.
    'get_session',
    'get_client_api',
    'get_application_api',
    'login',
    'logout',
    'execute',
    'summarize',
]


# Set default logging handler to avoid "No handler found" warnings.
import logging

log = logging.getLogger(__name__)
log.addHandler(logging.NullHandler())
