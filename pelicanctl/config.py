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
pelicanctl.config
~~~~~~~~~~~~~~~~~

Reading and writing of the ``pelicanctl`` INI configuration file.

Example file::

    [api]
    base_url = https://panel.example.com

    [logging]
    level = INFO
    file = pelicanctl.log

API tokens may also live in ``[client]`` and ``[admin]`` sections, but
the system keyring is preferred (see :mod:`pelicanctl.auth`).

:copyright: (C) 2024-2026 by pelicanctl contributors.
:license: AGPL 3, see LICENSE for more details.
"""
from __future__ import annotations

import configparser
import os
from collections import defaultdict
from configparser import RawConfigParser
from typing import Mapping

from pelicanctl.exceptions import ConfigError
from pelicanctl.utils import deep_update

CONFIG_ENV_VAR = 'PELICANCTL_CONFIG_FILE'

# (section, key) -> environment variable overriding it.
ENV_OVERRIDES = {
    ('api', 'base_url'): 'PELICANCTL_API_BASE_URL',
    ('client', 'token'): 'PELICANCTL_CLIENT_TOKEN',
    ('admin', 'token'): 'PELICANCTL_ADMIN_TOKEN',
}


def get_xdg_config_file() -> str:
    xdg_config_home = os.environ.get('XDG_CONFIG_HOME')
    if not xdg_config_home or not os.path.isabs(xdg_config_home):
        xdg_config_home = os.path.join(os.path.expanduser('~'), '.config')
    return os.path.join(xdg_config_home, 'pelicanctl', 'config.ini')


def parse_config_file(config_file=None):
    """Locate and read the config file.

    :returns: A ``(config_file, is_xdg, config)`` tuple, where ``config``
        is a :class:`~configparser.RawConfigParser` (empty if the file
        does not exist yet).
    """
    config = RawConfigParser()

    is_xdg = False
    if not config_file:
        xdg_config_file = get_xdg_config_file()
        config_file = os.environ.get(CONFIG_ENV_VAR) or xdg_config_file
        if config_file == xdg_config_file:
            is_xdg = True
    try:
        config.read(config_file, encoding='utf-8')
    except configparser.Error as exc:
        raise ConfigError(f'unable to parse config file {config_file}: {exc}') from exc

    for section in ('api', 'client', 'admin'):
        if not config.has_section(section):
            config.add_section(section)

    return (config_file, is_xdg, config)


def get_config(config=None, config_file=None) -> dict:
    """Return the effective configuration as a nested ``dict``.

    Values from the config file are deep-updated with *config*, then
    with the ``PELICANCTL_*`` environment variables.
    """
    _config = config or {}
    config_file, is_xdg, config = parse_config_file(config_file)

    config_dict: dict = defaultdict(dict)
    for sec in config.sections():
        for k, v in config.items(sec):
            if k is None or v is None or v == '':
                continue
            config_dict[sec][k] = v

    # Recursive/deep update.
    deep_update(config_dict, _config)

    for (section, key), env_var in ENV_OVERRIDES.items():
        value = os.environ.get(env_var)
        if value:
            config_dict[section][key] = value

    return {k: v for k, v in config_dict.items() if v}


def write_config_file(updates: Mapping, config_file=None) -> str:
    """Merge *updates* into the config file and write it back.

    :param updates: ``{section: {key: value}}``. A value of ``None``
        removes the key.
    :returns: The path of the written file.
    """
    config_file, is_xdg, config = parse_config_file(config_file)

    for section, values in updates.items():
        if not config.has_section(section):
            config.add_section(section)
        for key, value in values.items():
            if value is None:
                config.remove_option(section, key)
            else:
                config.set(section, key, str(value))

    # Create directory if needed.
    config_directory = os.path.dirname(config_file)
    if is_xdg and not os.path.exists(config_directory):
        # os.makedirs does not apply the mode for intermediate directories since Python 3.7.
        os.makedirs(os.path.dirname(config_directory), mode=0o700, exist_ok=True)
        os.mkdir(config_directory, 0o700)
    elif config_directory:
        os.makedirs(config_directory, exist_ok=True)

    # Write config file.
    with open(config_file, 'w', encoding='utf-8') as fh:
        os.chmod(config_file, 0o600)
        config.write(fh)

    return config_file


def get_config_value(config_file, section: str, key: str) -> str | None:
    """Read a single value from the config file, ignoring the environment."""
    _, _, config = parse_config_file(config_file)
    value = config.get(section, key, fallback=None)
    return value or None
