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


from __future__ import annotations

import argparse
from functools import partial
from typing import Callable

from pelicanctl.api_base import POWER_SIGNALS
from pelicanctl.bulk.commands import prepare_targets, run_bulk
from pelicanctl.cli.cli_utils import add_bulk_arguments, add_command, add_group


def setup(subparsers):
    """
    Setup args for client power commands.

    Args:
        subparsers: subparser object passed from pc.py
    """
    _, power_subparsers = add_group(subparsers, "power",
                                    help="start, stop, restart or kill servers")
    add_power_commands(power_subparsers, lambda args: args.session.client_api())


def add_power_commands(subparsers, get_api: Callable, always_fatal: bool = False) -> None:
    """Add one bulk subcommand per power signal.

    :param get_api: Called with the parsed arguments, returns the API
        adapter the signals are sent through.
    :param always_fatal: Fail the command on any failed server, even
        with ``--continue-on-error``.
    """
    for signal in POWER_SIGNALS:
        parser = add_command(subparsers, signal, help=f"{signal} one or more servers")
        add_bulk_arguments(parser)
        parser.set_defaults(func=partial(main_power,
                                         signal=signal,
                                         get_api=get_api,
                                         always_fatal=always_fatal))


def main_power(args: argparse.Namespace, signal: str, get_api: Callable,
               always_fatal: bool = False) -> None:
    """
    Main entrypoint for the power commands.
    """
    api = get_api(args)
    targets = prepare_targets(args, args.formatter, api.list_server_uuids, signal)
    if targets is None:
        return
    run_bulk(args, args.formatter, targets,
             lambda server: partial(api.send_power, server, signal),
             action_name=signal,
             describe=signal,
             always_fatal=always_fatal,
             extra={"action": signal})
