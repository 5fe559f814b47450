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


import argparse
from functools import partial

from pelicanctl.bulk.commands import prepare_targets, run_bulk
from pelicanctl.cli.cli_utils import add_bulk_arguments, add_command, add_group


def setup(subparsers):
    """
    Setup args for client server commands.

    Args:
        subparsers: subparser object passed from pc.py
    """
    _, server_subparsers = add_group(subparsers, "server", help="view and control your servers")

    list_parser = add_command(server_subparsers, "list", help="list your servers")
    list_parser.set_defaults(func=main_list)

    view_parser = add_command(server_subparsers, "view", help="show server details")
    view_parser.add_argument("server", help="server UUID or ID")
    view_parser.set_defaults(func=main_view)

    resources_parser = add_command(server_subparsers, "resources",
                                   help="show current resource usage")
    resources_parser.add_argument("server", help="server UUID or ID")
    resources_parser.set_defaults(func=main_resources)

    command_parser = add_command(server_subparsers, "command",
                                 help="send a console command to one or more servers")
    add_bulk_arguments(command_parser)
    command_parser.add_argument("--command",
                                required=True,
                                dest="console_command",
                                metavar="CMD",
                                help="console command to send")
    command_parser.set_defaults(func=main_command)


def main_list(args: argparse.Namespace) -> None:
    servers = args.session.client_api().list_servers()
    args.formatter.print_with_config(servers, "client.server")


def main_view(args: argparse.Namespace) -> None:
    server = args.session.client_api().get_server(args.server)
    args.formatter.print(server)


def main_resources(args: argparse.Namespace) -> None:
    resources = args.session.client_api().get_resources(args.server)
    if args.formatter.is_json:
        args.formatter.print_json(resources)
    else:
        args.formatter.print_with_config([resources], "client.resources")


def main_command(args: argparse.Namespace) -> None:
    """
    Main entrypoint for 'pelicanctl client server command'.
    """
    api = args.session.client_api()
    targets = prepare_targets(args, args.formatter, api.list_server_uuids,
                              "command", description="send a command to")
    if targets is None:
        return
    run_bulk(args, args.formatter, targets,
             lambda server: partial(api.send_command, server, args.console_command),
             action_name="command",
             describe="command sent",
             extra={"command": args.console_command})
