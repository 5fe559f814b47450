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

from pelicanctl.cli.cli_utils import add_command, add_group


def setup(subparsers):
    """
    Setup args for client database commands.

    Args:
        subparsers: subparser object passed from pc.py
    """
    _, database_subparsers = add_group(subparsers, "database", help="view server databases")

    list_parser = add_command(database_subparsers, "list", help="list databases of a server")
    list_parser.add_argument("server", help="server UUID or ID")
    list_parser.set_defaults(func=main_list)


def main_list(args: argparse.Namespace) -> None:
    databases = args.session.client_api().list_databases(args.server)
    args.formatter.print_with_config(databases, "client.database")
