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
    Setup args for client backup commands.

    Args:
        subparsers: subparser object passed from pc.py
    """
    _, backup_subparsers = add_group(subparsers, "backup", help="manage server backups")

    list_parser = add_command(backup_subparsers, "list", help="list backups of a server")
    list_parser.add_argument("server", help="server UUID or ID")
    list_parser.set_defaults(func=main_list)

    create_parser = add_command(backup_subparsers, "create", help="create a backup")
    create_parser.add_argument("server", help="server UUID or ID")
    create_parser.add_argument("--name", help="backup name")
    create_parser.add_argument("--ignored",
                               metavar="PATTERNS",
                               help="files to leave out, newline separated like .gitignore")
    create_parser.add_argument("--locked",
                               action="store_true",
                               help="lock the backup against deletion")
    create_parser.set_defaults(func=main_create)


def main_list(args: argparse.Namespace) -> None:
    backups = args.session.client_api().list_backups(args.server)
    args.formatter.print_with_config(backups, "client.backup")


def main_create(args: argparse.Namespace) -> None:
    backup = args.session.client_api().create_backup(args.server,
                                                     name=args.name,
                                                     ignored=args.ignored,
                                                     is_locked=args.locked)
    if args.formatter.is_json:
        args.formatter.print_json(backup)
    else:
        args.formatter.success("Backup created successfully")
        args.formatter.print(backup)
