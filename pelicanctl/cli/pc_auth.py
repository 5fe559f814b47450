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
import sys

from pelicanctl import login, logout
from pelicanctl.auth import API_TYPES
from pelicanctl.cli.cli_utils import add_command, add_group
from pelicanctl.exceptions import AuthenticationError


def setup(subparsers):
    """
    Setup args for auth commands.

    Args:
        subparsers: subparser object passed from pc.py
    """
    _, auth_subparsers = add_group(subparsers, "auth", help="manage API credentials")

    login_parser = add_command(auth_subparsers, "login",
                               help="store an API token (in the system keyring when available)")
    login_parser.add_argument("api_type",
                              choices=API_TYPES,
                              help="which API the token is for")
    login_parser.add_argument("--url",
                              metavar="URL",
                              help="panel URL, prompted for when not configured yet")
    login_parser.add_argument("--token-stdin",
                              action="store_true",
                              help="read the token from stdin instead of prompting")
    login_parser.set_defaults(func=main_login)

    logout_parser = add_command(auth_subparsers, "logout",
                                help="remove a stored API token")
    logout_parser.add_argument("api_type",
                               choices=API_TYPES,
                               help="which API the token is for")
    logout_parser.set_defaults(func=main_logout)


def main_login(args: argparse.Namespace) -> None:
    """
    Main entrypoint for 'pelicanctl auth login'.
    """
    token = ""
    if args.token_stdin:
        token = sys.stdin.readline().strip()
        if not token:
            raise AuthenticationError("token cannot be empty")
    where = login(args.api_type,
                  token=token,
                  base_url=args.url or "",
                  config_file=args.session.config_file,
                  token_store=args.session.token_store)
    location = "system keyring" if where == "keyring" else "config file"
    args.formatter.success(f"{args.api_type.capitalize()} API token saved to {location}")


def main_logout(args: argparse.Namespace) -> None:
    """
    Main entrypoint for 'pelicanctl auth logout'.
    """
    logout(args.api_type,
           config_file=args.session.config_file,
           token_store=args.session.token_store)
    args.formatter.success(f"{args.api_type.capitalize()} API token removed")
