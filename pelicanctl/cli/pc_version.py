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

from pelicanctl import __version__
from pelicanctl.cli.cli_utils import add_command


def setup(subparsers):
    """
    Setup args for version command.

    Args:
        subparsers: subparser object passed from pc.py
    """
    parser = add_command(subparsers, "version", help="print version information")
    parser.set_defaults(func=main)


def main(args: argparse.Namespace) -> None:
    """
    Main entrypoint for 'pelicanctl version'.
    """
    if args.formatter.is_json:
        args.formatter.print_json({"version": __version__})
    else:
        args.formatter.line(f"pelicanctl version {__version__}")
