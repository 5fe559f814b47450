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
import signal
import sys

import requests

from pelicanctl import __version__, get_session
from pelicanctl.cli import (
    pc_admin_backup,
    pc_admin_node,
    pc_admin_power,
    pc_admin_server,
    pc_admin_user,
    pc_auth,
    pc_client_backup,
    pc_client_database,
    pc_client_file,
    pc_client_power,
    pc_client_server,
    pc_version,
)
from pelicanctl.cli.cli_utils import add_group, exit_on_signal, validate_config_path
from pelicanctl.exceptions import PelicanError, handle_error
from pelicanctl.output import FORMAT_JSON, FORMAT_TABLE, Formatter


def install_signal_handlers():
    # Handle broken pipe
    try:
        signal.signal(signal.SIGPIPE, signal.SIG_DFL)
    except AttributeError:
        # Non-unix support
        pass

    # Handle <Ctrl-C>
    signal.signal(signal.SIGINT, exit_on_signal)


def get_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
            prog="pelicanctl",
            description="A command line interface to the Pelican panel.",
            epilog=("Tokens are read from PELICANCTL_CLIENT_TOKEN / "
                    "PELICANCTL_ADMIN_TOKEN,\nthe system keyring, or the config file.\n\n"
                    "See 'pelicanctl {command} --help' for help on a specific command."),
            formatter_class=argparse.RawTextHelpFormatter)  # support for \n in epilog

    parser.add_argument("-v", "--version",
                        action="version",
                        version=__version__)
    parser.add_argument("-c", "--config",
                        action="store",
                        type=validate_config_path,
                        metavar="FILE",
                        help="path to configuration file")
    parser.add_argument("--json",
                        action="store_true",
                        default=False,
                        help="output in JSON format")
    parser.add_argument("--verbose",
                        action="store_true",
                        default=False,
                        help="enable verbose (debug) logging")
    parser.add_argument("--quiet",
                        action="store_true",
                        default=False,
                        help="only print errors")

    subparsers = parser.add_subparsers(title="commands",
                                       dest="command",
                                       metavar="{command}")

    pc_auth.setup(subparsers)
    pc_version.setup(subparsers)

    _, client_subparsers = add_group(subparsers, "client",
                                     help="client API commands (server owners)")
    pc_client_server.setup(client_subparsers)
    pc_client_power.setup(client_subparsers)
    pc_client_backup.setup(client_subparsers)
    pc_client_database.setup(client_subparsers)
    pc_client_file.setup(client_subparsers)

    _, admin_subparsers = add_group(subparsers, "admin",
                                    help="application API commands (administrators)")
    pc_admin_node.setup(admin_subparsers)
    pc_admin_user.setup(admin_subparsers)
    pc_admin_server.setup(admin_subparsers)
    pc_admin_power.setup(admin_subparsers)
    pc_admin_backup.setup(admin_subparsers)

    return parser


def main():
    """
    Main entry point for the CLI.
    """
    install_signal_handlers()
    parser = get_parser()
    args = parser.parse_args()

    # Check if any arguments were provided
    if not args.command:
        parser.print_help(sys.stderr)
        sys.exit(1)

    args.formatter = Formatter(FORMAT_JSON if args.json else FORMAT_TABLE,
                               quiet=args.quiet)
    if args.quiet:
        log_level = "ERROR"
    elif args.verbose:
        log_level = "DEBUG"
    else:
        log_level = "WARNING"

    try:
        args.session = get_session(config_file=args.config, debug=args.verbose)
        args.session.set_stream_logger(log_level, json_format=args.json)
        args.func(args)
    except (PelicanError, requests.exceptions.RequestException) as exc:
        print(f"Error: {handle_error(exc)}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
