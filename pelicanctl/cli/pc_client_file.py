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
import os
import posixpath
import sys

from pelicanctl.cli.cli_utils import add_command, add_group
from pelicanctl.exceptions import PelicanError


def setup(subparsers):
    """
    Setup args for client file commands.

    Args:
        subparsers: subparser object passed from pc.py
    """
    _, file_subparsers = add_group(subparsers, "file", help="list and download server files")

    list_parser = add_command(file_subparsers, "list", help="list files in a directory")
    list_parser.add_argument("server", help="server UUID or ID")
    list_parser.add_argument("directory_arg",
                             nargs="?",
                             metavar="DIRECTORY",
                             help="directory to list (default: /)")
    list_parser.add_argument("-d", "--directory",
                             help="same as DIRECTORY")
    list_parser.set_defaults(func=main_list)

    download_parser = add_command(file_subparsers, "download", help="download a file")
    download_parser.add_argument("server", help="server UUID or ID")
    download_parser.add_argument("path", help="path of the file on the server")
    download_parser.add_argument("local_path",
                                 nargs="?",
                                 metavar="LOCAL_PATH",
                                 help=("local file to write to, '-' for stdout "
                                       "(default: the remote file name)"))
    download_parser.add_argument("-o", "--output",
                                 metavar="FILE",
                                 help="same as LOCAL_PATH")
    download_parser.set_defaults(func=main_download)


def main_list(args: argparse.Namespace) -> None:
    directory = args.directory_arg or args.directory or "/"
    files = args.session.client_api().list_files(args.server, directory=directory)
    args.formatter.print_with_config(files, "client.file")


def main_download(args: argparse.Namespace) -> None:
    """
    Main entrypoint for 'pelicanctl client file download'.
    """
    api = args.session.client_api()
    output = args.local_path or args.output
    if output == "-":
        api.download_file(args.server, args.path, sys.stdout.buffer)
        sys.stdout.buffer.flush()
        return

    local_path = output or posixpath.basename(args.path.rstrip("/"))
    if not local_path:
        raise PelicanError(f"cannot derive a local file name from '{args.path}', "
                           "give LOCAL_PATH")
    try:
        fh = open(local_path, "wb")
    except OSError as exc:
        raise PelicanError(f"failed to create {local_path}: {exc}") from exc
    try:
        with fh:
            written = api.download_file(args.server, args.path, fh)
    except Exception:
        os.remove(local_path)
        raise
    args.formatter.success(f"Downloaded {args.path} to {local_path} ({written} bytes)")
