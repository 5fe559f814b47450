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
import logging
import os
import threading

from pelicanctl import utils
from pelicanctl.bulk.commands import prepare_targets, run_bulk
from pelicanctl.bulk.report import build_report, print_results, print_summary
from pelicanctl.cli.cli_utils import add_bulk_arguments, add_command, add_group
from pelicanctl.exceptions import PelicanError, handle_error

logger = logging.getLogger(__name__)


def setup(subparsers):
    """
    Setup args for admin backup commands.

    Args:
        subparsers: subparser object passed from pc.py
    """
    _, backup_subparsers = add_group(subparsers, "backup", help="manage server backups")

    list_parser = add_command(backup_subparsers, "list", help="list backups of a server")
    list_parser.add_argument("server", help="server ID or UUID")
    list_parser.set_defaults(func=main_list)

    create_parser = add_command(backup_subparsers, "create",
                                help="create backups of one or more servers")
    add_bulk_arguments(create_parser)
    create_parser.add_argument("--name", help="backup name")
    ignore_group = create_parser.add_mutually_exclusive_group()
    ignore_group.add_argument("--ignore",
                              action="append",
                              metavar="PATTERN",
                              help=("file or pattern to leave out, comma separated values "
                                    "allowed, may be given multiple times"))
    ignore_group.add_argument("--ignore-file",
                              metavar="PATH",
                              help="file of ignore patterns, one per line like .gitignore")
    create_parser.add_argument("--locked",
                               action="store_true",
                               help="lock the backups against deletion")
    create_parser.add_argument("--save-pairs",
                               metavar="FILE",
                               help="write server,backup-uuid lines for created backups")
    create_parser.set_defaults(func=main_create)

    view_parser = add_command(backup_subparsers, "view",
                              help="show backups given as SERVER BACKUP pairs")
    view_parser.add_argument("pairs",
                             nargs="*",
                             metavar="PAIR",
                             help="server identifier followed by its backup UUID, repeated")
    view_parser.add_argument("--from-file",
                             metavar="PATH",
                             help="read server,backup-uuid pairs from a file")
    view_parser.set_defaults(func=main_view)

    delete_parser = add_command(backup_subparsers, "delete", help="delete a backup")
    delete_parser.add_argument("server", help="server ID or UUID")
    delete_parser.add_argument("backup", help="backup UUID")
    delete_parser.set_defaults(func=main_delete)


def main_list(args: argparse.Namespace) -> None:
    backups = args.session.application_api().list_backups(args.server)
    args.formatter.print_with_config(backups, "admin.backup")


def ignore_patterns(args: argparse.Namespace) -> str | None:
    """Return the ignore patterns as one newline separated string."""
    if args.ignore_file:
        try:
            with open(args.ignore_file, encoding="utf-8") as fh:
                patterns = [line.strip() for line in fh if line.strip()]
        except OSError as exc:
            raise PelicanError(f"failed to read ignore file: {exc}") from exc
    else:
        patterns = utils.split_identifiers(args.ignore or [])
    return "\n".join(patterns) or None


def save_pairs(path: str, pairs: list[tuple[str, str]]) -> None:
    """Write ``server,backup-uuid`` lines readable only by the owner."""
    fd = os.open(path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
    with os.fdopen(fd, "w", encoding="utf-8") as fh:
        for server, backup in pairs:
            fh.write(f"{server},{backup}\n")
    os.chmod(path, 0o600)


def main_create(args: argparse.Namespace) -> None:
    """
    Main entrypoint for 'pelicanctl admin backup create'.
    """
    ignored = ignore_patterns(args)
    api = args.session.application_api()
    targets = prepare_targets(args, args.formatter, api.list_server_uuids,
                              "backup", description="create backups for")
    if targets is None:
        return

    created: dict = {}
    lock = threading.Lock()
    finished: list = []

    def make_action(server):
        def create():
            backup = api.create_backup(server, name=args.name, ignored=ignored,
                                       is_locked=args.locked)
            with lock:
                created[create] = utils.get_attr(backup, "uuid")
        return create

    def backup_uuid(result) -> dict:
        uuid = created.get(result.operation.action)
        return {"backup_uuid": uuid} if uuid else {}

    def render(results, summary):
        finished.extend(results)
        if args.formatter.is_json:
            args.formatter.print_json(build_report(results, summary, per_result=backup_uuid))
        else:
            print_results(args.formatter, results, "backup created")
            print_summary(args.formatter, summary)

    try:
        run_bulk(args, args.formatter, targets, make_action,
                 action_name="backup",
                 describe="backup created",
                 always_fatal=True,
                 noun="backup creation(s)",
                 render=render)
    finally:
        if args.save_pairs:
            pairs = [(r.operation.id, created[r.operation.action]) for r in finished
                     if r.success and created.get(r.operation.action)]
            if pairs:
                try:
                    save_pairs(args.save_pairs, pairs)
                except OSError as exc:
                    args.formatter.error(f"Failed to save pairs to file: {exc}")
                else:
                    args.formatter.success(
                        f"Saved {len(pairs)} server+backup pairs to {args.save_pairs}")


def pairs_from_args(values: list[str]) -> list[tuple[str, str]]:
    if len(values) % 2:
        raise PelicanError("requires server+backup pairs (even number of arguments)")
    return [(values[i], values[i + 1]) for i in range(0, len(values), 2)]


def main_view(args: argparse.Namespace) -> None:
    """
    Main entrypoint for 'pelicanctl admin backup view'.
    """
    if args.from_file:
        try:
            pairs = utils.read_backup_pairs(args.from_file)
        except OSError as exc:
            raise PelicanError(f"failed to read {args.from_file}: {exc}") from exc
    else:
        pairs = pairs_from_args(args.pairs)
    if not pairs:
        raise PelicanError("no backup pairs specified")

    api = args.session.application_api()
    backups = []
    for server, backup in pairs:
        try:
            backups.append(api.get_backup(server, backup))
        except PelicanError as exc:
            logger.debug(f"failed to get backup {server}/{backup}: {exc!r}")
            args.formatter.error(f"{server}/{backup}: {handle_error(exc).splitlines()[0]}")
    if not backups:
        raise PelicanError("no backups found")
    args.formatter.print_with_config(backups, "admin.backup")


def main_delete(args: argparse.Namespace) -> None:
    args.session.application_api().delete_backup(args.server, args.backup)
    args.formatter.success("Backup deleted successfully")
