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
import threading
from functools import partial

from pelicanctl.bulk.commands import confirm, prepare_targets, run_bulk
from pelicanctl.bulk.report import error_text
from pelicanctl.cli.cli_utils import (
    add_bulk_arguments,
    add_command,
    add_data_argument,
    add_group,
    int_in_range,
    read_json_data,
    validate_rfc3339,
)

UNKNOWN = "unknown"

SERVER_ACTIONS = {
    "suspend": "suspended",
    "unsuspend": "unsuspended",
    "reinstall": "reinstall started",
}


def setup(subparsers):
    """
    Setup args for admin server commands.

    Args:
        subparsers: subparser object passed from pc.py
    """
    _, server_subparsers = add_group(subparsers, "server", help="manage all servers")

    list_parser = add_command(server_subparsers, "list", help="list all servers")
    list_parser.set_defaults(func=main_list)

    view_parser = add_command(server_subparsers, "view", help="show server details")
    view_parser.add_argument("server", help="server ID or UUID")
    view_parser.set_defaults(func=main_view)

    create_parser = add_command(server_subparsers, "create", help="create a server")
    add_data_argument(create_parser)
    create_parser.set_defaults(func=main_create)

    delete_parser = add_command(server_subparsers, "delete", help="delete a server")
    delete_parser.add_argument("server", help="server ID or UUID")
    delete_parser.add_argument("--force",
                               action="store_true",
                               help="force delete the server")
    delete_parser.add_argument("-y", "--yes",
                               action="store_true",
                               help="skip the confirmation prompt")
    delete_parser.set_defaults(func=main_delete)

    for action in SERVER_ACTIONS:
        action_parser = add_command(server_subparsers, action,
                                    help=f"{action} one or more servers")
        add_bulk_arguments(action_parser)
        action_parser.set_defaults(func=partial(main_action, action=action))

    health_parser = add_command(server_subparsers, "health",
                                help="show container status and crash detection")
    add_bulk_arguments(health_parser)
    health_parser.add_argument("--since",
                               type=validate_rfc3339,
                               metavar="RFC3339",
                               help="check for crashes since this date-time")
    health_parser.add_argument("--window",
                               type=int_in_range(1, 1440),
                               metavar="MINUTES",
                               help="time window in minutes (1-1440) for crash detection")
    health_parser.set_defaults(func=main_health)


def main_list(args: argparse.Namespace) -> None:
    servers = args.session.application_api().list_servers()
    args.formatter.print_with_config(servers, "admin.server")


def main_view(args: argparse.Namespace) -> None:
    args.formatter.print(args.session.application_api().get_server(args.server))


def main_create(args: argparse.Namespace) -> None:
    data = read_json_data(args)
    server = args.session.application_api().create_server(data)
    if args.formatter.is_json:
        args.formatter.print_json(server)
    else:
        args.formatter.success("Server created successfully")
        args.formatter.print(server)


def main_delete(args: argparse.Namespace) -> None:
    if not args.yes and not confirm("delete", 1):
        args.formatter.info("Operation cancelled")
        return
    args.session.application_api().delete_server(args.server, force=args.force)
    args.formatter.success("Server deleted successfully")


def main_action(args: argparse.Namespace, action: str) -> None:
    """
    Main entrypoint for 'pelicanctl admin server {suspend,unsuspend,reinstall}'.
    """
    api = args.session.application_api()
    targets = prepare_targets(args, args.formatter, api.list_server_uuids, action)
    if targets is None:
        return
    method = getattr(api, f"{action}_server")
    run_bulk(args, args.formatter, targets,
             lambda server: partial(method, server),
             action_name=action,
             describe=SERVER_ACTIONS[action],
             always_fatal=True,
             extra={"action": action})


def main_health(args: argparse.Namespace) -> None:
    """
    Main entrypoint for 'pelicanctl admin server health'.

    A single server prints its health document. Several servers are
    queried concurrently and shown as one table.
    """
    api = args.session.application_api()
    targets = prepare_targets(args, args.formatter, api.list_server_uuids,
                              "health", description="check health for")
    if targets is None:
        return

    if len(targets) == 1:
        args.formatter.print(api.get_health(targets[0], since=args.since, window=args.window))
        return

    # operation action -> health document
    documents: dict = {}
    lock = threading.Lock()

    def make_action(server):
        def check():
            health = api.get_health(server, since=args.since, window=args.window)
            with lock:
                documents[check] = health
        return check

    def render(results, summary):
        if args.formatter.is_json:
            args.formatter.print_json([health_entry(r, documents) for r in results])
            return
        rows = []
        for r in results:
            if not r.success:
                args.formatter.error(f"{r.operation.id}: {error_text(r)}")
            health = documents.get(r.operation.action)
            rows.append(health_row(r.operation.id, health, r.success))
        args.formatter.print_table(HEALTH_HEADERS, rows)

    run_bulk(args, args.formatter, targets, make_action,
             action_name="health",
             describe="healthy",
             render=render)


HEALTH_HEADERS = ["Server", "Name", "Container Status", "Healthy", "Crashed", "Checked At"]


def health_entry(result, documents: dict) -> dict:
    """JSON entry for one health check: the health document plus
    ``server_identifier``, or the identifier and the error."""
    server = result.operation.id
    if not result.success:
        return {"server_identifier": server, "error": error_text(result)}
    entry = dict(documents.get(result.operation.action) or {})
    entry["server_identifier"] = server
    return entry


def _flag(value) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return UNKNOWN


def health_row(server: str, health: dict | None, success: bool = True) -> list[str]:
    if not success or health is None:
        return [server, "", "error", "", "", ""]
    details = health.get("server")
    name = details.get("name") if isinstance(details, dict) else None
    container = health.get("container")
    if not isinstance(container, dict):
        container = {}
    status = container.get("status")
    checked_at = health.get("checked_at")
    return [
        server,
        name if isinstance(name, str) else UNKNOWN,
        status if isinstance(status, str) else UNKNOWN,
        _flag(container.get("healthy")),
        _flag(health.get("crashed")),
        checked_at if isinstance(checked_at, str) else UNKNOWN,
    ]
