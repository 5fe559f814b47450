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
import json
import os
import sys
from datetime import datetime
from functools import partial

from pelicanctl.bulk.executor import DEFAULT_MAX_CONCURRENCY
from pelicanctl.exceptions import PelicanError


def global_options() -> argparse.ArgumentParser:
    """Parent parser repeating the global flags on leaf commands.

    Defaults are suppressed so that a flag given before the command is
    not reset by the leaf parser.
    """
    parent = argparse.ArgumentParser(add_help=False)
    parent.add_argument("--json",
                        action="store_true",
                        default=argparse.SUPPRESS,
                        help="output in JSON format")
    parent.add_argument("--verbose",
                        action="store_true",
                        default=argparse.SUPPRESS,
                        help="enable verbose (debug) logging")
    parent.add_argument("--quiet",
                        action="store_true",
                        default=argparse.SUPPRESS,
                        help="only print errors")
    return parent


def add_command(subparsers, name: str, **kwargs) -> argparse.ArgumentParser:
    """``subparsers.add_parser`` that also accepts the global flags."""
    kwargs.setdefault("parents", [global_options()])
    return subparsers.add_parser(name, **kwargs)


def add_group(subparsers, name: str, help: str) -> tuple[argparse.ArgumentParser, object]:
    """Add a command group, e.g. ``client server``.

    Running the group without a subcommand prints its help and exits 1.
    """
    parser = subparsers.add_parser(name, help=help)
    group_subparsers = parser.add_subparsers(title="commands",
                                             dest=f"{name}_command",
                                             metavar="{command}")
    parser.set_defaults(func=lambda args: print_help_and_exit(parser))
    return parser, group_subparsers


def print_help_and_exit(parser: argparse.ArgumentParser):
    parser.print_help(sys.stderr)
    sys.exit(1)


def add_server_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("servers",
                        nargs="*",
                        metavar="SERVER",
                        help="server identifiers (UUID or ID), comma separated values allowed")


def add_bulk_arguments(parser: argparse.ArgumentParser) -> None:
    """Add the flags shared by all bulk commands."""
    add_server_arguments(parser)
    bulk = parser.add_argument_group("bulk options")
    bulk.add_argument("--all",
                      action="store_true",
                      help="operate on all servers")
    bulk.add_argument("--from-file",
                      metavar="PATH",
                      help="read server identifiers from a file, one per line")
    bulk.add_argument("--max-concurrency",
                      type=int,
                      default=DEFAULT_MAX_CONCURRENCY,
                      metavar="N",
                      help=("maximum number of concurrent operations "
                            f"(default: {DEFAULT_MAX_CONCURRENCY})"))
    bulk.add_argument("--continue-on-error",
                      action="store_true",
                      help="do not fail the command when some operations fail")
    bulk.add_argument("--fail-fast",
                      action="store_true",
                      help="stop starting new operations after the first failure")
    bulk.add_argument("--dry-run",
                      action="store_true",
                      help="show what would be done without doing it")
    bulk.add_argument("-y", "--yes",
                      action="store_true",
                      help="skip the confirmation prompt")


class JSONDataAction(argparse.Action):
    """Parse the option value as a JSON object."""
    def __call__(self, parser, namespace, values, option_string=None):
        try:
            obj = json.loads(values)
        except json.JSONDecodeError:
            parser.error(f"Invalid JSON format for {option_string}: {values}")
        if not isinstance(obj, dict):
            parser.error(f"{option_string} must be a JSON object")
        setattr(namespace, self.dest, obj)


def add_data_argument(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--data",
                        action=JSONDataAction,
                        metavar="JSON",
                        help="request body as a JSON object (read from stdin if omitted)")


def read_json_data(args: argparse.Namespace, stdin=None) -> dict:
    """Return ``--data``, or a JSON object read from stdin."""
    if getattr(args, "data", None) is not None:
        return args.data
    stdin = stdin or sys.stdin
    if stdin.isatty():
        raise PelicanError("no data provided, use --data or pipe JSON to stdin")
    try:
        data = json.load(stdin)
    except json.JSONDecodeError as exc:
        raise PelicanError(f"invalid JSON on stdin: {exc}") from exc
    if not isinstance(data, dict):
        raise PelicanError("JSON data must be an object")
    return data


def validate_rfc3339(value: str) -> str:
    """
    Check that the value is an RFC3339 timestamp.

    Raises:
        argparse.ArgumentTypeError: If the value does not parse.
    """
    try:
        datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        raise argparse.ArgumentTypeError(
            f"'{value}' is not a valid RFC3339 timestamp (e.g. 2024-01-31T12:00:00Z)")
    return value


def int_in_range(low: int, high: int):
    def _check(value: str) -> int:
        try:
            number = int(value)
        except ValueError:
            raise argparse.ArgumentTypeError(f"'{value}' is not an integer")
        if not low <= number <= high:
            raise argparse.ArgumentTypeError(f"must be between {low} and {high}")
        return number
    return _check


def validate_config_path(path):
    """
    Validate the path to the configuration file.

    ``auth`` commands may create the file, every other command needs it
    to exist.

    Returns:
        str: Validated path to the configuration file.
    """
    if "auth" not in sys.argv and not os.path.isfile(path):
        raise argparse.ArgumentTypeError(f"config file '{path}' does not exist")
    return path


def exit_on_signal(sig, frame):
    """
    Exit the program cleanly upon receiving a specified signal.

    This function is designed to be used as a signal handler. When a signal
    (such as SIGINT or SIGPIPE) is received, it exits the program with an
    exit code of 128 plus the signal number. This convention helps to
    distinguish between regular exit codes and those caused by signals.
    """
    exit_code = 128 + sig
    sys.exit(exit_code)


def add_crud_commands(subparsers, resource: str, noun: str, resource_type: str) -> None:
    """Add ``list``, ``view``, ``create``, ``update`` and ``delete`` for an
    application API resource such as ``nodes``.

    :param resource: Path segment of the resource, e.g. ``'nodes'``.
    :param noun: Singular display name, e.g. ``'node'``.
    :param resource_type: Table config used by ``list``.
    """
    list_parser = add_command(subparsers, "list", help=f"list all {resource}")
    list_parser.set_defaults(func=partial(main_crud_list, resource=resource,
                                          resource_type=resource_type))

    view_parser = add_command(subparsers, "view", help=f"show {noun} details")
    view_parser.add_argument("id", help=f"{noun} ID")
    view_parser.set_defaults(func=partial(main_crud_view, resource=resource))

    create_parser = add_command(subparsers, "create", help=f"create a {noun}")
    add_data_argument(create_parser)
    create_parser.set_defaults(func=partial(main_crud_create, resource=resource, noun=noun))

    update_parser = add_command(subparsers, "update", help=f"update a {noun}")
    update_parser.add_argument("id", help=f"{noun} ID")
    add_data_argument(update_parser)
    update_parser.set_defaults(func=partial(main_crud_update, resource=resource, noun=noun))

    delete_parser = add_command(subparsers, "delete", help=f"delete a {noun}")
    delete_parser.add_argument("id", help=f"{noun} ID")
    delete_parser.set_defaults(func=partial(main_crud_delete, resource=resource, noun=noun))


def main_crud_list(args: argparse.Namespace, resource: str, resource_type: str) -> None:
    items = args.session.application_api().list_resource(resource)
    args.formatter.print_with_config(items, resource_type)


def main_crud_view(args: argparse.Namespace, resource: str) -> None:
    args.formatter.print(args.session.application_api().get_resource(resource, args.id))


def main_crud_create(args: argparse.Namespace, resource: str, noun: str) -> None:
    data = read_json_data(args)
    item = args.session.application_api().create_resource(resource, data)
    _print_changed(args, item, f"{noun.capitalize()} created successfully")


def main_crud_update(args: argparse.Namespace, resource: str, noun: str) -> None:
    data = read_json_data(args)
    item = args.session.application_api().update_resource(resource, args.id, data)
    _print_changed(args, item, f"{noun.capitalize()} updated successfully")


def main_crud_delete(args: argparse.Namespace, resource: str, noun: str) -> None:
    args.session.application_api().delete_resource(resource, args.id)
    args.formatter.success(f"{noun.capitalize()} deleted successfully")


def _print_changed(args: argparse.Namespace, item: dict, message: str) -> None:
    if args.formatter.is_json:
        args.formatter.print_json(item)
        return
    args.formatter.success(message)
    args.formatter.print(item)
