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


from pelicanctl.cli.cli_utils import add_crud_commands, add_group


def setup(subparsers):
    """
    Setup args for admin node commands.

    Args:
        subparsers: subparser object passed from pc.py
    """
    _, node_subparsers = add_group(subparsers, "node", help="manage nodes")
    add_crud_commands(node_subparsers, "nodes", "node", "admin.node")
