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


from pelicanctl.cli.cli_utils import add_group
from pelicanctl.cli.pc_client_power import add_power_commands


def setup(subparsers):
    """
    Setup args for admin power commands.

    Args:
        subparsers: subparser object passed from pc.py
    """
    _, power_subparsers = add_group(subparsers, "power",
                                    help="start, stop, restart or kill any server")
    add_power_commands(power_subparsers,
                       lambda args: args.session.application_api(),
                       always_fatal=True)
