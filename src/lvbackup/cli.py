#
# lvbackup - snapshot-consistent backup of LVM volumes to a remote host
#
# Copyright (c) 2014-2021 Carnegie Mellon University
#
# SPDX-License-Identifier: GPL-2.0-only
#
# This program is free software; you can redistribute it and/or modify it
# under the terms of version 2 of the GNU General Public License as
# published by the Free Software Foundation.
#
# This program is distributed in the hope that it will be useful, but
# WITHOUT ANY WARRANTY; without even the implied warranty of MERCHANTABILITY
# or FITNESS FOR A PARTICULAR PURPOSE.  See the GNU General Public License
# for more details.
#
# You should have received a copy of the GNU General Public License along
# with this program; if not, write to the Free Software Foundation, Inc.,
# 51 Franklin Street, Fifth Floor, Boston, MA 02110-1301 USA.
#

from pathlib import Path

import click

from .command import default_config_path
from .config import load_config
from .run import check, run
from .snapshot import cleanup, ls
from .template import mkconf

CONTEXT_SETTINGS = {"help_option_names": ["-h", "--help"]}


@click.group(context_settings=CONTEXT_SETTINGS)
@click.option(
    "-c",
    "--config-file",
    type=click.Path(dir_okay=False, path_type=Path),
    default=default_config_path,
    show_default=True,
    help="path to config file",
)
@click.pass_context
def lvbackup_cli(ctx, config_file):
    # Templates are useful before any config file exists
    if ctx.invoked_subcommand == "mkconf":
        return
    if not config_file.exists():
        raise click.UsageError(f"Config file {config_file} does not exist")
    ctx.obj = load_config(config_file)


lvbackup_cli.add_command(run)
lvbackup_cli.add_command(check)
lvbackup_cli.add_command(ls)
lvbackup_cli.add_command(cleanup)
lvbackup_cli.add_command(mkconf)
