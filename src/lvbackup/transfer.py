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

from enum import Enum

from .snapshot import SessionState

DRY_RUN_FLAG = "--dry-run"


class Outcome(Enum):
    SUCCEEDED = "succeeded"
    PRECONDITION_FAILED = "precondition failed"
    TRANSFER_FAILED = "transfer failed"
    SNAPSHOT_FAILED = "snapshot failed"


def build_rsync_args(base_args, exclusions, dry_run=False):
    args = list(base_args)
    if dry_run:
        args.append(DRY_RUN_FLAG)
    # One flag per pattern, in order
    args.extend(["--exclude=" + pattern for pattern in exclusions])
    return args


class TransferExecutor:
    def __init__(self, config, tools, dry_run=False):
        self._config = config
        self._tools = tools
        self.dry_run = dry_run

    def remote_spec(self, volume):
        return f"{self._config.remote}:{volume.destination_path}/"

    def transfer(self, session, volume, exclusions, base_args=None):
        """Copy the contents of the mounted snapshot to the volume's remote
        destination.  Returns (outcome, returncode)."""
        if base_args is None:
            base_args = self._config.rsync_args
        session.advance(SessionState.SYNCING)
        args = build_rsync_args(base_args, exclusions, self.dry_run)
        # Trailing slash: copy the contents of the mount point, not the
        # mount point itself
        local_path = session.mount_point.rstrip("/") + "/"
        ret = self._tools.copy(args, local_path, self.remote_spec(volume))
        if ret:
            return Outcome.TRANSFER_FAILED, ret
        return Outcome.SUCCEEDED, ret
