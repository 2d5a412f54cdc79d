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

"""Exceptions raised while backing up volumes."""


class BackupError(Exception):
    """Base class for lvbackup failures.  Carries the affected volume."""

    def __init__(self, volume, message):
        Exception.__init__(self, message)
        self.volume = volume

    def __str__(self):
        return f"{self.volume}: {self.args[0]}"


class InvalidVolumeName(BackupError, ValueError):
    """Volume name is empty after stripping path separators."""

    def __init__(self, raw_name):
        BackupError.__init__(self, raw_name, "Invalid volume name")

    def __str__(self):
        return f"Invalid volume name: {self.volume!r}"


class PreconditionFailed(BackupError):
    """Remote destination directory does not exist.  Aborts the run."""


class SnapshotFailed(BackupError):
    """Snapshot could not be created or mounted.  Aborts the run."""


class TransferFailed(BackupError):
    """rsync exited with non-zero status."""

    def __init__(self, volume, returncode):
        BackupError.__init__(self, volume, f"rsync failed with code {returncode}")
        self.returncode = returncode


class TeardownError(BackupError):
    """Unmounting or removing the snapshot failed."""
